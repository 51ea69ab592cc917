#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
复制结果与进度回调

提供目录树复制的统计结果、进度信息和进度跟踪器。
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, List, Tuple
import time


@dataclass
class ProgressInfo:
    """
    进度信息

    传递给进度回调函数的数据结构。
    """
    files_done: int           # 已处理文件数 (含失败)
    current_file: str         # 当前处理的源文件路径
    bytes_copied: int         # 已复制字节数
    elapsed_time: float       # 已耗时 (秒)

    @property
    def rate(self) -> float:
        """复制速率 (bytes/second)"""
        if self.elapsed_time == 0:
            return 0.0
        return self.bytes_copied / self.elapsed_time


@dataclass
class CopyResult:
    """
    目录树复制结果

    部分失败不会中止复制，失败项记录在 failed_files 中。
    """
    directory_count: int = 0      # 已建立镜像的目录数 (含已存在的)
    copied_count: int = 0
    failed_count: int = 0
    total_bytes: int = 0
    elapsed_time: float = 0.0
    failed_files: List[Tuple[str, Exception]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """是否全部成功"""
        return not self.failed_files

    def record_failure(self, path: str, error: Exception) -> None:
        self.failed_count += 1
        self.failed_files.append((path, error))

    def merge(self, other: 'CopyResult') -> None:
        """合并另一次复制的统计"""
        self.directory_count += other.directory_count
        self.copied_count += other.copied_count
        self.failed_count += other.failed_count
        self.total_bytes += other.total_bytes
        self.elapsed_time += other.elapsed_time
        self.failed_files.extend(other.failed_files)


# 进度回调函数类型
ProgressCallback = Callable[[ProgressInfo], None]


class ProgressTracker:
    """
    进度跟踪器

    封装进度计算和回调调用逻辑。
    """

    def __init__(
        self,
        callback: Optional[ProgressCallback] = None,
        callback_interval: float = 0.1  # 最小回调间隔 (秒)
    ):
        self._callback = callback
        self._callback_interval = callback_interval

        self._files_done = 0
        self._bytes_copied = 0
        self._start_time = time.time()
        self._last_callback_time = 0.0

    def update(self, file_path: str, bytes_copied: int = 0) -> None:
        """
        更新进度

        Args:
            file_path: 当前处理的文件路径
            bytes_copied: 本次复制的字节数
        """
        self._files_done += 1
        self._bytes_copied += bytes_copied

        if self._callback:
            now = time.time()
            # 限制回调频率
            if now - self._last_callback_time >= self._callback_interval:
                info = ProgressInfo(
                    files_done=self._files_done,
                    current_file=file_path,
                    bytes_copied=self._bytes_copied,
                    elapsed_time=now - self._start_time
                )
                self._callback(info)
                self._last_callback_time = now

    def finish(self) -> float:
        """完成并返回总耗时"""
        return time.time() - self._start_time
