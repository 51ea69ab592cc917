#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
目录树复制

从源存档的某个路径开始遍历，把目录结构镜像到目标存档，并逐个复制文件内容。
单个文件或目录的失败只记录并跳过，不中止整棵树的复制。
"""

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, Tuple

from .core.batch import CopyResult, ProgressCallback, ProgressTracker
from .core.listing import list_entries
from .core.schema import OpenFlags
from .driver.base import StorageDriver
from .exceptions import (
    CorruptedDataError,
    DriverError,
    ReliquaryError,
    SizeMismatchError,
    TraversalDepthError,
)
from .hooks.base import ChecksumHook
from .paths import SEPARATOR, encode_text, join_path


logger = logging.getLogger(__name__)

# 默认最大目录嵌套深度
DEFAULT_MAX_DEPTH = 64


def ensure_directory(driver: StorageDriver, archive: int, path: str) -> bool:
    """
    创建目录，已存在不视为错误

    Returns:
        True 表示新建，False 表示目录已存在

    Raises:
        DriverError: 创建失败
        InvalidPathError: 路径无法编码
    """
    try:
        driver.create_directory(archive, encode_text(path))
    except DriverError as e:
        if e.code == driver.already_exists_code:
            return False
        raise
    return True


@contextmanager
def _labelled(side: str) -> Iterator[None]:
    """给驱动错误的操作名加上 (source)/(dest) 标注"""
    try:
        yield
    except DriverError as e:
        raise DriverError(f"{e.operation} ({side})", e.code) from e


class TreeCopier:
    """
    目录树复制器

    使用显式栈迭代遍历，目录深度受 max_depth 限制。
    每个文件整块读入内存后一次写出 (面向存档规模的小文件)。
    """

    def __init__(
        self,
        driver: StorageDriver,
        checksum_hook: Optional[ChecksumHook] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        progress_callback: Optional[ProgressCallback] = None
    ):
        """
        初始化复制器

        Args:
            driver: 存储驱动
            checksum_hook: 写入后回读校验使用的算法，None 表示不校验
            max_depth: 最大目录嵌套深度 (根目录为 0)
            progress_callback: 进度回调
        """
        if max_depth < 0:
            raise ValueError(f"max_depth 不能为负数: {max_depth}")
        self._driver = driver
        self._checksum_hook = checksum_hook
        self._max_depth = max_depth
        self._progress_callback = progress_callback

    @property
    def max_depth(self) -> int:
        return self._max_depth

    def copy_tree(
        self,
        src_archive: int,
        src_path: str,
        dst_archive: int,
        dst_path: str
    ) -> CopyResult:
        """
        复制目录树

        Args:
            src_archive: 源存档句柄
            src_path: 源根路径 (空字符串表示存档根目录)
            dst_archive: 目标存档句柄
            dst_path: 目标根路径

        Returns:
            CopyResult，包含失败项列表
        """
        result = CopyResult()
        tracker = ProgressTracker(callback=self._progress_callback)

        stack: List[Tuple[str, str, int]] = [(src_path, dst_path, 0)]
        while stack:
            src_dir, dst_dir, depth = stack.pop()
            display_dir = src_dir or SEPARATOR

            if depth > self._max_depth:
                error = TraversalDepthError(display_dir, self._max_depth)
                logger.error("%s", error)
                result.record_failure(display_dir, error)
                continue

            try:
                ensure_directory(self._driver, dst_archive, dst_dir)
            except ReliquaryError as e:
                # 目标目录不存在时跳过整棵子树
                logger.error("%s", e)
                logger.error(" %s", display_dir)
                result.record_failure(display_dir, e)
                continue
            result.directory_count += 1

            # 空路径与根路径在底层 API 中含义不明确，统一按根目录枚举
            listing = list_entries(self._driver, src_archive, display_dir)
            if not listing.ok:
                result.record_failure(display_dir, listing.error)
                continue

            subdirs = []
            for entry in listing:
                child_src = join_path(src_dir, entry.name)
                child_dst = join_path(dst_dir, entry.name)
                if entry.is_directory:
                    subdirs.append((child_src, child_dst, depth + 1))
                    continue

                try:
                    copied = self.copy_file(src_archive, child_src, dst_archive, child_dst)
                except ReliquaryError as e:
                    logger.error("%s", e)
                    logger.error(" %s", child_src)
                    result.record_failure(child_src, e)
                    tracker.update(child_src, 0)
                    continue

                result.copied_count += 1
                result.total_bytes += copied
                tracker.update(child_src, copied)

            # 逆序入栈，保持按驱动返回顺序处理子目录
            stack.extend(reversed(subdirs))

        result.elapsed_time = tracker.finish()
        return result

    def copy_file(
        self,
        src_archive: int,
        src_path: str,
        dst_archive: int,
        dst_path: str
    ) -> int:
        """
        复制单个文件

        Returns:
            复制的字节数

        Raises:
            DriverError: 驱动调用失败
            SizeMismatchError: 读写字节数不符
            CorruptedDataError: 回读校验失败
            InvalidPathError: 路径无法编码
        """
        data = self._read_source(src_archive, src_path)
        self._write_dest(dst_archive, dst_path, data)
        if self._checksum_hook is not None:
            self._verify_dest(dst_archive, dst_path, data)
        logger.debug("Copied %s -> %s (%d bytes)", src_path, dst_path, len(data))
        return len(data)

    # ==================== 内部实现 ====================

    def _close_quietly(self, close: Callable[[int], None], handle: int) -> None:
        """在已有错误的路径上关闭句柄，关闭失败只记录日志"""
        try:
            close(handle)
        except DriverError as e:
            logger.error("%s", e)

    def _read_all(self, handle: int, operation: str) -> bytes:
        size = self._driver.get_file_size(handle)
        if size == 0:
            return b''
        data = self._driver.read_file(handle, 0, size)
        if len(data) != size:
            raise SizeMismatchError(operation, size, len(data))
        return data

    def _read_source(self, archive: int, path: str) -> bytes:
        with _labelled("source"):
            handle = self._driver.open_file(archive, encode_text(path), OpenFlags.READ)
            try:
                data = self._read_all(handle, "Read (source)")
            except ReliquaryError:
                self._close_quietly(self._driver.close_file, handle)
                raise
            self._driver.close_file(handle)
        return data

    def _write_dest(self, archive: int, path: str, data: bytes) -> None:
        with _labelled("dest"):
            handle = self._driver.open_file(
                archive, encode_text(path), OpenFlags.WRITE | OpenFlags.CREATE
            )
            try:
                if data:
                    written = self._driver.write_file(handle, 0, data)
                    if written != len(data):
                        raise SizeMismatchError("Write (dest)", len(data), written)
                # 覆盖已存在的较长文件时截掉多余部分
                self._driver.set_file_size(handle, len(data))
            except ReliquaryError:
                self._close_quietly(self._driver.close_file, handle)
                raise
            self._driver.close_file(handle)

    def _verify_dest(self, archive: int, path: str, data: bytes) -> None:
        expected = self._checksum_hook.compute(data)
        with _labelled("verify"):
            handle = self._driver.open_file(archive, encode_text(path), OpenFlags.READ)
            try:
                actual_data = self._read_all(handle, "Read (verify)")
            except ReliquaryError:
                self._close_quietly(self._driver.close_file, handle)
                raise
            self._driver.close_file(handle)

        if not self._checksum_hook.verify(actual_data, expected):
            raise CorruptedDataError(path, expected, self._checksum_hook.compute(actual_data))


def copy_tree(
    driver: StorageDriver,
    src_archive: int,
    src_path: str,
    dst_archive: int,
    dst_path: str,
    checksum_hook: Optional[ChecksumHook] = None,
    max_depth: int = DEFAULT_MAX_DEPTH
) -> CopyResult:
    """TreeCopier 的便捷函数形式"""
    copier = TreeCopier(driver, checksum_hook=checksum_hook, max_depth=max_depth)
    return copier.copy_tree(src_archive, src_path, dst_archive, dst_path)
