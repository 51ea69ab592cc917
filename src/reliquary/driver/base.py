#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
存储驱动与目录服务接口

复制引擎只依赖这里定义的能力接口，具体的挂载/打开/读写由实现类提供。
所有方法失败时抛出 DriverError(operation, code)。
"""

from abc import ABC, abstractmethod
from typing import List

from ..core.schema import ArchiveId, ContainerKind, DirectoryEntry, FormatInfo, OpenFlags
from ..paths import FsPath


class StorageDriver(ABC):
    """
    存储驱动

    句柄均为不透明整数，由打开方负责关闭。
    """

    # ==================== 存档 ====================

    @abstractmethod
    def open_archive(self, archive_id: ArchiveId, path: FsPath) -> int:
        """
        挂载存档

        Args:
            archive_id: 存档类型
            path: 存档地址 (空路径或容器二进制路径)

        Returns:
            存档句柄
        """
        pass

    @abstractmethod
    def close_archive(self, archive: int) -> None:
        pass

    @abstractmethod
    def get_format_info(self, archive_id: ArchiveId, path: FsPath) -> FormatInfo:
        """
        查询存档的分配统计信息

        不需要先挂载存档。
        """
        pass

    # ==================== 目录 ====================

    @abstractmethod
    def open_directory(self, archive: int, path: FsPath) -> int:
        pass

    @abstractmethod
    def read_directory(self, directory: int, max_entries: int = 1) -> List[DirectoryEntry]:
        """
        读取至多 max_entries 个目录项

        Returns:
            目录项列表，空列表表示已读完
        """
        pass

    @abstractmethod
    def close_directory(self, directory: int) -> None:
        pass

    @abstractmethod
    def create_directory(self, archive: int, path: FsPath) -> None:
        """
        创建目录

        目录已存在时抛出结果码为 already_exists_code 的 DriverError。
        """
        pass

    @abstractmethod
    def delete_directory_recursively(self, archive: int, path: FsPath) -> None:
        pass

    # ==================== 文件 ====================

    @abstractmethod
    def open_file(self, archive: int, path: FsPath, flags: OpenFlags) -> int:
        pass

    @abstractmethod
    def get_file_size(self, file: int) -> int:
        pass

    @abstractmethod
    def set_file_size(self, file: int, size: int) -> None:
        pass

    @abstractmethod
    def read_file(self, file: int, offset: int, size: int) -> bytes:
        """
        从 offset 处读取至多 size 字节

        返回的字节数可能少于 size，由调用方判断是否属于失败。
        """
        pass

    @abstractmethod
    def write_file(self, file: int, offset: int, data: bytes) -> int:
        """
        在 offset 处写入数据

        Returns:
            实际写入的字节数
        """
        pass

    @abstractmethod
    def close_file(self, file: int) -> None:
        pass

    @property
    @abstractmethod
    def already_exists_code(self) -> int:
        """create_directory 遇到已存在目录时使用的结果码"""
        pass


class CatalogService(ABC):
    """
    容器目录服务

    按类别枚举可用容器的 64 位 ID。
    """

    @abstractmethod
    def count_containers(self, kind: ContainerKind) -> int:
        pass

    @abstractmethod
    def list_containers(self, kind: ContainerKind, capacity: int) -> List[int]:
        """
        列出至多 capacity 个容器 ID

        返回数量等于 capacity 时可能还有更多，调用方应扩大容量重试。
        """
        pass
