#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Reliquary - 存档容器目录树导出工具

枚举设备上的存档容器，把目录树按模拟器兼容的布局复制到目标存档，
并为每个容器写出 16 字节格式信息记录。
"""

__version__ = "0.1.0"

# 异常类
from .exceptions import (
    ReliquaryError,
    DriverError,
    SetupError,
    CatalogError,
    SizeMismatchError,
    CorruptedDataError,
    TraversalDepthError,
    InvalidPathError,
    UnknownAlgorithmError,
)

# 路径编解码
from .paths import (
    FsPath,
    PathType,
    EMPTY_PATH,
    encode_text,
    encode_binary,
    encode_container_id,
    decode_container_id,
    format_hex32,
)

# 数据结构
from .core.schema import ArchiveId, OpenFlags, ContainerKind, FormatInfo, DirectoryEntry
from .core.batch import CopyResult, ProgressInfo
from .core.listing import DirectoryListing, list_entries

# 复制与导出
from .copier import TreeCopier, copy_tree, ensure_directory
from .metadata import export_metadata
from .layout import DestinationLayout
from .exporter import (
    Exporter,
    ExportReport,
    ContainerResult,
    ContainerState,
    enumerate_containers,
    list_titles,
)

# 驱动
from .driver import StorageDriver, CatalogService, LocalStorageDriver, LocalCatalogService

# Hooks
from .hooks import ChecksumHook, CRC32Hook, MD5Hook, SHA1Hook, SHA256Hook, get_checksum_hook

__all__ = [
    # 版本
    "__version__",
    # 异常
    "ReliquaryError",
    "DriverError",
    "SetupError",
    "CatalogError",
    "SizeMismatchError",
    "CorruptedDataError",
    "TraversalDepthError",
    "InvalidPathError",
    "UnknownAlgorithmError",
    # 路径
    "FsPath",
    "PathType",
    "EMPTY_PATH",
    "encode_text",
    "encode_binary",
    "encode_container_id",
    "decode_container_id",
    "format_hex32",
    # 数据结构
    "ArchiveId",
    "OpenFlags",
    "ContainerKind",
    "FormatInfo",
    "DirectoryEntry",
    "CopyResult",
    "ProgressInfo",
    "DirectoryListing",
    "list_entries",
    # 复制与导出
    "TreeCopier",
    "copy_tree",
    "ensure_directory",
    "export_metadata",
    "DestinationLayout",
    "Exporter",
    "ExportReport",
    "ContainerResult",
    "ContainerState",
    "enumerate_containers",
    "list_titles",
    # 驱动
    "StorageDriver",
    "CatalogService",
    "LocalStorageDriver",
    "LocalCatalogService",
    # Hooks
    "ChecksumHook",
    "CRC32Hook",
    "MD5Hook",
    "SHA1Hook",
    "SHA256Hook",
    "get_checksum_hook",
]
