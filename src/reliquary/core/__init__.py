#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Reliquary 核心模块

提供数据结构定义和复制统计工具。目录枚举见 core.listing。
"""

from .schema import (
    ArchiveId, OpenFlags, ContainerKind, FormatInfo, DirectoryEntry,
    SAVE_DATA_CLASSIFIER, EXT_DATA_CLASSIFIER
)
from .batch import ProgressInfo, CopyResult, ProgressTracker, ProgressCallback

__all__ = [
    "ArchiveId",
    "OpenFlags",
    "ContainerKind",
    "FormatInfo",
    "DirectoryEntry",
    "SAVE_DATA_CLASSIFIER",
    "EXT_DATA_CLASSIFIER",
    # 复制统计
    "ProgressInfo",
    "CopyResult",
    "ProgressTracker",
    "ProgressCallback",
]
