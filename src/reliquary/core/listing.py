#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
目录枚举

逐项读取存档中某个目录的全部目录项。
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .schema import DirectoryEntry
from ..driver.base import StorageDriver
from ..exceptions import DriverError, InvalidPathError, ReliquaryError
from ..paths import encode_text


logger = logging.getLogger(__name__)


@dataclass
class DirectoryListing:
    """
    目录枚举结果

    error 为 None 时 entries 即完整列表 (可能为空)；
    枚举失败 (包括路径无法编码) 时 entries 为空，error 记录失败原因。
    """
    entries: List[DirectoryEntry] = field(default_factory=list)
    error: Optional[ReliquaryError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


def list_entries(driver: StorageDriver, archive: int, path: str) -> DirectoryListing:
    """
    列出目录中的全部目录项

    逐项读取直到读到 0 项为止。目录句柄在所有路径上都会关闭；
    关闭失败只记录日志，不影响已读到的结果。顺序与驱动返回的一致。

    Args:
        driver: 存储驱动
        archive: 存档句柄
        path: 目录的文本路径

    Returns:
        DirectoryListing
    """
    try:
        handle = driver.open_directory(archive, encode_text(path))
    except (DriverError, InvalidPathError) as e:
        logger.error("%s", e)
        return DirectoryListing(error=e)

    entries: List[DirectoryEntry] = []
    try:
        while True:
            batch = driver.read_directory(handle, 1)
            if not batch:
                break
            entries.extend(batch)
    except DriverError as e:
        logger.error("%s", e)
        return DirectoryListing(error=e)
    finally:
        try:
            driver.close_directory(handle)
        except DriverError as e:
            logger.error("%s", e)

    return DirectoryListing(entries)
