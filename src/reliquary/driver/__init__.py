#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Reliquary 存储驱动

提供存储驱动与目录服务的能力接口，以及基于宿主文件系统的实现。
"""

from .base import StorageDriver, CatalogService
from .local import LocalStorageDriver, LocalCatalogService

__all__ = [
    "StorageDriver",
    "CatalogService",
    "LocalStorageDriver",
    "LocalCatalogService",
]
