#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Reliquary Hook 系统

提供复制完整性校验算法的可插拔接口。
"""

from .base import ChecksumHook
from .checksum import (
    NoneChecksumHook, CRC32Hook, MD5Hook, SHA1Hook, SHA256Hook
)
from .registry import (
    get_checksum_hook,
    available_checksums,
    CHECKSUM_REGISTRY,
)

__all__ = [
    # 抽象基类
    "ChecksumHook",
    # 内置校验实现
    "NoneChecksumHook",
    "CRC32Hook",
    "MD5Hook",
    "SHA1Hook",
    "SHA256Hook",
    # 注册表
    "get_checksum_hook",
    "available_checksums",
    "CHECKSUM_REGISTRY",
]
