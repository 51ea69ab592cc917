#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Hook 注册表

按算法名查找校验 Hook，供配置和命令行使用。
"""

from typing import Dict, List, Optional, Type

from .base import ChecksumHook
from .checksum import NoneChecksumHook, CRC32Hook, MD5Hook, SHA1Hook, SHA256Hook
from ..exceptions import UnknownAlgorithmError


# 内置 Checksum Hook 列表 (新增 Hook 时只需在此添加)
_BUILTIN_CHECKSUM_HOOKS = [
    NoneChecksumHook,
    CRC32Hook,
    MD5Hook,
    SHA1Hook,
    SHA256Hook,
]


def _build_checksum_registry() -> Dict[str, Type[ChecksumHook]]:
    """从 Hook 类自动构建 算法名 -> Hook 类映射"""
    registry = {}
    for hook_cls in _BUILTIN_CHECKSUM_HOOKS:
        instance = hook_cls()
        registry[instance.name] = hook_cls
    return registry


# 算法名 -> Hook 类 映射表
CHECKSUM_REGISTRY: Dict[str, Type[ChecksumHook]] = _build_checksum_registry()


def available_checksums() -> List[str]:
    """列出所有已注册的算法名"""
    return sorted(CHECKSUM_REGISTRY)


def get_checksum_hook(name: Optional[str]) -> Optional[ChecksumHook]:
    """
    根据算法名获取 ChecksumHook 实例

    名称不区分大小写。None 或 "none" 返回 None，表示复制时不做回读校验。

    Args:
        name: 算法名

    Returns:
        对应的 Hook 实例

    Raises:
        UnknownAlgorithmError: 算法名未注册
    """
    if name is None:
        return None
    key = name.strip().lower()
    if key not in CHECKSUM_REGISTRY:
        raise UnknownAlgorithmError(name)
    if key == "none":
        return None
    return CHECKSUM_REGISTRY[key]()
