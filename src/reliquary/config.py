#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
运行配置

配置来源优先级: 命令行参数 > 环境变量 > JSON 配置文件 > 默认值。
"""

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

from .copier import DEFAULT_MAX_DEPTH
from .exporter import DEFAULT_EXT_INITIAL_CAPACITY
from .hooks.registry import CHECKSUM_REGISTRY
from .exceptions import UnknownAlgorithmError


ENV_DEVICE_ROOT = "RELIQUARY_DEVICE_ROOT"
ENV_CHECKSUM = "RELIQUARY_CHECKSUM"
ENV_MAX_DEPTH = "RELIQUARY_MAX_DEPTH"


@dataclass(frozen=True)
class Settings:
    device_root: Path = Path(".")
    checksum: str = "none"
    max_depth: int = DEFAULT_MAX_DEPTH
    ext_initial_capacity: int = DEFAULT_EXT_INITIAL_CAPACITY
    interactive: bool = True

    def with_overrides(self, **overrides: Any) -> 'Settings':
        """返回覆盖了非 None 值的新配置"""
        values = {k: v for k, v in overrides.items() if v is not None}
        settings = replace(self, **values)
        _validate(settings)
        return settings


def default_config_path() -> Path:
    return Path.home() / ".config" / "reliquary" / "settings.json"


def load_settings(path: Optional[Path] = None) -> Settings:
    """
    加载配置

    Args:
        path: JSON 配置文件路径，None 或文件不存在时只使用默认值与环境变量

    Returns:
        Settings

    Raises:
        ValueError: 配置值无效
        UnknownAlgorithmError: 校验算法名未注册
    """
    json_settings: Dict[str, Any] = {}
    if path and path.exists():
        json_settings = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(json_settings, dict):
            raise ValueError(f"配置文件顶层必须是对象: {path}")

    device_root = os.getenv(ENV_DEVICE_ROOT) or json_settings.get("device_root", ".")
    checksum = os.getenv(ENV_CHECKSUM) or json_settings.get("checksum", "none")

    max_depth_raw = os.getenv(ENV_MAX_DEPTH) or json_settings.get("max_depth", DEFAULT_MAX_DEPTH)
    try:
        max_depth = int(max_depth_raw)
    except (TypeError, ValueError) as e:
        raise ValueError(f"max_depth 必须是整数: {max_depth_raw!r}") from e

    interactive = json_settings.get("interactive", True)
    if not isinstance(interactive, bool):
        raise ValueError(f"interactive 必须是布尔值: {interactive!r}")

    settings = Settings(
        device_root=Path(device_root),
        checksum=str(checksum).strip().lower(),
        max_depth=max_depth,
        ext_initial_capacity=int(
            json_settings.get("ext_initial_capacity", DEFAULT_EXT_INITIAL_CAPACITY)
        ),
        interactive=interactive,
    )
    _validate(settings)
    return settings


def _validate(settings: Settings) -> None:
    if settings.checksum not in CHECKSUM_REGISTRY:
        raise UnknownAlgorithmError(settings.checksum)
    if settings.max_depth < 0:
        raise ValueError(f"max_depth 不能为负数: {settings.max_depth}")
    if settings.ext_initial_capacity < 1:
        raise ValueError(f"ext_initial_capacity 必须大于 0: {settings.ext_initial_capacity}")
