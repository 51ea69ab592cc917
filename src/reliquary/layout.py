#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
目标目录布局

导出结果必须与模拟器读取的目录结构逐字节一致:

    /save-to-citra/sdmc/Nintendo 3DS/<32 个 0>/<32 个 0>/
        title/00040000/<id 低 32 位>/data/00000001/         存档目录树
        title/00040000/<id 低 32 位>/data/00000001.metadata 16 字节记录
        extdata/00000000/<id 低 32 位>/user/                扩展数据目录树
        extdata/00000000/<id 低 32 位>/boss/
        extdata/00000000/<id 低 32 位>/metadata             16 字节记录

所有固定路径段都是配置常量，与复制引擎无关。
"""

from dataclasses import dataclass
from typing import List, Tuple

from .paths import SEPARATOR, format_hex32, low32


ZERO_ID = "0" * 32


@dataclass(frozen=True)
class SaveTarget:
    """单个应用存档的目标路径"""
    container_dir: str    # .../<id 低 32 位>
    data_dir: str         # .../data
    tree_dir: str         # .../data/00000001
    metadata_file: str    # .../data/00000001.metadata

    @property
    def directories(self) -> List[str]:
        """需要依次创建的目录"""
        return [self.container_dir, self.data_dir, self.tree_dir]


@dataclass(frozen=True)
class ExtTarget:
    """单个扩展数据的目标路径"""
    container_dir: str
    user_dir: str
    boss_dir: str
    metadata_file: str

    @property
    def directories(self) -> List[str]:
        return [self.container_dir, self.user_dir, self.boss_dir]


def _join(*segments: str) -> str:
    return SEPARATOR.join(segments)


@dataclass(frozen=True)
class DestinationLayout:
    """
    目标目录布局常量

    root 以分隔符开头，其余均为单个路径段。
    """
    root: str = "/save-to-citra"
    device_segments: Tuple[str, ...] = ("sdmc", "Nintendo 3DS", ZERO_ID, ZERO_ID)
    save_segments: Tuple[str, ...] = ("title", "00040000")
    ext_segments: Tuple[str, ...] = ("extdata", "00000000")
    save_data_dir: str = "data"
    save_slot: str = "00000001"
    save_metadata_suffix: str = ".metadata"
    ext_user_dir: str = "user"
    ext_boss_dir: str = "boss"
    ext_metadata_file: str = "metadata"

    @property
    def device_root(self) -> str:
        return _join(self.root, *self.device_segments)

    @property
    def save_root(self) -> str:
        return _join(self.device_root, *self.save_segments)

    @property
    def ext_root(self) -> str:
        return _join(self.device_root, *self.ext_segments)

    def setup_directories(self) -> List[str]:
        """
        根目录准备阶段需要依次创建的全部目录 (父目录在前)
        """
        directories = [self.root]
        current = self.root
        for segment in self.device_segments:
            current = _join(current, segment)
            directories.append(current)
        for segments in (self.save_segments, self.ext_segments):
            current = self.device_root
            for segment in segments:
                current = _join(current, segment)
                directories.append(current)
        return directories

    def save_target(self, title_id: int) -> SaveTarget:
        """按 title ID 的低 32 位确定存档目标路径"""
        container_dir = _join(self.save_root, format_hex32(low32(title_id)))
        data_dir = _join(container_dir, self.save_data_dir)
        return SaveTarget(
            container_dir=container_dir,
            data_dir=data_dir,
            tree_dir=_join(data_dir, self.save_slot),
            metadata_file=_join(data_dir, self.save_slot + self.save_metadata_suffix),
        )

    def ext_target(self, ext_id: int) -> ExtTarget:
        """按扩展数据 ID 的低 32 位确定目标路径"""
        container_dir = _join(self.ext_root, format_hex32(low32(ext_id)))
        return ExtTarget(
            container_dir=container_dir,
            user_dir=_join(container_dir, self.ext_user_dir),
            boss_dir=_join(container_dir, self.ext_boss_dir),
            metadata_file=_join(container_dir, self.ext_metadata_file),
        )
