#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
pytest 全局配置

提供设备目录构建、驱动、故障注入驱动和内存目录服务等共享 fixtures。
"""

from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pytest

from reliquary.core.schema import ArchiveId, ContainerKind
from reliquary.driver.base import CatalogService
from reliquary.driver.local import (
    LocalStorageDriver,
    RESULT_IO_ERROR,
    RESULT_NOT_FOUND,
    RESULT_UNSUPPORTED,
    container_dir_name,
)
from reliquary.exceptions import DriverError
from reliquary.paths import (
    EMPTY_PATH, FsPath, PathType, decode_container_id, encode_container_id
)


# ==================== 路径常量 ====================

# 示例 title: 分类 0x00040000，低 32 位 0x00001234
SAMPLE_TITLE_ID = 0x0004000000001234


# ==================== 目录树工具 ====================

def build_tree(root: Path, files: Dict[str, bytes], dirs: Iterable[str] = ()) -> Path:
    """
    在 root 下创建文件和 (可能为空的) 目录

    Returns:
        root
    """
    root.mkdir(parents=True, exist_ok=True)
    for name in dirs:
        (root / name).mkdir(parents=True, exist_ok=True)
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    return root


def snapshot_tree(root: Path) -> Dict[str, Optional[bytes]]:
    """
    记录目录树: 相对路径 -> 文件内容 (目录为 None)
    """
    result = {}
    for path in sorted(root.rglob("*")):
        rel = path.relative_to(root).as_posix()
        result[rel] = None if path.is_dir() else path.read_bytes()
    return result


# ==================== 故障注入 ====================

class FaultyDriver(LocalStorageDriver):
    """
    可注入故障的本地驱动 (仅用于测试)

    故障按存档内文本路径匹配。
    """

    def __init__(self, device_root):
        super().__init__(device_root)
        self.fail_read = set()
        self.short_read = set()
        self.short_write = set()
        self.corrupt_write = set()
        self.fail_open_dir = set()
        self.fail_create_dir = set()
        self.fail_format_info = False
        self.fail_open_archive = set()
        self._handle_paths: Dict[int, str] = {}

    @staticmethod
    def _text(path: FsPath) -> str:
        return path.text() if path.type == PathType.UTF16 else ""

    def open_archive(self, archive_id, path):
        if path.type == PathType.BINARY:
            if decode_container_id(path) in self.fail_open_archive:
                raise DriverError("OpenArchive", RESULT_NOT_FOUND)
        return super().open_archive(archive_id, path)

    def open_file(self, archive, path, flags):
        handle = super().open_file(archive, path, flags)
        self._handle_paths[handle] = self._text(path)
        return handle

    def read_file(self, file, offset, size):
        path = self._handle_paths.get(file)
        if path in self.fail_read:
            raise DriverError("Read", RESULT_IO_ERROR)
        data = super().read_file(file, offset, size)
        if path in self.short_read:
            return data[:-1]
        return data

    def write_file(self, file, offset, data):
        path = self._handle_paths.get(file)
        if path in self.short_write:
            return super().write_file(file, offset, data[:-1])
        if path in self.corrupt_write:
            data = bytes(b ^ 0xFF for b in data)
        return super().write_file(file, offset, data)

    def open_directory(self, archive, path):
        if self._text(path) in self.fail_open_dir:
            raise DriverError("OpenDirectory", RESULT_NOT_FOUND)
        return super().open_directory(archive, path)

    def create_directory(self, archive, path):
        if self._text(path) in self.fail_create_dir:
            raise DriverError("CreateDirectory", RESULT_IO_ERROR)
        return super().create_directory(archive, path)

    def get_format_info(self, archive_id, path):
        if self.fail_format_info:
            raise DriverError("GetFormatInfo", RESULT_UNSUPPORTED)
        return super().get_format_info(archive_id, path)


class FakeCatalog(CatalogService):
    """
    内存目录服务 (仅用于测试)

    记录每次 list_containers 的请求容量。
    """

    def __init__(self, save_ids: List[int] = (), ext_ids: List[int] = ()):
        self.ids = {
            ContainerKind.SAVE_DATA: list(save_ids),
            ContainerKind.EXT_DATA: list(ext_ids),
        }
        self.capacities: List[int] = []
        self.fail_count = False
        self.over_return = 0
        self.count_bias = 0

    def count_containers(self, kind):
        if self.fail_count:
            raise DriverError("GetTitleCount(sd)", RESULT_IO_ERROR)
        return len(self.ids[kind]) + self.count_bias

    def list_containers(self, kind, capacity):
        self.capacities.append(capacity)
        ids = self.ids[kind][:capacity]
        if self.over_return:
            ids = ids + [0xDEAD] * self.over_return
        return ids


# ==================== 基础 Fixtures ====================

@pytest.fixture
def device(tmp_path) -> Path:
    """带空 SD 卡目录的设备目录"""
    root = tmp_path / "device"
    (root / "sdmc").mkdir(parents=True)
    return root


@pytest.fixture
def make_container(device):
    """
    创建容器目录的工厂

    用法: make_container("savedata", title_id, {"a.bin": b"..."}, dirs=["empty"])
    """
    def _make(kind_dir: str, container_id: int, files: Dict[str, bytes],
              dirs: Iterable[str] = ()) -> Path:
        root = device / kind_dir / container_dir_name(container_id)
        return build_tree(root, files, dirs)
    return _make


@pytest.fixture
def driver(device):
    """LocalStorageDriver 实例"""
    with LocalStorageDriver(device) as d:
        yield d


@pytest.fixture
def faulty_driver(device):
    """FaultyDriver 实例"""
    with FaultyDriver(device) as d:
        yield d


@pytest.fixture
def sample_files() -> Dict[str, bytes]:
    """示例存档内容"""
    return {
        "save.dat": bytes(range(100)),
        "config.ini": b"[slot]\nindex=1\n",
        "slots/slot1.bin": b"\x01" * 64,
        "slots/slot2.bin": b"",
        "slots/nested/deep.bin": b"deep nested file content",
        "中文存档.sav": "这是中文内容测试".encode("utf-8"),
    }


@pytest.fixture
def save_archive(driver, make_container, sample_files):
    """
    已挂载的示例存档

    Returns:
        (存档句柄, 容器目录)
    """
    root = make_container("savedata", SAMPLE_TITLE_ID, sample_files, dirs=["empty"])
    handle = driver.open_archive(ArchiveId.USER_SAVEDATA, encode_container_id(SAMPLE_TITLE_ID))
    return handle, root


@pytest.fixture
def sd_archive(driver):
    """已挂载的 SD 卡存档句柄"""
    return driver.open_archive(ArchiveId.SDMC, EMPTY_PATH)
