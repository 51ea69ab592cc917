#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
本地文件系统驱动

把宿主机上的一个"设备目录"当作存储设备:

    <device>/sdmc/                      SD 卡 (ARCHIVE_SDMC, 空路径)
    <device>/savedata/<id:016x>/        应用存档 (ARCHIVE_USER_SAVEDATA)
    <device>/savedata/<id:016x>.format  可选，16 字节格式信息
    <device>/extdata/<id:016x>/         扩展数据 (ARCHIVE_EXTDATA)
    <device>/extdata/<id:016x>.format   可选，16 字节格式信息

容器通过二进制容器路径寻址，存档内路径使用 UTF-16 文本路径。
宿主的 OSError 统一映射为不透明的数字结果码。
"""

import errno
import logging
import os
import shutil
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, Iterator, List, Optional, Union

from .base import CatalogService, StorageDriver
from ..core.schema import ArchiveId, ContainerKind, DirectoryEntry, FormatInfo, OpenFlags
from ..exceptions import DriverError, InvalidPathError
from ..paths import FsPath, PathType, SEPARATOR, decode_container_id


logger = logging.getLogger(__name__)


# ==================== 结果码 ====================

RESULT_NOT_FOUND = 0xC8804478
RESULT_ALREADY_EXISTS = 0xC82044BE
RESULT_INVALID_PATH = 0xE0E046BE
RESULT_INVALID_HANDLE = 0xD8E007F7
RESULT_ACCESS_DENIED = 0xC92044FA
RESULT_UNSUPPORTED = 0xE0C046BE
RESULT_IO_ERROR = 0xC8A04554

_ERRNO_TO_RESULT = {
    errno.ENOENT: RESULT_NOT_FOUND,
    errno.ENOTDIR: RESULT_NOT_FOUND,
    errno.EISDIR: RESULT_NOT_FOUND,
    errno.EEXIST: RESULT_ALREADY_EXISTS,
    errno.EACCES: RESULT_ACCESS_DENIED,
    errno.EPERM: RESULT_ACCESS_DENIED,
}

# 容器子目录名
SDMC_DIR = "sdmc"
SAVEDATA_DIR = "savedata"
EXTDATA_DIR = "extdata"
FORMAT_SUFFIX = ".format"

_CONTAINER_DIRS = {
    ArchiveId.USER_SAVEDATA: SAVEDATA_DIR,
    ArchiveId.EXTDATA: EXTDATA_DIR,
}

_KIND_DIRS = {
    ContainerKind.SAVE_DATA: SAVEDATA_DIR,
    ContainerKind.EXT_DATA: EXTDATA_DIR,
}


def container_dir_name(container_id: int) -> str:
    """容器目录名: 16 位小写十六进制"""
    return f"{container_id:016x}"


@contextmanager
def _os_errors(operation: str) -> Iterator[None]:
    """把 OSError 转换为 DriverError"""
    try:
        yield
    except OSError as e:
        code = _ERRNO_TO_RESULT.get(e.errno, RESULT_IO_ERROR)
        raise DriverError(operation, code) from e


@dataclass
class _OpenDirectory:
    entries: List[DirectoryEntry]
    cursor: int = 0


class LocalStorageDriver(StorageDriver):
    """
    基于宿主文件系统的存储驱动

    目录项按名称排序返回，保证遍历顺序稳定。
    """

    def __init__(self, device_root: Union[str, Path]):
        """
        初始化驱动

        Args:
            device_root: 设备目录
        """
        self._device_root = Path(device_root)
        self._next_handle = 0x100
        self._archives: Dict[int, Path] = {}
        self._directories: Dict[int, _OpenDirectory] = {}
        self._files: Dict[int, BinaryIO] = {}

    @property
    def device_root(self) -> Path:
        return self._device_root

    @property
    def already_exists_code(self) -> int:
        return RESULT_ALREADY_EXISTS

    def _new_handle(self) -> int:
        handle = self._next_handle
        self._next_handle += 1
        return handle

    # ==================== 路径解析 ====================

    def container_path(self, archive_id: ArchiveId, path: FsPath) -> Path:
        """
        把存档地址解析为宿主目录

        Raises:
            DriverError: 存档类型或地址形式不受支持
        """
        operation = "ResolveArchive"
        if archive_id == ArchiveId.SDMC:
            if not path.is_empty:
                raise DriverError(operation, RESULT_INVALID_PATH)
            return self._device_root / SDMC_DIR

        if archive_id not in _CONTAINER_DIRS:
            raise DriverError(operation, RESULT_UNSUPPORTED)
        try:
            container_id = decode_container_id(path)
        except InvalidPathError as e:
            raise DriverError(operation, RESULT_INVALID_PATH) from e
        return (self._device_root / _CONTAINER_DIRS[archive_id]
                / container_dir_name(container_id))

    def _resolve(self, operation: str, archive: int, path: FsPath) -> Path:
        """把存档内的文本路径解析为宿主路径，拒绝 '..' 等越界路径段"""
        root = self._archive_root(operation, archive)
        if path.is_empty:
            return root
        if path.type != PathType.UTF16:
            raise DriverError(operation, RESULT_INVALID_PATH)

        segments = [s for s in path.text().split(SEPARATOR) if s]
        if any(s in (".", "..") or "\\" in s for s in segments):
            raise DriverError(operation, RESULT_INVALID_PATH)
        return root.joinpath(*segments)

    def _archive_root(self, operation: str, archive: int) -> Path:
        if archive not in self._archives:
            raise DriverError(operation, RESULT_INVALID_HANDLE)
        return self._archives[archive]

    def _file(self, operation: str, file: int) -> BinaryIO:
        if file not in self._files:
            raise DriverError(operation, RESULT_INVALID_HANDLE)
        return self._files[file]

    # ==================== 存档 ====================

    def open_archive(self, archive_id: ArchiveId, path: FsPath) -> int:
        root = self.container_path(archive_id, path)
        if not root.is_dir():
            raise DriverError("OpenArchive", RESULT_NOT_FOUND)
        handle = self._new_handle()
        self._archives[handle] = root
        logger.debug("OpenArchive %s -> %s (handle=%#x)", archive_id.name, root, handle)
        return handle

    def close_archive(self, archive: int) -> None:
        if self._archives.pop(archive, None) is None:
            raise DriverError("CloseArchive", RESULT_INVALID_HANDLE)

    def get_format_info(self, archive_id: ArchiveId, path: FsPath) -> FormatInfo:
        """
        查询格式信息

        优先读取容器旁的 .format 文件 (16 字节原样记录)，
        否则根据容器目录树统计总字节数、目录数和文件数。
        """
        operation = "GetFormatInfo"
        if archive_id == ArchiveId.SDMC:
            raise DriverError(operation, RESULT_UNSUPPORTED)
        root = self.container_path(archive_id, path)

        sidecar = root.with_name(root.name + FORMAT_SUFFIX)
        with _os_errors(operation):
            if sidecar.is_file():
                data = sidecar.read_bytes()
                if len(data) != FormatInfo.SIZE:
                    raise DriverError(operation, RESULT_IO_ERROR)
                return FormatInfo.unpack(data)

            if not root.is_dir():
                raise DriverError(operation, RESULT_NOT_FOUND)

            info = FormatInfo()
            for dir_path, dir_names, file_names in os.walk(root):
                info.number_directories += len(dir_names)
                info.number_files += len(file_names)
                for name in file_names:
                    info.total_size += os.path.getsize(os.path.join(dir_path, name))
            info.total_size &= 0xFFFFFFFF
            return info

    # ==================== 目录 ====================

    def open_directory(self, archive: int, path: FsPath) -> int:
        operation = "OpenDirectory"
        target = self._resolve(operation, archive, path)
        with _os_errors(operation):
            with os.scandir(target) as it:
                entries = [
                    DirectoryEntry(e.name, e.is_dir(follow_symlinks=False))
                    for e in it
                ]
        entries.sort(key=lambda e: e.name)
        handle = self._new_handle()
        self._directories[handle] = _OpenDirectory(entries)
        return handle

    def read_directory(self, directory: int, max_entries: int = 1) -> List[DirectoryEntry]:
        if directory not in self._directories:
            raise DriverError("ReadDirectory", RESULT_INVALID_HANDLE)
        state = self._directories[directory]
        batch = state.entries[state.cursor:state.cursor + max_entries]
        state.cursor += len(batch)
        return batch

    def close_directory(self, directory: int) -> None:
        if self._directories.pop(directory, None) is None:
            raise DriverError("CloseDirectory", RESULT_INVALID_HANDLE)

    def create_directory(self, archive: int, path: FsPath) -> None:
        operation = "CreateDirectory"
        target = self._resolve(operation, archive, path)
        with _os_errors(operation):
            target.mkdir()

    def delete_directory_recursively(self, archive: int, path: FsPath) -> None:
        operation = "DeleteDirectoryRecursively"
        target = self._resolve(operation, archive, path)
        with _os_errors(operation):
            if not target.is_dir():
                raise FileNotFoundError(errno.ENOENT, "directory not found", str(target))
            shutil.rmtree(target)

    # ==================== 文件 ====================

    def open_file(self, archive: int, path: FsPath, flags: OpenFlags) -> int:
        """
        打开文件

        只读打开要求文件存在；写打开时文件存在则不截断，
        不存在且带 CREATE 标志则创建。
        """
        operation = "OpenFile"
        target = self._resolve(operation, archive, path)
        with _os_errors(operation):
            if flags & OpenFlags.WRITE:
                if target.exists():
                    f = open(target, 'r+b')
                elif flags & OpenFlags.CREATE:
                    f = open(target, 'w+b')
                else:
                    raise FileNotFoundError(errno.ENOENT, "file not found", str(target))
            else:
                f = open(target, 'rb')
        handle = self._new_handle()
        self._files[handle] = f
        return handle

    def get_file_size(self, file: int) -> int:
        operation = "GetSize"
        f = self._file(operation, file)
        with _os_errors(operation):
            return os.fstat(f.fileno()).st_size

    def set_file_size(self, file: int, size: int) -> None:
        operation = "SetSize"
        f = self._file(operation, file)
        with _os_errors(operation):
            f.truncate(size)

    def read_file(self, file: int, offset: int, size: int) -> bytes:
        operation = "Read"
        f = self._file(operation, file)
        with _os_errors(operation):
            f.seek(offset)
            return f.read(size)

    def write_file(self, file: int, offset: int, data: bytes) -> int:
        operation = "Write"
        f = self._file(operation, file)
        with _os_errors(operation):
            f.seek(offset)
            written = f.write(data)
            f.flush()
            return written

    def close_file(self, file: int) -> None:
        operation = "Close"
        f = self._files.pop(file, None)
        if f is None:
            raise DriverError(operation, RESULT_INVALID_HANDLE)
        with _os_errors(operation):
            f.close()

    # ==================== 生命周期 ====================

    def close(self) -> None:
        """关闭所有仍然打开的句柄"""
        for f in self._files.values():
            f.close()
        self._files.clear()
        self._directories.clear()
        self._archives.clear()

    def __enter__(self) -> 'LocalStorageDriver':
        return self

    def __exit__(self, *args) -> None:
        self.close()


class LocalCatalogService(CatalogService):
    """
    基于设备目录的容器目录服务

    扫描 savedata/ 与 extdata/ 下的 16 位十六进制目录名，按 ID 升序返回。
    """

    _OPERATIONS = {
        ContainerKind.SAVE_DATA: ("GetTitleCount(sd)", "GetTitleList(sd)"),
        ContainerKind.EXT_DATA: ("CountExtSaveData(sd)", "EnumerateExtSaveData(sd)"),
    }

    def __init__(self, device_root: Union[str, Path]):
        self._device_root = Path(device_root)

    def _scan(self, kind: ContainerKind, operation: str) -> List[int]:
        if not self._device_root.is_dir():
            raise DriverError(operation, RESULT_NOT_FOUND)

        base = self._device_root / _KIND_DIRS[kind]
        if not base.is_dir():
            return []

        ids = []
        with _os_errors(operation):
            for child in base.iterdir():
                container_id = _parse_container_id(child.name)
                if container_id is None or not child.is_dir():
                    continue
                ids.append(container_id)
        return sorted(ids)

    def count_containers(self, kind: ContainerKind) -> int:
        operation = self._OPERATIONS[kind][0]
        return len(self._scan(kind, operation))

    def list_containers(self, kind: ContainerKind, capacity: int) -> List[int]:
        operation = self._OPERATIONS[kind][1]
        return self._scan(kind, operation)[:max(capacity, 0)]


def _parse_container_id(name: str) -> Optional[int]:
    if len(name) != 16:
        return None
    try:
        return int(name, 16)
    except ValueError:
        return None
