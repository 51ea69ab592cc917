#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
元数据导出

查询容器的分配统计信息，组装为 16 字节 FormatInfo 记录，
并作为复制结果旁的独立文件写入目标存档。
"""

import logging

from .core.schema import ArchiveId, FormatInfo, OpenFlags
from .driver.base import StorageDriver
from .exceptions import DriverError, SizeMismatchError
from .paths import FsPath, encode_text


logger = logging.getLogger(__name__)


def query_format_info(
    driver: StorageDriver,
    archive_id: ArchiveId,
    container_path: FsPath
) -> FormatInfo:
    """
    查询格式信息

    查询失败只记录日志，返回全零记录。
    """
    try:
        return driver.get_format_info(archive_id, container_path)
    except DriverError as e:
        logger.error("%s", e)
        return FormatInfo()


def write_format_info(
    driver: StorageDriver,
    dst_archive: int,
    dst_path: str,
    info: FormatInfo
) -> None:
    """
    把记录原样写为新文件

    Raises:
        DriverError: 打开/写入/关闭失败 (操作名带 "(metadata)" 标注)
        SizeMismatchError: 写入字节数不足 16
    """
    data = info.pack()
    try:
        handle = driver.open_file(
            dst_archive, encode_text(dst_path), OpenFlags.WRITE | OpenFlags.CREATE
        )
    except DriverError as e:
        raise DriverError(f"{e.operation}(metadata)", e.code) from e

    try:
        written = driver.write_file(handle, 0, data)
        if written != len(data):
            raise SizeMismatchError("Write(metadata)", len(data), written)
        driver.set_file_size(handle, len(data))
    except DriverError as e:
        _close_quietly(driver, handle)
        raise DriverError(f"{e.operation}(metadata)", e.code) from e
    except SizeMismatchError:
        _close_quietly(driver, handle)
        raise

    try:
        driver.close_file(handle)
    except DriverError as e:
        raise DriverError(f"{e.operation}(metadata)", e.code) from e


def export_metadata(
    driver: StorageDriver,
    dst_archive: int,
    dst_path: str,
    archive_id: ArchiveId,
    container_path: FsPath
) -> FormatInfo:
    """
    查询并写出容器的元数据记录

    查询失败时写出全零记录；写出失败抛出异常，由调用方决定是否继续。

    Args:
        driver: 存储驱动
        dst_archive: 目标存档句柄
        dst_path: 元数据文件在目标存档中的路径
        archive_id: 被查询容器的存档类型
        container_path: 被查询容器的二进制地址

    Returns:
        写出的 FormatInfo
    """
    info = query_format_info(driver, archive_id, container_path)
    write_format_info(driver, dst_archive, dst_path, info)
    logger.debug(
        "Metadata %s: total_size=%d dirs=%d files=%d duplicate=%s",
        dst_path, info.total_size, info.number_directories,
        info.number_files, info.duplicate_data
    )
    return info


def _close_quietly(driver: StorageDriver, handle: int) -> None:
    try:
        driver.close_file(handle)
    except DriverError as e:
        logger.error("%s", e)
