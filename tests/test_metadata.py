#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
元数据导出测试
"""

import pytest

from conftest import SAMPLE_TITLE_ID
from reliquary.core.schema import ArchiveId, FormatInfo
from reliquary.driver.local import container_dir_name
from reliquary.exceptions import DriverError, SizeMismatchError
from reliquary.metadata import export_metadata, query_format_info, write_format_info
from reliquary.paths import EMPTY_PATH, encode_container_id


CONTAINER_PATH = encode_container_id(SAMPLE_TITLE_ID)


class TestQueryFormatInfo:
    """query_format_info 测试"""

    def test_query(self, driver, make_container):
        make_container("savedata", SAMPLE_TITLE_ID, {"save.dat": b"x" * 100})

        info = query_format_info(driver, ArchiveId.USER_SAVEDATA, CONTAINER_PATH)

        assert info == FormatInfo(total_size=100, number_directories=0, number_files=1)

    def test_failure_returns_zero_record(self, faulty_driver):
        """查询失败返回全零记录"""
        faulty_driver.fail_format_info = True

        info = query_format_info(faulty_driver, ArchiveId.USER_SAVEDATA, CONTAINER_PATH)

        assert info == FormatInfo()


class TestWriteFormatInfo:
    """write_format_info 测试"""

    def test_writes_16_bytes(self, driver, sd_archive, device):
        info = FormatInfo(total_size=1, number_directories=2, number_files=3, duplicate_data=True)

        write_format_info(driver, sd_archive, "/record.metadata", info)

        data = (device / "sdmc" / "record.metadata").read_bytes()
        assert len(data) == 16
        assert FormatInfo.unpack(data) == info

    def test_overwrites_existing(self, driver, sd_archive, device):
        """覆盖已存在的较长文件后仍为 16 字节"""
        (device / "sdmc" / "record.metadata").write_bytes(b"\xFF" * 64)

        write_format_info(driver, sd_archive, "/record.metadata", FormatInfo())

        assert (device / "sdmc" / "record.metadata").read_bytes() == b"\x00" * 16

    def test_open_failure_labelled(self, driver, sd_archive):
        """打开失败时操作名带 (metadata) 标注"""
        with pytest.raises(DriverError) as exc_info:
            write_format_info(driver, sd_archive, "/missing/record.metadata", FormatInfo())

        assert exc_info.value.operation == "OpenFile(metadata)"

    def test_short_write(self, faulty_driver, device):
        sd = faulty_driver.open_archive(ArchiveId.SDMC, EMPTY_PATH)
        faulty_driver.short_write.add("/record.metadata")

        with pytest.raises(SizeMismatchError) as exc_info:
            write_format_info(faulty_driver, sd, "/record.metadata", FormatInfo())

        assert exc_info.value.operation == "Write(metadata)"
        assert exc_info.value.expected == 16
        assert exc_info.value.actual == 15


class TestExportMetadata:
    """export_metadata 测试"""

    def test_sidecar_copied_verbatim(self, driver, sd_archive, make_container, device):
        """容器自带的格式信息原样写出"""
        make_container("savedata", SAMPLE_TITLE_ID, {"save.dat": b"x"})
        expected = FormatInfo(total_size=0x100000, number_directories=10, number_files=10)
        (device / "savedata" / (container_dir_name(SAMPLE_TITLE_ID) + ".format")).write_bytes(
            expected.pack()
        )

        info = export_metadata(
            driver, sd_archive, "/00000001.metadata", ArchiveId.USER_SAVEDATA, CONTAINER_PATH
        )

        assert info == expected
        assert (device / "sdmc" / "00000001.metadata").read_bytes() == expected.pack()

    def test_query_failure_still_writes(self, faulty_driver, device):
        """查询失败仍写出全零记录"""
        sd = faulty_driver.open_archive(ArchiveId.SDMC, EMPTY_PATH)
        faulty_driver.fail_format_info = True

        info = export_metadata(
            faulty_driver, sd, "/metadata", ArchiveId.EXTDATA, encode_container_id(0x42)
        )

        assert info == FormatInfo()
        assert (device / "sdmc" / "metadata").read_bytes() == b"\x00" * 16
