#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Core Schema 模块测试

测试 FormatInfo 记录的序列化/反序列化。
"""

import struct
import sys

import pytest

from reliquary.core.schema import (
    ArchiveId,
    DirectoryEntry,
    FormatInfo,
    OpenFlags,
)


# ==================== FormatInfo 测试 ====================

class TestFormatInfo:
    """FormatInfo 测试"""

    def test_size_constant(self):
        """大小常量验证"""
        assert FormatInfo.SIZE == 16
        assert struct.calcsize(FormatInfo.FORMAT) == 16

    def test_default_values(self):
        """默认值全零"""
        info = FormatInfo()

        assert info.total_size == 0
        assert info.number_directories == 0
        assert info.number_files == 0
        assert info.duplicate_data is False
        assert info.pack() == b'\x00' * 16

    def test_pack_unpack_roundtrip(self):
        """写入后重新读取得到相同字段"""
        original = FormatInfo(
            total_size=0x00080000,
            number_directories=10,
            number_files=20,
            duplicate_data=True
        )

        packed = original.pack()
        assert len(packed) == FormatInfo.SIZE

        unpacked = FormatInfo.unpack(packed)

        assert unpacked == original

    def test_native_byte_order(self):
        """按本机字节序写出，不做端序转换"""
        packed = FormatInfo(total_size=1, number_directories=2, number_files=3).pack()

        expected = (
            (1).to_bytes(4, sys.byteorder)
            + (2).to_bytes(4, sys.byteorder)
            + (3).to_bytes(4, sys.byteorder)
        )
        assert packed[:12] == expected

    def test_padding_is_zero(self):
        """duplicate_data 之后 3 字节填充为零"""
        packed = FormatInfo(duplicate_data=True).pack()

        assert packed[12] == 1
        assert packed[13:] == b'\x00\x00\x00'

    def test_unpack_invalid_size(self):
        """解包无效大小数据"""
        with pytest.raises(struct.error):
            FormatInfo.unpack(b'x' * 10)

    def test_field_out_of_range(self):
        """字段超出 u32"""
        with pytest.raises(struct.error):
            FormatInfo(total_size=1 << 32).pack()


class TestConstants:
    """常量测试"""

    def test_archive_ids(self):
        assert ArchiveId.USER_SAVEDATA == 0x4
        assert ArchiveId.EXTDATA == 0x6
        assert ArchiveId.SDMC == 0x9

    def test_open_flags_combine(self):
        flags = OpenFlags.WRITE | OpenFlags.CREATE

        assert flags == 0x6
        assert OpenFlags.READ not in flags

    def test_directory_entry_default(self):
        entry = DirectoryEntry("save.dat")

        assert entry.is_directory is False
