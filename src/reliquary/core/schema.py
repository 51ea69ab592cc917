#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Reliquary 数据结构定义

定义 FormatInfo 元数据记录、DirectoryEntry 目录项以及存档/打开标志常量。
"""

import struct
from dataclasses import dataclass
from enum import Enum, IntEnum, IntFlag
from typing import ClassVar


# ==================== 常量定义 ====================

class ArchiveId(IntEnum):
    """存档类型 ID (与底层 API 的取值一致)"""
    USER_SAVEDATA = 0x4
    EXTDATA = 0x6
    SDMC = 0x9


class OpenFlags(IntFlag):
    """文件打开标志"""
    READ = 0x1
    WRITE = 0x2
    CREATE = 0x4


class ContainerKind(Enum):
    """目录服务可枚举的容器类别"""
    SAVE_DATA = "save_data"
    EXT_DATA = "ext_data"


# 应用存档的分类高 32 位
SAVE_DATA_CLASSIFIER = 0x00040000

# 扩展数据的分类高 32 位
EXT_DATA_CLASSIFIER = 0x00000000


# ==================== 元数据记录 ====================

@dataclass
class FormatInfo:
    """
    存档格式信息 (16 bytes)
    
    按本机字节序原样写出，不做端序转换。
    布局: total_size(u32) number_directories(u32) number_files(u32)
    duplicate_data(u8) + 3 字节填充
    """
    FORMAT: ClassVar[str] = '=IIIB3x'
    SIZE: ClassVar[int] = 16
    
    total_size: int = 0
    number_directories: int = 0
    number_files: int = 0
    duplicate_data: bool = False
    
    def pack(self) -> bytes:
        """序列化为字节"""
        return struct.pack(
            self.FORMAT,
            self.total_size,
            self.number_directories,
            self.number_files,
            1 if self.duplicate_data else 0
        )
    
    @classmethod
    def unpack(cls, data: bytes) -> 'FormatInfo':
        """从字节反序列化"""
        values = struct.unpack(cls.FORMAT, data)
        return cls(
            total_size=values[0],
            number_directories=values[1],
            number_files=values[2],
            duplicate_data=bool(values[3])
        )



# ==================== 目录项 ====================

@dataclass(frozen=True)
class DirectoryEntry:
    """目录项 (仅在枚举期间临时存在)"""
    name: str
    is_directory: bool = False
