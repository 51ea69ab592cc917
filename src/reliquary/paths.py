#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
路径编解码

在三种地址形式之间转换:
- 层级文本路径 (UTF-16 编码，用于目录项)
- 二进制字序列 (用于按 ID 选择容器)
- 定宽 8 位十六进制文本 (用于目标目录命名)

FsPath 是不可变值，自身持有编码后的字节，不依赖任何共享缓冲区。
"""

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Sequence, Tuple

from .exceptions import InvalidPathError


SEPARATOR = "/"

# 存档二进制路径的格式判别字
SAVE_BINARY_DISCRIMINATOR = 1

_WORD = struct.Struct('<I')


class PathType(IntEnum):
    """路径类型 (与底层 API 的取值一致)"""
    INVALID = 0
    EMPTY = 1
    BINARY = 2
    ASCII = 3
    UTF16 = 4


@dataclass(frozen=True)
class FsPath:
    """
    底层 API 使用的路径描述
    
    size 是底层 API 所需的字节长度：UTF-16 路径包含结尾的 2 字节终止符，
    二进制路径为字数 * 4，空路径为 0。
    """
    type: PathType
    data: bytes = b''
    
    @property
    def size(self) -> int:
        return len(self.data)
    
    @property
    def is_empty(self) -> bool:
        return self.type == PathType.EMPTY
    
    def text(self) -> str:
        """解码 UTF-16 路径 (去掉终止符)"""
        if self.type != PathType.UTF16:
            raise InvalidPathError(f"不是文本路径: {self.type.name}")
        return self.data[:-2].decode('utf-16-le')
    
    def words(self) -> Tuple[int, ...]:
        """解码二进制路径为 32 位字序列"""
        if self.type == PathType.EMPTY:
            return ()
        if self.type != PathType.BINARY:
            raise InvalidPathError(f"不是二进制路径: {self.type.name}")
        if len(self.data) % 4:
            raise InvalidPathError(
                f"二进制路径长度必须是 4 的倍数, 实际 {len(self.data)}"
            )
        return tuple(w for (w,) in _WORD.iter_unpack(self.data))


EMPTY_PATH = FsPath(PathType.EMPTY)


def encode_text(path: str) -> FsPath:
    """
    包装文本路径
    
    Examples:
        >>> encode_text("/a").size
        6

    Raises:
        InvalidPathError: 路径含有无法编码的字符 (例如宿主文件名中的非法字节)
    """
    try:
        data = path.encode('utf-16-le')
    except UnicodeEncodeError as e:
        raise InvalidPathError(f"路径无法编码为 UTF-16: {path!r}") from e
    return FsPath(PathType.UTF16, data + b'\x00\x00')


def encode_binary(words: Sequence[int]) -> FsPath:
    """
    包装 32 位字序列为二进制路径
    
    空序列返回 EMPTY_PATH (表示根/无路径)，而不是零长度的二进制路径。
    """
    if not words:
        return EMPTY_PATH
    try:
        data = b''.join(_WORD.pack(w) for w in words)
    except struct.error as e:
        raise InvalidPathError(f"二进制路径字超出 u32 范围: {list(words)}") from e
    return FsPath(PathType.BINARY, data)


def encode_container_id(container_id: int) -> FsPath:
    """
    按 64 位容器 ID 构建存档二进制路径
    
    格式: [判别字 1][ID 低 32 位][ID 高 32 位]
    """
    if not 0 <= container_id <= 0xFFFFFFFFFFFFFFFF:
        raise InvalidPathError(f"容器 ID 超出 u64 范围: {container_id:#x}")
    return encode_binary([
        SAVE_BINARY_DISCRIMINATOR,
        low32(container_id),
        high32(container_id),
    ])


def decode_container_id(path: FsPath) -> int:
    """从存档二进制路径还原 64 位容器 ID"""
    words = path.words()
    if len(words) != 3 or words[0] != SAVE_BINARY_DISCRIMINATOR:
        raise InvalidPathError(f"不是存档二进制路径: {list(words)}")
    return words[1] | (words[2] << 32)


def low32(value: int) -> int:
    return value & 0xFFFFFFFF


def high32(value: int) -> int:
    return (value >> 32) & 0xFFFFFFFF


def format_hex32(value: int) -> str:
    """
    渲染 32 位值为 8 位小写十六进制，高位在前，零填充
    
    Examples:
        >>> format_hex32(0x1234)
        '00001234'
        >>> format_hex32(0xFFFFFFFF)
        'ffffffff'
    """
    if not 0 <= value <= 0xFFFFFFFF:
        raise ValueError(f"值超出 u32 范围: {value:#x}")
    return f"{value:08x}"


def join_path(base: str, name: str) -> str:
    """拼接文本路径段 (base 为空时结果以分隔符开头)"""
    return base + SEPARATOR + name
