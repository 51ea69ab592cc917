#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
ChecksumHook 单元测试

测试所有内置校验算法 Hook 的属性和方法。
"""

import hashlib
import zlib

import pytest

from reliquary.hooks.checksum import (
    NoneChecksumHook,
    CRC32Hook,
    MD5Hook,
    SHA1Hook,
    SHA256Hook,
)


class TestChecksumHookProperties:
    """测试各校验 Hook 的属性"""

    @pytest.mark.parametrize("hook_cls,expected_size,expected_name", [
        (NoneChecksumHook, 0, "none"),
        (CRC32Hook, 4, "crc32"),
        (MD5Hook, 16, "md5"),
        (SHA1Hook, 20, "sha1"),
        (SHA256Hook, 32, "sha256"),
    ])
    def test_properties(self, hook_cls, expected_size, expected_name):
        """验证 name 和 digest_size 属性"""
        hook = hook_cls()

        assert hook.name == expected_name
        assert hook.digest_size == expected_size


class TestChecksumCompute:
    """测试各校验 Hook 的 compute 方法"""

    @pytest.fixture
    def test_data(self) -> bytes:
        return b"Hello, Reliquary! Test data for checksum."

    def test_none_checksum_returns_empty(self, test_data):
        """NoneChecksumHook 应返回空字节"""
        assert NoneChecksumHook().compute(test_data) == b''

    def test_crc32_matches_zlib(self, test_data):
        """CRC32 按小端 4 字节输出"""
        expected = (zlib.crc32(test_data) & 0xFFFFFFFF).to_bytes(4, 'little')

        assert CRC32Hook().compute(test_data) == expected

    @pytest.mark.parametrize("hook_cls,hash_func", [
        (MD5Hook, hashlib.md5),
        (SHA1Hook, hashlib.sha1),
        (SHA256Hook, hashlib.sha256),
    ])
    def test_hashlib_digests(self, test_data, hook_cls, hash_func):
        """与 hashlib 结果一致"""
        assert hook_cls().compute(test_data) == hash_func(test_data).digest()

    @pytest.mark.parametrize("hook_cls", [CRC32Hook, MD5Hook, SHA1Hook, SHA256Hook])
    def test_digest_length(self, test_data, hook_cls):
        """输出长度等于 digest_size"""
        hook = hook_cls()

        assert len(hook.compute(test_data)) == hook.digest_size
        assert len(hook.compute(b'')) == hook.digest_size


class TestChecksumVerify:
    """测试 verify 方法"""

    @pytest.mark.parametrize("hook_cls", [CRC32Hook, MD5Hook, SHA1Hook, SHA256Hook])
    def test_verify_match(self, hook_cls):
        hook = hook_cls()
        data = b"save slot contents"

        assert hook.verify(data, hook.compute(data)) is True

    @pytest.mark.parametrize("hook_cls", [CRC32Hook, MD5Hook, SHA1Hook, SHA256Hook])
    def test_verify_mismatch(self, hook_cls):
        """单字节差异即校验失败"""
        hook = hook_cls()
        expected = hook.compute(b"save slot contents")

        assert hook.verify(b"save slot contentz", expected) is False

    def test_none_always_passes(self):
        assert NoneChecksumHook().verify(b"anything", b"garbage") is True
