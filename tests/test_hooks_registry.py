#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Hook Registry 单元测试

测试按算法名查找校验 Hook。
"""

import pytest

from reliquary.exceptions import UnknownAlgorithmError
from reliquary.hooks.registry import (
    CHECKSUM_REGISTRY,
    available_checksums,
    get_checksum_hook,
)
from reliquary.hooks.checksum import (
    NoneChecksumHook,
    CRC32Hook,
    MD5Hook,
    SHA1Hook,
    SHA256Hook,
)


class TestChecksumRegistry:
    """测试 CHECKSUM_REGISTRY 常量"""

    def test_registry_maps_to_correct_classes(self):
        """注册表应映射到正确的 Hook 类"""
        assert CHECKSUM_REGISTRY["none"] == NoneChecksumHook
        assert CHECKSUM_REGISTRY["crc32"] == CRC32Hook
        assert CHECKSUM_REGISTRY["md5"] == MD5Hook
        assert CHECKSUM_REGISTRY["sha1"] == SHA1Hook
        assert CHECKSUM_REGISTRY["sha256"] == SHA256Hook

    def test_available_checksums_sorted(self):
        assert available_checksums() == ["crc32", "md5", "none", "sha1", "sha256"]


class TestGetChecksumHook:
    """测试 get_checksum_hook 函数"""

    @pytest.mark.parametrize("name,expected_cls", [
        ("crc32", CRC32Hook),
        ("md5", MD5Hook),
        ("sha1", SHA1Hook),
        ("sha256", SHA256Hook),
    ])
    def test_returns_instance(self, name, expected_cls):
        assert isinstance(get_checksum_hook(name), expected_cls)

    def test_case_insensitive(self):
        """名称不区分大小写"""
        assert isinstance(get_checksum_hook(" SHA256 "), SHA256Hook)

    @pytest.mark.parametrize("name", [None, "none", "NONE"])
    def test_none_means_no_verification(self, name):
        """None 与 "none" 表示不校验"""
        assert get_checksum_hook(name) is None

    def test_unknown_raises(self):
        with pytest.raises(UnknownAlgorithmError) as exc_info:
            get_checksum_hook("blake3")

        assert exc_info.value.name == "blake3"
