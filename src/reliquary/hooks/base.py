#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Hook 基类定义

定义复制完整性校验的抽象接口。
"""

from abc import ABC, abstractmethod


class ChecksumHook(ABC):
    """
    校验算法钩子

    复制文件后回读目标数据，用于确认源与目标内容一致。
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        算法名

        在注册表和配置中使用，必须唯一。

        Returns:
            小写算法名 (e.g., "crc32", "sha256")
        """
        pass

    @property
    @abstractmethod
    def digest_size(self) -> int:
        """
        校验值字节数

        Returns:
            校验值长度 (bytes)
        """
        pass

    @abstractmethod
    def compute(self, data: bytes) -> bytes:
        """
        计算校验值

        Args:
            data: 要校验的数据

        Returns:
            校验值字节
        """
        pass

    def verify(self, data: bytes, expected: bytes) -> bool:
        """
        验证校验值

        默认实现直接比较计算结果和期望值。

        Args:
            data: 要校验的数据
            expected: 期望的校验值

        Returns:
            校验是否通过
        """
        return self.compute(data) == expected
