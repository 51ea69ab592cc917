#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Reliquary 异常定义

所有异常均继承自 ReliquaryError，便于统一捕获。
"""

from typing import Optional


class ReliquaryError(Exception):
    """Reliquary 基础异常"""
    pass


class DriverError(ReliquaryError):
    """
    存储驱动 / 目录服务调用失败
    
    携带失败的操作名和不透明的数字结果码，str() 即为单行诊断信息
    ``<operation>: <code>``。
    """
    def __init__(self, operation: str, code: int):
        self.operation = operation
        self.code = code & 0xFFFFFFFF
        super().__init__(f"{operation}: {self.code:08X}")


class SetupError(ReliquaryError):
    """
    致命的初始化错误
    
    目标根目录创建失败或目录服务枚举失败时抛出，由 CLI 决定终止进程。
    """
    def __init__(self, message: str, cause: Optional[DriverError] = None):
        self.cause = cause
        if cause is not None:
            message = f"{message} ({cause})"
        super().__init__(message)


class CatalogError(SetupError):
    """
    目录服务返回的数据违反约定
    
    例如返回数量超过请求容量，或列表数量与计数不一致。
    """
    def __init__(self, message: str, expected: int = None, actual: int = None):
        self.expected = expected
        self.actual = actual
        if expected is not None and actual is not None:
            message = f"{message}: 期望 {expected}, 实际 {actual}"
        super().__init__(message)


class SizeMismatchError(ReliquaryError):
    """
    读写字节数不符
    
    实际传输的字节数与请求的字节数不一致。
    """
    def __init__(self, operation: str, expected: int, actual: int):
        self.operation = operation
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{operation} size mismatch: 期望 {expected} 字节, 实际 {actual} 字节"
        )


class CorruptedDataError(ReliquaryError):
    """
    数据损坏异常
    
    复制后回读目标文件，校验值与源数据不一致时抛出。
    """
    def __init__(self, path: str, expected: bytes, actual: bytes):
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"文件 '{path}' 校验失败: "
            f"期望 {expected.hex()}, 实际 {actual.hex()}"
        )


class TraversalDepthError(ReliquaryError):
    """目录嵌套超过允许的最大深度"""
    def __init__(self, path: str, max_depth: int):
        self.path = path
        self.max_depth = max_depth
        super().__init__(f"目录 '{path}' 超过最大深度 {max_depth}")


class InvalidPathError(ReliquaryError):
    """
    路径编码无效
    
    例如二进制路径长度不是 4 的倍数，或判别字不符合预期。
    """
    pass


class UnknownAlgorithmError(ReliquaryError):
    """
    未知校验算法
    
    当配置中给出的算法名未注册时抛出。
    """
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"未知的校验算法: {name}")
