#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
导出编排

从目录服务枚举候选容器，按固定布局推导每个容器的目标路径，
依次驱动目录树复制和元数据导出。单个容器的失败不影响后续容器；
只有目标根目录准备失败和目录服务枚举失败会作为 SetupError 抛出。

容器状态:
    DISCOVERED -> OPENED -> COPYING -> (COPIED | COPY_FAILED)
               -> METADATA_WRITTEN -> DONE
    DISCOVERED -> OPEN_FAILED -> SKIPPED
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from .copier import DEFAULT_MAX_DEPTH, TreeCopier, ensure_directory
from .core.batch import CopyResult, ProgressCallback
from .core.schema import (
    ArchiveId,
    ContainerKind,
    FormatInfo,
    SAVE_DATA_CLASSIFIER,
    EXT_DATA_CLASSIFIER,
)
from .driver.base import CatalogService, StorageDriver
from .exceptions import CatalogError, DriverError, ReliquaryError, SetupError
from .hooks.base import ChecksumHook
from .layout import DestinationLayout
from .metadata import export_metadata
from .paths import EMPTY_PATH, encode_container_id, encode_text, high32


logger = logging.getLogger(__name__)

# 扩展数据枚举的初始缓冲容量
DEFAULT_EXT_INITIAL_CAPACITY = 4


class ContainerState(Enum):
    """单个容器的导出状态"""
    DISCOVERED = "discovered"
    OPENED = "opened"
    COPYING = "copying"
    COPIED = "copied"
    COPY_FAILED = "copy_failed"
    METADATA_WRITTEN = "metadata_written"
    DONE = "done"
    OPEN_FAILED = "open_failed"
    SKIPPED = "skipped"


@dataclass
class ContainerResult:
    """单个容器的导出结果"""
    container_id: int
    kind: ContainerKind
    state: ContainerState = ContainerState.DISCOVERED
    copy_result: Optional[CopyResult] = None
    format_info: Optional[FormatInfo] = None
    errors: List[ReliquaryError] = field(default_factory=list)
    history: List[ContainerState] = field(
        default_factory=lambda: [ContainerState.DISCOVERED]
    )

    def advance(self, state: ContainerState) -> None:
        """进入下一个状态并记录"""
        self.state = state
        self.history.append(state)

    @property
    def ok(self) -> bool:
        """元数据已写出且目录树无任何失败"""
        return (
            self.state == ContainerState.DONE
            and not self.errors
            and (self.copy_result is None or self.copy_result.ok)
        )


@dataclass
class ExportReport:
    """
    整次导出的结果

    运行完成不代表全部成功，需检查 failed / skipped。
    """
    containers: List[ContainerResult] = field(default_factory=list)

    @property
    def exported(self) -> List[ContainerResult]:
        return [c for c in self.containers if c.state == ContainerState.DONE]

    @property
    def skipped(self) -> List[ContainerResult]:
        return [c for c in self.containers if c.state == ContainerState.SKIPPED]

    @property
    def failed(self) -> List[ContainerResult]:
        return [
            c for c in self.containers
            if c.state != ContainerState.SKIPPED and not c.ok
        ]

    @property
    def ok(self) -> bool:
        """没有失败的容器，且跳过的容器都不是因为打开失败"""
        return not self.failed and not any(c.errors for c in self.skipped)

    def totals(self) -> CopyResult:
        """汇总所有容器的目录树复制统计"""
        total = CopyResult()
        for container in self.containers:
            if container.copy_result is not None:
                total.merge(container.copy_result)
        return total


# ==================== 目录服务枚举 ====================

def list_titles(catalog: CatalogService, kind: ContainerKind) -> List[int]:
    """
    先计数再按计数列出全部容器

    Raises:
        SetupError: 计数或列出失败
        CatalogError: 列出的数量与计数不一致
    """
    try:
        count = catalog.count_containers(kind)
    except DriverError as e:
        logger.error("%s", e)
        raise SetupError("无法获取容器数量", e) from e

    try:
        ids = catalog.list_containers(kind, count)
    except DriverError as e:
        logger.error("%s", e)
        raise SetupError("无法获取容器列表", e) from e

    if len(ids) != count:
        raise CatalogError("容器列表数量与计数不一致", count, len(ids))
    return list(ids)


def enumerate_containers(
    catalog: CatalogService,
    kind: ContainerKind,
    initial_capacity: int = DEFAULT_EXT_INITIAL_CAPACITY
) -> List[int]:
    """
    以递增缓冲列出全部容器

    返回数量等于容量时可能还有更多，容量翻倍后重新查询；
    返回数量小于容量时结果即为完整列表。

    Raises:
        SetupError: 目录服务调用失败
        CatalogError: 返回数量超过请求容量
    """
    capacity = max(initial_capacity, 1)
    while True:
        try:
            ids = catalog.list_containers(kind, capacity)
        except DriverError as e:
            logger.error("%s", e)
            raise SetupError("无法枚举容器", e) from e

        if len(ids) > capacity:
            raise CatalogError("目录服务返回数量超过请求容量", capacity, len(ids))
        if len(ids) < capacity:
            return list(ids)
        capacity *= 2


# ==================== 导出器 ====================

class Exporter:
    """
    导出编排器

    单线程顺序处理：一个容器处理完毕后才开始下一个。
    """

    def __init__(
        self,
        driver: StorageDriver,
        catalog: CatalogService,
        layout: Optional[DestinationLayout] = None,
        checksum_hook: Optional[ChecksumHook] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        ext_initial_capacity: int = DEFAULT_EXT_INITIAL_CAPACITY,
        progress_callback: Optional[ProgressCallback] = None
    ):
        """
        初始化导出器

        Args:
            driver: 存储驱动
            catalog: 容器目录服务
            layout: 目标目录布局，默认使用模拟器兼容布局
            checksum_hook: 复制后回读校验算法
            max_depth: 目录树最大深度
            ext_initial_capacity: 扩展数据枚举的初始缓冲容量
            progress_callback: 文件复制进度回调
        """
        self._driver = driver
        self._catalog = catalog
        self._layout = layout or DestinationLayout()
        self._ext_initial_capacity = ext_initial_capacity
        self._copier = TreeCopier(
            driver,
            checksum_hook=checksum_hook,
            max_depth=max_depth,
            progress_callback=progress_callback
        )

    @property
    def layout(self) -> DestinationLayout:
        return self._layout

    # ==================== 目标准备 ====================

    def open_destination(self) -> int:
        """
        挂载目标 SD 存档

        Raises:
            SetupError: 挂载失败
        """
        try:
            return self._driver.open_archive(ArchiveId.SDMC, EMPTY_PATH)
        except DriverError as e:
            logger.error("%s", e)
            raise SetupError("无法打开目标存档", e) from e

    def prepare_destination(self, sd: int) -> None:
        """
        清空并重建目标根目录

        删除旧根目录的失败 (例如目录不存在) 被忽略。

        Raises:
            SetupError: 任一固定目录创建失败
        """
        try:
            self._driver.delete_directory_recursively(sd, encode_text(self._layout.root))
        except DriverError as e:
            logger.debug("%s (ignored)", e)

        for directory in self._layout.setup_directories():
            try:
                ensure_directory(self._driver, sd, directory)
            except DriverError as e:
                logger.error("%s", e)
                raise SetupError(f"无法创建目标目录 '{directory}'", e) from e

    # ==================== 导出阶段 ====================

    def dump_save_data(self, sd: int) -> List[ContainerResult]:
        """
        导出 SD 上的全部应用存档

        Raises:
            SetupError: 目录服务枚举失败
        """
        logger.info("Dumping SD save...")
        titles = list_titles(self._catalog, ContainerKind.SAVE_DATA)
        logger.info("SD title count: %d", len(titles))

        results = []
        for title in titles:
            result = ContainerResult(title, ContainerKind.SAVE_DATA)
            results.append(result)

            if high32(title) != SAVE_DATA_CLASSIFIER:
                logger.warning("Title: %016X skipped (classifier %08X)", title, high32(title))
                result.advance(ContainerState.SKIPPED)
                continue

            target = self._layout.save_target(title)
            self._export_container(
                result,
                sd,
                ArchiveId.USER_SAVEDATA,
                label="Title",
                directories=target.directories,
                tree_dir=target.tree_dir,
                metadata_file=target.metadata_file,
            )

        logger.info("Done")
        return results

    def dump_ext_data(self, sd: int) -> List[ContainerResult]:
        """
        导出 SD 上的全部扩展数据

        Raises:
            SetupError: 目录服务枚举失败
        """
        logger.info("Dumping SD ext...")
        ext_ids = enumerate_containers(
            self._catalog, ContainerKind.EXT_DATA, self._ext_initial_capacity
        )
        logger.info("SD ext count: %d", len(ext_ids))

        results = []
        for ext_id in ext_ids:
            result = ContainerResult(ext_id, ContainerKind.EXT_DATA)
            results.append(result)

            if high32(ext_id) != EXT_DATA_CLASSIFIER:
                logger.warning("Ext: %016X skipped (unexpected non-zero ID high)", ext_id)
                result.advance(ContainerState.SKIPPED)
                continue

            target = self._layout.ext_target(ext_id)
            self._export_container(
                result,
                sd,
                ArchiveId.EXTDATA,
                label="Ext",
                directories=target.directories,
                tree_dir=target.user_dir,
                metadata_file=target.metadata_file,
            )

        logger.info("Done")
        return results

    def run(self, on_ready: Optional[Callable[[], None]] = None) -> ExportReport:
        """
        完整导出流程

        挂载目标 -> 准备根目录 -> on_ready -> 应用存档 -> 扩展数据

        Args:
            on_ready: 根目录准备完成、开始导出前调用 (例如等待用户确认)

        Raises:
            SetupError: 初始化或枚举失败
        """
        report = ExportReport()
        sd = self.open_destination()
        try:
            self.prepare_destination(sd)
            if on_ready is not None:
                on_ready()
            report.containers.extend(self.dump_save_data(sd))
            report.containers.extend(self.dump_ext_data(sd))
        finally:
            try:
                self._driver.close_archive(sd)
            except DriverError as e:
                logger.error("%s", e)

        logger.info("All done!")
        return report

    # ==================== 内部实现 ====================

    def _export_container(
        self,
        result: ContainerResult,
        sd: int,
        archive_id: ArchiveId,
        label: str,
        directories: List[str],
        tree_dir: str,
        metadata_file: str
    ) -> None:
        container_path = encode_container_id(result.container_id)
        try:
            archive = self._driver.open_archive(archive_id, container_path)
        except DriverError as e:
            logger.warning("%s: %016X %s", label, result.container_id, e)
            result.errors.append(e)
            result.advance(ContainerState.OPEN_FAILED)
            result.advance(ContainerState.SKIPPED)
            return

        result.advance(ContainerState.OPENED)
        logger.info("%s: %016X", label, result.container_id)

        try:
            for directory in directories:
                ensure_directory(self._driver, sd, directory)
            result.advance(ContainerState.COPYING)
            result.copy_result = self._copier.copy_tree(archive, "", sd, tree_dir)
            result.advance(
                ContainerState.COPIED if result.copy_result.ok
                else ContainerState.COPY_FAILED
            )
        except DriverError as e:
            logger.error("%s", e)
            result.errors.append(e)
            result.advance(ContainerState.COPY_FAILED)
        finally:
            try:
                self._driver.close_archive(archive)
            except DriverError as e:
                logger.error("CloseArchive(source): %08X", e.code)

        try:
            result.format_info = export_metadata(
                self._driver, sd, metadata_file, archive_id, container_path
            )
        except ReliquaryError as e:
            logger.error("%s", e)
            result.errors.append(e)
            return

        result.advance(ContainerState.METADATA_WRITTEN)
        result.advance(ContainerState.DONE)
