#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
命令行入口

交互模式下在开始导出前和结束后各暂停一次，等待用户按回车确认；
初始化失败时在确认后以非零状态码退出。
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional

from . import __version__
from .config import Settings, default_config_path, load_settings
from .driver.local import LocalCatalogService, LocalStorageDriver
from .exceptions import ReliquaryError
from .exporter import ExportReport, Exporter
from .hooks.registry import available_checksums, get_checksum_hook


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_USAGE = 2

# 暂停闸门: 接收提示文字，阻塞直到用户确认
Gate = Callable[[str], None]


def console_gate(prompt: str) -> None:
    """打印提示并等待回车，标准输入已关闭时直接继续"""
    try:
        input(prompt)
    except EOFError:
        pass


def no_gate(prompt: str) -> None:
    pass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reliquary",
        description="Export save data and extra data containers into an emulator-compatible layout",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"reliquary {__version__}",
    )
    parser.add_argument(
        "--device-root",
        type=Path,
        help="Device directory containing sdmc/, savedata/ and extdata/",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"JSON settings file (default: {default_config_path()})",
    )
    parser.add_argument(
        "--checksum",
        choices=available_checksums(),
        help="Verify each copied file by reading it back and comparing digests",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        help="Maximum directory nesting depth to traverse",
    )
    parser.add_argument(
        "-y", "--yes",
        action="store_true",
        help="Do not pause for confirmation",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def _resolve_settings(args: argparse.Namespace) -> Settings:
    config_path = args.config
    if config_path is None and default_config_path().exists():
        config_path = default_config_path()
    return load_settings(config_path).with_overrides(
        device_root=args.device_root,
        checksum=args.checksum,
        max_depth=args.max_depth,
        interactive=False if args.yes else None,
    )


def _log_summary(report: ExportReport) -> None:
    logger.info(
        "Exported %d, skipped %d, failed %d",
        len(report.exported), len(report.skipped), len(report.failed)
    )
    totals = report.totals()
    logger.info(
        "Copied %d files (%d bytes), %d failed",
        totals.copied_count, totals.total_bytes, totals.failed_count
    )
    for container in report.containers:
        if container.copy_result is None:
            continue
        for path, error in container.copy_result.failed_files:
            logger.warning("%016X %s: %s", container.container_id, path, error)


def main(argv: Optional[List[str]] = None, gate: Optional[Gate] = None) -> int:
    """
    CLI 主入口

    Args:
        argv: 命令行参数，None 时使用 sys.argv
        gate: 暂停闸门，None 时根据配置选择

    Returns:
        进程退出码
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    try:
        settings = _resolve_settings(args)
    except (ReliquaryError, ValueError) as e:
        logger.error("%s", e)
        return EXIT_USAGE

    if gate is None:
        gate = console_gate if settings.interactive else no_gate

    logger.info("Initializing...")
    with LocalStorageDriver(settings.device_root) as driver:
        exporter = Exporter(
            driver,
            LocalCatalogService(settings.device_root),
            checksum_hook=get_checksum_hook(settings.checksum),
            max_depth=settings.max_depth,
            ext_initial_capacity=settings.ext_initial_capacity,
        )
        try:
            report = exporter.run(on_ready=lambda: gate("Press Enter to continue..."))
        except (ReliquaryError, OSError) as e:
            logger.error("%s", e)
            gate("Press Enter to exit...")
            return EXIT_FATAL

    _log_summary(report)
    gate("Press Enter to continue...")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
