"""Relay Hub 日志系统

本模块提供统一的日志接口，支持 rich 富文本控制台日志和文件日志。
只有包根日志器（"relay_hub"）挂载 handler，各组件通过 get_logger
获取子日志器并向上传播。
"""

import logging
import sys
from typing import Optional

from rich.logging import RichHandler

ROOT_LOGGER_NAME = "relay_hub"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(
    name: str = ROOT_LOGGER_NAME,
    level: Optional[str] = "info",
    log_file: Optional[str] = None,
    enable_rich: bool = True,
    fmt: Optional[str] = None,
) -> logging.Logger:
    """设置日志器

    重复调用会替换已有的 handler，不会重复输出。

    Args:
        name: 日志器名称
        level: 日志级别
        log_file: 日志文件路径，为空则不写文件
        enable_rich: 是否使用 RichHandler 输出到控制台
        fmt: 标准格式串，用于文件日志以及非 rich 控制台

    Returns:
        配置好的日志器
    """
    level = (level or "INFO").upper()
    fmt = fmt or DEFAULT_FORMAT

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # 清除现有处理器
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if enable_rich:
        rich_handler = RichHandler(
            rich_tracebacks=True, show_time=True, show_level=True, show_path=False
        )
        rich_handler.setLevel(level)
        logger.addHandler(rich_handler)
    else:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """获取日志器

    不以 "relay_hub" 开头的名称会被挂到包根日志器之下。
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def disable_logging() -> None:
    """关闭包内所有日志输出

    子日志器的级别继承自包根日志器，因此提高根级别即可屏蔽全部输出。
    """
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(logging.CRITICAL + 1)
