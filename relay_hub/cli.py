"""relay-hub 命令行入口"""

import argparse
import asyncio
import sys
from typing import List, Optional

from rich.console import Console

from .exceptions import ConfigurationError
from .hub import run_hub
from .utils import HubConfig, configure_logging, set_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="relay-hub",
        description="Master/client relay hub over WebSocket",
    )
    parser.add_argument("--host", help="Host address (default: RELAY_HUB_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, help="Port number (default: RELAY_HUB_PORT or 3000)")
    parser.add_argument("--max-connections", type=int, help="Maximum concurrent connections")
    parser.add_argument("--log-level", help="Log level (DEBUG, INFO, WARNING, ...)")
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument(
        "--no-rich",
        action="store_true",
        help="Plain console logging instead of rich output",
    )
    return parser


def load_config(args: argparse.Namespace) -> HubConfig:
    """环境变量为基础，命令行参数覆盖"""
    config = HubConfig.from_env()
    config.update(
        host=args.host,
        port=args.port,
        max_connections=args.max_connections,
        log_level=args.log_level,
        log_file=args.log_file,
    )
    if args.no_rich:
        config.enable_rich_logging = False
    return config


def main(argv: Optional[List[str]] = None) -> int:
    console = Console(stderr=True)
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args)
    except ConfigurationError as e:
        console.print(f"[red]配置错误:[/red] {e.message}")
        return 2

    set_config(config)
    configure_logging(
        level=config.log_level,
        log_file=config.log_file,
        enable_rich=config.enable_rich_logging,
        fmt=config.log_format,
    )

    try:
        asyncio.run(run_hub(config))
    except KeyboardInterrupt:
        console.print("再见!")
    except OSError as e:
        console.print(f"[red]服务器启动失败:[/red] {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
