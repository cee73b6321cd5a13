"""Relay Hub 配置管理

本模块提供统一的配置管理接口，支持环境变量、默认值和运行时配置。
配置优先级：命令行参数 > 环境变量 > 默认值
"""

import os
from typing import Any, Callable, Dict, Optional
from dataclasses import dataclass, field, fields

from ..exceptions import InvalidConfigurationError

ENV_PREFIX = "RELAY_HUB_"


def _env(name: str, default: Any, cast: Callable[[str], Any]) -> Any:
    raw = os.getenv(f"{ENV_PREFIX}{name.upper()}")
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise InvalidConfigurationError(f"{ENV_PREFIX}{name.upper()}", raw)


def _as_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ValueError(raw)


@dataclass
class HubConfig:
    """Relay Hub 配置类"""

    # Hub 服务器配置
    host: str = "0.0.0.0"
    port: int = 3000
    max_connections: int = 1000

    # WebSocket 配置（传输层保活）
    ws_ping_interval: float = 30.0
    ws_ping_timeout: float = 10.0
    ws_close_timeout: float = 10.0

    # 日志配置
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_file: Optional[str] = None
    enable_rich_logging: bool = True

    # 自定义配置
    custom: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "HubConfig":
        """从环境变量创建配置

        环境变量格式：RELAY_HUB_<配置名>，例如 RELAY_HUB_PORT=3000

        Raises:
            InvalidConfigurationError: 数值或布尔值无法解析时
        """
        config = cls()

        config.host = _env("host", config.host, str)
        config.port = _env("port", config.port, int)
        config.max_connections = _env("max_connections", config.max_connections, int)

        config.ws_ping_interval = _env("ws_ping_interval", config.ws_ping_interval, float)
        config.ws_ping_timeout = _env("ws_ping_timeout", config.ws_ping_timeout, float)
        config.ws_close_timeout = _env("ws_close_timeout", config.ws_close_timeout, float)

        config.log_level = _env("log_level", config.log_level, str)
        config.log_format = _env("log_format", config.log_format, str)
        config.log_file = _env("log_file", config.log_file, str)
        config.enable_rich_logging = _env(
            "enable_rich_logging", config.enable_rich_logging, _as_bool
        )

        return config

    def update(self, **kwargs) -> None:
        """更新配置项，值为 None 的参数被忽略

        Args:
            **kwargs: 要更新的配置项，未知键写入 custom
        """
        for key, value in kwargs.items():
            if value is None:
                continue
            if key != "custom" and hasattr(self, key):
                setattr(self, key, value)
            else:
                self.custom[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """获取配置项"""
        if key != "custom" and hasattr(self, key):
            return getattr(self, key)
        return self.custom.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        result = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "custom"}

        # 添加自定义配置
        result.update(self.custom)
        return result


# 全局配置实例
_global_config: Optional[HubConfig] = None


def get_config() -> HubConfig:
    """获取全局配置

    如果配置尚未初始化，则从环境变量创建默认配置。
    """
    global _global_config
    if _global_config is None:
        _global_config = HubConfig.from_env()
    return _global_config


def set_config(config: HubConfig) -> None:
    """设置全局配置"""
    global _global_config
    _global_config = config


def update_config(**kwargs) -> None:
    """更新全局配置"""
    get_config().update(**kwargs)


def reset_config() -> None:
    """重置全局配置

    清除当前配置，下次调用 get_config() 时会重新从环境变量读取。
    """
    global _global_config
    _global_config = None
