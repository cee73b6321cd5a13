"""
Relay Hub

单一主控端（master）与多个客户端（client）之间的实时中继：
- protocol: 线上帧与载荷定义
- hub: 会话注册、角色管理、路由与 WebSocket 服务器
- client: 端点 SDK
- utils: 配置与日志
"""

__version__ = "1.0.0"

from .protocol import (
    Role,
    InboundEvent,
    OutboundEvent,
    Frame,
    DataPayload,
    ForwardRequest,
    ProtocolException,
    ValidationException,
    SerializationException,
)

from .hub import (
    Session,
    SessionRegistry,
    RoleManager,
    MessageRouter,
    LifecycleHandler,
    EventDispatcher,
    ConnectionManager,
    HubServer,
    start_hub_server,
    run_hub,
)

from .client import RelayClient

from .utils import HubConfig, get_config, configure_logging, get_logger

from .exceptions import (
    RelayHubError,
    UnknownSessionError,
    RoleTransitionError,
    RoutingError,
    InvalidPayloadError,
    NoMasterError,
    ConfigurationError,
    InvalidConfigurationError,
)

__all__ = [
    "__version__",
    # Protocol
    "Role",
    "InboundEvent",
    "OutboundEvent",
    "Frame",
    "DataPayload",
    "ForwardRequest",
    "ProtocolException",
    "ValidationException",
    "SerializationException",
    # Hub
    "Session",
    "SessionRegistry",
    "RoleManager",
    "MessageRouter",
    "LifecycleHandler",
    "EventDispatcher",
    "ConnectionManager",
    "HubServer",
    "start_hub_server",
    "run_hub",
    # Client
    "RelayClient",
    # Utils
    "HubConfig",
    "get_config",
    "configure_logging",
    "get_logger",
    # Exceptions
    "RelayHubError",
    "UnknownSessionError",
    "RoleTransitionError",
    "RoutingError",
    "InvalidPayloadError",
    "NoMasterError",
    "ConfigurationError",
    "InvalidConfigurationError",
]
