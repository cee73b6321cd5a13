"""
Hub 服务器模块

会话注册与按角色路由：
- 会话与注册表
- 角色管理、路由、生命周期
- WebSocket 服务器与连接管理
"""

from .session import Session, SessionRegistry, MasterDeclaration
from .emitter import Emitter
from .roles import RoleManager
from .router import MessageRouter
from .lifecycle import LifecycleHandler
from .dispatcher import EventDispatcher
from .manager import ConnectionManager, Connection
from .server import HubServer, start_hub_server, run_hub

__all__ = [
    "Session",
    "SessionRegistry",
    "MasterDeclaration",
    "Emitter",
    "RoleManager",
    "MessageRouter",
    "LifecycleHandler",
    "EventDispatcher",
    "ConnectionManager",
    "Connection",
    "HubServer",
    "start_hub_server",
    "run_hub",
]
