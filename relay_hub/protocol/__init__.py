"""Relay Hub 协议核心模块"""

from .exceptions import (
    ProtocolException,
    ValidationException,
    SerializationException,
)
from .types import Role, InboundEvent, OutboundEvent
from .messages import (
    Frame,
    DataPayload,
    ForwardRequest,
    RoleDeclaration,
    is_valid_data,
)

__all__ = [
    # 异常类
    "ProtocolException",
    "ValidationException",
    "SerializationException",
    # 类型枚举
    "Role",
    "InboundEvent",
    "OutboundEvent",
    # 帧与载荷
    "Frame",
    "DataPayload",
    "ForwardRequest",
    "RoleDeclaration",
    "is_valid_data",
]
