"""Relay Hub 类型定义

本模块定义了中继协议的基础枚举：端点角色、入站事件与出站事件。
所有枚举的值即为线上传输使用的字符串。
"""

from enum import Enum
from typing import Union

from .exceptions import ValidationException


class Role(Enum):
    """端点角色枚举

    UNASSIGNED 为连接建立后的初始角色，线上协议只接受 master / client。
    """

    UNASSIGNED = "unassigned"
    MASTER = "master"
    CLIENT = "client"

    @classmethod
    def parse(cls, value: Union["Role", str]) -> "Role":
        """解析角色声明

        Args:
            value: Role 实例或线上字符串（不区分大小写）

        Returns:
            MASTER 或 CLIENT

        Raises:
            ValidationException: 无法识别或声明 UNASSIGNED 时
        """
        if isinstance(value, cls):
            role = value
        elif isinstance(value, str):
            try:
                role = cls(value.strip().lower())
            except ValueError:
                raise ValidationException(f"Unknown role: {value!r}")
        else:
            raise ValidationException(f"Role must be a string, got {type(value).__name__}")

        if role is cls.UNASSIGNED:
            raise ValidationException("Role 'unassigned' cannot be declared")
        return role


class InboundEvent(Enum):
    """端点发往 Hub 的事件"""

    REGISTER_DEVICE = "registerDevice"
    SET_ROLE = "setRole"
    SEND_DATA = "sendData"
    FORWARD_DATA = "forwardData"


class OutboundEvent(Enum):
    """Hub 发往端点的事件"""

    CLIENT_CONNECTED = "clientConnected"
    MASTER_CONNECTED = "masterConnected"
    CONNECTED_TO_MASTER = "connectedToMaster"
    RECEIVE_DATA = "receiveData"
    FORWARD_DATA = "forwardData"
    MASTER_DISCONNECTED = "masterDisconnected"
    CLIENT_DISCONNECTED = "clientDisconnected"
