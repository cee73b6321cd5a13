"""Relay Hub 消息格式定义

本模块定义了线上帧结构以及各入站事件的载荷。
每个 websocket 文本帧都是一个 JSON 对象：

    {"event": "sendData", "args": [{"data": "ping", "deviceName": "tablet"}]}

args 为位置参数列表，对应"事件名 + 若干参数"的发送方式。
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .types import InboundEvent, OutboundEvent, Role
from .exceptions import SerializationException, ValidationException


@dataclass
class Frame:
    """线上帧"""

    event: str
    args: List[Any] = field(default_factory=list)

    @classmethod
    def build(cls, event: Union[InboundEvent, OutboundEvent, str], *args: Any) -> "Frame":
        """根据事件枚举或事件名构建帧"""
        name = event.value if isinstance(event, (InboundEvent, OutboundEvent)) else event
        return cls(event=name, args=list(args))

    def to_dict(self) -> Dict[str, Any]:
        return {"event": self.event, "args": list(self.args)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Frame":
        """从字典反序列化

        Raises:
            ValidationException: 结构无效时
        """
        if not isinstance(data, dict):
            raise ValidationException("Frame must be a JSON object")

        event = data.get("event")
        if not isinstance(event, str) or not event:
            raise ValidationException("Frame 'event' must be a non-empty string")

        args = data.get("args", [])
        if args is None:
            args = []
        elif isinstance(args, tuple):
            args = list(args)
        elif not isinstance(args, list):
            raise ValidationException("Frame 'args' must be a list")

        return cls(event=event, args=args)

    def to_json(self) -> str:
        """序列化为JSON字符串

        非 ASCII 字符一律转义，孤立代理项等无法编码为 UTF-8 的字符串
        也能原样送达。
        """
        try:
            return json.dumps(self.to_dict())
        except (TypeError, ValueError) as e:
            raise SerializationException(f"Failed to serialize frame: {e}")

    @classmethod
    def from_json(cls, raw: Union[str, bytes]) -> "Frame":
        """从JSON字符串反序列化"""
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SerializationException(f"Invalid JSON format: {e}")
        return cls.from_dict(data)

    def arg(self, index: int, default: Any = None) -> Any:
        """取第 index 个参数，不存在时返回 default"""
        if index < len(self.args):
            return self.args[index]
        return default


def _optional_str(value: Any, name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationException(f"'{name}' must be a string")
    return value


def is_valid_data(data: Any) -> bool:
    """载荷数据必须是去除空白后非空的字符串"""
    return isinstance(data, str) and data.strip() != ""


@dataclass
class DataPayload:
    """sendData 载荷"""

    data: Any
    device_name: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "DataPayload":
        """兼容两种发送方式：裸字符串，或 {data, deviceName} 对象

        data 本身不在这里校验，交由路由器判定并记录。
        """
        if isinstance(raw, dict):
            return cls(
                data=raw.get("data"),
                device_name=_optional_str(raw.get("deviceName"), "deviceName"),
            )
        return cls(data=raw)

    def is_valid(self) -> bool:
        return is_valid_data(self.data)


@dataclass
class ForwardRequest:
    """forwardData 载荷（仅主控端发送）

    sender_id 为原始发送者；recipients 为空表示转发给所有其他端点。
    """

    data: Any
    sender_id: Optional[str] = None
    recipients: Optional[List[str]] = None
    device_name: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "ForwardRequest":
        if not isinstance(raw, dict):
            raise ValidationException("forwardData payload must be an object")

        sender_id = raw.get("senderId", raw.get("messageSender"))
        target = raw.get("recipients", raw.get("recipientId", raw.get("recipient")))

        if target is None:
            recipients = None
        elif isinstance(target, str):
            recipients = [target]
        elif isinstance(target, (list, tuple)) and all(isinstance(t, str) for t in target):
            recipients = list(target)
        else:
            raise ValidationException("forwardData recipients must be a string or a list of strings")

        return cls(
            data=raw.get("data"),
            sender_id=_optional_str(sender_id, "senderId"),
            recipients=recipients,
            device_name=_optional_str(raw.get("deviceName"), "deviceName"),
        )

    def is_valid(self) -> bool:
        return is_valid_data(self.data)


@dataclass
class RoleDeclaration:
    """setRole 参数：role, ip, deviceModel"""

    role: Role
    master_ip: Optional[str] = None
    device_model: Optional[str] = None

    @classmethod
    def from_args(cls, args: List[Any]) -> "RoleDeclaration":
        if not args:
            raise ValidationException("setRole requires a role argument")
        return cls(
            role=Role.parse(args[0]),
            master_ip=_optional_str(args[1] if len(args) > 1 else None, "ip"),
            device_model=_optional_str(args[2] if len(args) > 2 else None, "deviceModel"),
        )
