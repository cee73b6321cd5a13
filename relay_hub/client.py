"""Relay Hub 客户端

端点使用的轻量 SDK：连接 Hub、声明角色、收发数据。

Usage:
    client = RelayClient("ws://localhost:3000")

    @client.on("forwardData")
    async def handle_forward(payload):
        print(payload["senderId"], payload["data"])

    await client.connect()
    await client.set_role("master", "192.168.1.10", "Pixel 8")
"""

import asyncio
import inspect
from typing import Any, Callable, Dict, List, Optional, Union

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed

from .protocol import Frame, InboundEvent, OutboundEvent, ProtocolException, Role
from .utils import get_logger

EventName = Union[InboundEvent, OutboundEvent, str]


def _event_name(event: EventName) -> str:
    return event.value if isinstance(event, (InboundEvent, OutboundEvent)) else event


class RelayClient:
    """Relay Hub 客户端"""

    def __init__(self, hub_url: str):
        self.hub_url = hub_url
        self.websocket: Optional[ClientConnection] = None
        self.connected = False

        # 事件名 -> 处理器列表
        self._handlers: Dict[str, List[Callable]] = {}
        self._receive_task: Optional[asyncio.Task] = None

        self.logger = get_logger("relay_hub.client")

    async def __aenter__(self) -> "RelayClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()

    def on(self, event: EventName):
        """事件处理器装饰器

        处理器按事件参数调用，可以是普通函数或协程函数。

        Usage:
            @client.on(OutboundEvent.RECEIVE_DATA)
            def handle(data):
                ...
        """

        def decorator(func: Callable):
            self._handlers.setdefault(_event_name(event), []).append(func)
            return func

        return decorator

    # ===========================================
    # 连接管理
    # ===========================================

    async def connect(self) -> None:
        """连接到 Hub 并启动接收循环"""
        try:
            self.logger.info(f"连接到 Hub: {self.hub_url}")
            self.websocket = await connect(self.hub_url)
            self.connected = True
            self._receive_task = asyncio.create_task(self.receive_loop())
        except OSError as e:
            self.logger.error(f"连接失败: {e}")
            self.connected = False
            raise

    async def disconnect(self) -> None:
        """断开连接"""
        if self.websocket is None:
            return

        try:
            await self.websocket.close()
            if self._receive_task is not None:
                await self._receive_task
        finally:
            self.connected = False
            self.websocket = None
            self._receive_task = None
            self.logger.info("连接已断开")

    async def receive_loop(self) -> None:
        """消息监听循环"""
        try:
            async for raw_message in self.websocket:
                try:
                    frame = Frame.from_json(raw_message)
                except ProtocolException as e:
                    self.logger.warning(f"收到无效帧: {e}")
                    continue
                await self._dispatch(frame)

        except ConnectionClosed:
            self.logger.info("WebSocket 连接已关闭")
        finally:
            self.connected = False

    async def _dispatch(self, frame: Frame) -> None:
        handlers = self._handlers.get(frame.event, [])
        if not handlers:
            self.logger.debug(f"未处理的事件: {frame.event}")
            return

        for handler in handlers:
            try:
                result = handler(*frame.args)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self.logger.error(f"{frame.event} 处理器出错: {e}")

    # ===========================================
    # 发送
    # ===========================================

    async def emit(self, event: EventName, *args: Any) -> None:
        """发送事件"""
        if not self.connected or self.websocket is None:
            raise RuntimeError("客户端未连接")

        frame = Frame.build(_event_name(event), *args)
        await self.websocket.send(frame.to_json())
        self.logger.debug(f"发送事件: {frame.event}")

    async def register_device(self, device_name: str) -> None:
        await self.emit(InboundEvent.REGISTER_DEVICE, device_name)

    async def set_role(
        self,
        role: Union[Role, str],
        ip: Optional[str] = None,
        device_model: Optional[str] = None,
    ) -> None:
        """声明角色（master / client）"""
        role_name = role.value if isinstance(role, Role) else role
        await self.emit(InboundEvent.SET_ROLE, role_name, ip, device_model)

    async def send_data(self, data: str, device_name: Optional[str] = None) -> None:
        """发送数据：主控端广播，客户端发给主控端"""
        payload: Dict[str, Any] = {"data": data}
        if device_name is not None:
            payload["deviceName"] = device_name
        await self.emit(InboundEvent.SEND_DATA, payload)

    async def forward_data(
        self,
        data: str,
        sender_id: str,
        recipient_id: Optional[Union[str, List[str]]] = None,
        device_name: Optional[str] = None,
    ) -> None:
        """主控端中继数据给指定会话（未指定时为所有其他会话）"""
        payload: Dict[str, Any] = {"data": data, "senderId": sender_id}
        if recipient_id is not None:
            payload["recipientId"] = recipient_id
        if device_name is not None:
            payload["deviceName"] = device_name
        await self.emit(InboundEvent.FORWARD_DATA, payload)
