"""Hub WebSocket 服务器"""

import asyncio
import signal
import sys
import uuid
from typing import Any, Dict, Optional, Union

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosed

from .dispatcher import EventDispatcher
from .lifecycle import LifecycleHandler
from .manager import ConnectionManager
from .roles import RoleManager
from .router import MessageRouter
from .session import SessionRegistry
from ..protocol import Frame, ProtocolException
from ..utils import HubConfig, get_config, get_logger


class HubServer:
    """Hub WebSocket 服务器

    所有事件在同一个事件循环中处理；核心组件都是同步的，
    每个入站事件执行完毕后才会处理下一个。
    """

    def __init__(
        self,
        config: Optional[HubConfig] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
        max_connections: Optional[int] = None,
    ):
        self.config = config or get_config()
        self.host = host if host is not None else self.config.host
        self.port = port if port is not None else self.config.port
        self.max_connections = (
            max_connections if max_connections is not None else self.config.max_connections
        )

        # 核心组件
        self.registry = SessionRegistry()
        self.connection_manager = ConnectionManager()
        self.lifecycle = LifecycleHandler(self.registry, self.connection_manager)
        self.roles = RoleManager(self.registry, self.connection_manager)
        self.router = MessageRouter(self.registry, self.connection_manager)
        self.dispatcher = EventDispatcher(self.lifecycle, self.roles, self.router)

        # 服务器状态
        self.server: Optional[Server] = None
        self.running = False

        self.logger = get_logger("relay_hub.hub.server")

    @property
    def bound_port(self) -> Optional[int]:
        """实际监听的端口（port=0 时由系统分配）"""
        if self.server is None:
            return None
        for sock in self.server.sockets:
            return sock.getsockname()[1]
        return None

    async def start(self) -> None:
        """启动服务器"""
        if self.running:
            self.logger.warning("服务器已经在运行")
            return

        try:
            self.logger.info(f"启动 Relay Hub: {self.host}:{self.port}")
            self.server = await serve(
                self._handle_client,
                self.host,
                self.port,
                max_size=None,
                ping_interval=self.config.ws_ping_interval,
                ping_timeout=self.config.ws_ping_timeout,
                close_timeout=self.config.ws_close_timeout,
            )
            self.running = True
            self.logger.info(f"Relay Hub 启动成功，端口 {self.bound_port}")

        except OSError as e:
            self.logger.error(f"启动服务器失败: {e}")
            raise

    async def stop(self) -> None:
        """停止服务器"""
        if not self.running:
            return

        self.logger.info("停止 Relay Hub")
        self.running = False

        try:
            connections = self.connection_manager.get_all_connections()
            if connections:
                await asyncio.gather(
                    *(
                        connection.close(code=1001, reason="Server shutdown")
                        for connection in connections.values()
                    ),
                    return_exceptions=True,
                )

            if self.server:
                self.server.close()
                await self.server.wait_closed()
                self.server = None

            self.logger.info("Relay Hub 已停止")
        finally:
            self.running = False

    async def _handle_client(self, websocket: ServerConnection) -> None:
        """处理客户端连接

        每个连接分配新的身份；重连也视为全新会话。
        """
        if len(self.connection_manager) >= self.max_connections:
            self.logger.warning("超过最大连接数，拒绝新连接")
            await websocket.close(code=1013, reason="Server overloaded")
            return

        session_id = uuid.uuid4().hex
        address = self._format_address(websocket.remote_address)

        self.connection_manager.add_connection(session_id, websocket, address)
        self.lifecycle.on_connect(session_id, address)

        try:
            async for raw_message in websocket:
                self._handle_frame(session_id, raw_message)

        except ConnectionClosed:
            self.logger.debug(f"客户端 {session_id} 连接异常关闭")
        finally:
            self.connection_manager.remove_connection(session_id)
            self.lifecycle.on_disconnect(session_id)

    def _handle_frame(self, session_id: str, raw_message: Union[str, bytes]) -> bool:
        """解析并分发一个入站帧"""
        try:
            frame = Frame.from_json(raw_message)
        except ProtocolException as e:
            self.logger.warning(f"客户端 {session_id} 发送了无效帧: {e}")
            return False

        self.logger.debug(f"收到 {frame.event} 来自 {session_id}")
        return self.dispatcher.dispatch(session_id, frame)

    @staticmethod
    def _format_address(remote_address: Any) -> Optional[str]:
        if not remote_address:
            return None
        if isinstance(remote_address, (tuple, list)):
            return str(remote_address[0])
        return str(remote_address)

    def get_stats(self) -> Dict[str, Any]:
        """获取服务器统计信息"""
        return {
            "server": {
                "running": self.running,
                "host": self.host,
                "port": self.bound_port or self.port,
                "max_connections": self.max_connections,
            },
            "connections": self.connection_manager.get_stats(),
            "sessions": self.registry.stats(),
        }


# 便捷的启动函数
async def start_hub_server(
    host: Optional[str] = None,
    port: Optional[int] = None,
    max_connections: Optional[int] = None,
    config: Optional[HubConfig] = None,
) -> HubServer:
    """启动 Hub 服务器并返回实例"""
    server = HubServer(config, host=host, port=port, max_connections=max_connections)
    await server.start()
    return server


async def run_hub(config: Optional[HubConfig] = None) -> None:
    """运行 Hub 直到收到 SIGINT/SIGTERM"""
    server = await start_hub_server(config=config)
    logger = get_logger("relay_hub.hub.server")

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop_event.set)
            except NotImplementedError:
                logger.warning(f"当前平台不支持信号处理（{sig}），请使用 Ctrl+C 退出")

    try:
        await stop_event.wait()
    finally:
        await server.stop()
