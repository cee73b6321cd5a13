"""Hub 连接管理器"""

import asyncio
from typing import Any, Dict, Optional, Union

from websockets.asyncio.server import ServerConnection
from websockets.exceptions import ConnectionClosed

from .emitter import Emitter
from ..protocol import Frame, OutboundEvent
from ..utils import get_logger


class Connection:
    """客户端连接

    出站帧先进入无界队列，由独立的写任务依次发送，
    因此 enqueue 不会阻塞事件处理。
    """

    def __init__(
        self,
        session_id: str,
        websocket: ServerConnection,
        address: Optional[str] = None,
    ):
        self.session_id = session_id
        self.websocket = websocket
        self.address = address
        self.connected = True
        self.sent_count = 0
        self._queue: "asyncio.Queue[str]" = asyncio.Queue()
        self._writer: Optional[asyncio.Task] = None
        self.logger = get_logger("relay_hub.hub.connection")

    def start(self) -> None:
        """启动写任务"""
        if self._writer is None:
            self._writer = asyncio.create_task(self._write_loop())

    def enqueue(self, raw: str) -> bool:
        """把已序列化的帧放入发送队列"""
        if not self.connected:
            return False
        self._queue.put_nowait(raw)
        return True

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def _write_loop(self) -> None:
        try:
            while self.connected:
                raw = await self._queue.get()
                try:
                    await self.websocket.send(raw)
                except ConnectionClosed:
                    raise
                except Exception as e:
                    # 单个帧发送失败只丢弃该帧
                    self.logger.error(f"向 {self.session_id} 发送帧失败: {e}")
                    continue
                self.sent_count += 1
        except ConnectionClosed:
            self.logger.debug(f"连接 {self.session_id} 已关闭，停止发送")
        finally:
            self.connected = False

    async def close(self, code: int = 1000, reason: str = "") -> None:
        """关闭连接并停止写任务"""
        self.stop()
        await self.websocket.close(code=code, reason=reason)

    def stop(self) -> None:
        """停止写任务，队列中未发送的帧被丢弃"""
        self.connected = False
        if self._writer is not None and not self._writer.done():
            self._writer.cancel()


class ConnectionManager(Emitter):
    """连接管理器"""

    def __init__(self):
        # 连接映射：session_id -> Connection
        self._connections: Dict[str, Connection] = {}
        self.logger = get_logger("relay_hub.hub.manager")

    def add_connection(
        self,
        session_id: str,
        websocket: ServerConnection,
        address: Optional[str] = None,
    ) -> Connection:
        """添加连接并启动其写任务"""
        connection = Connection(session_id, websocket, address)
        self._connections[session_id] = connection
        connection.start()
        self.logger.debug(f"连接已登记: {session_id} ({address})")
        return connection

    def remove_connection(self, session_id: str) -> bool:
        """移除连接

        Returns:
            是否移除成功
        """
        connection = self._connections.pop(session_id, None)
        if connection is None:
            return False

        connection.stop()
        self.logger.debug(f"连接已移除: {session_id}")
        return True

    def get_connection(self, session_id: str) -> Optional[Connection]:
        return self._connections.get(session_id)

    def get_all_connections(self) -> Dict[str, Connection]:
        return self._connections.copy()

    def __len__(self) -> int:
        return len(self._connections)

    def emit(self, session_id: str, event: Union[OutboundEvent, str], *args: Any) -> bool:
        """向会话发送事件（非阻塞，不确认送达）"""
        connection = self._connections.get(session_id)
        if connection is None or not connection.connected:
            self.logger.debug(f"会话 {session_id} 无可用连接，丢弃事件 {event}")
            return False

        frame = Frame.build(event, *args)
        return connection.enqueue(frame.to_json())

    def get_stats(self) -> Dict[str, int]:
        """获取连接统计"""
        connections = self._connections.values()
        return {
            "total": len(self._connections),
            "pending_frames": sum(c.pending for c in connections),
            "sent_frames": sum(c.sent_count for c in connections),
        }
