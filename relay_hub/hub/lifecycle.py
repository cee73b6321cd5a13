"""Hub 连接生命周期处理"""

from typing import Optional

from .emitter import Emitter
from .session import Session, SessionRegistry
from ..protocol import OutboundEvent
from ..utils import get_logger


class LifecycleHandler:
    """响应传输层的连接/断开信号，维护注册表并发出成员变更通知"""

    def __init__(self, registry: SessionRegistry, emitter: Emitter):
        self.registry = registry
        self.emitter = emitter
        self.logger = get_logger("relay_hub.hub.lifecycle")

    def on_connect(self, session_id: str, address: Optional[str] = None) -> Session:
        """新连接建立：创建 UNASSIGNED 会话并通知其他会话"""
        if session_id in self.registry:
            self.logger.warning(f"会话 {session_id} 已存在，覆盖旧记录")

        session = Session(id=session_id, address=address)
        self.registry.put(session)
        self.logger.info(f"客户端连接: {session_id} ({address})")

        self._announce(session)
        return session

    def on_device_registered(self, session_id: str, device_name: str) -> Optional[Session]:
        """附加设备名并广播更新后的身份信息，不影响路由"""
        session = self.registry.get(session_id)
        if session is None:
            self.logger.warning(f"忽略未知会话的设备注册: {session_id}")
            return None

        session.device_name = device_name
        self.logger.info(f"会话 {session_id} 注册设备: {device_name}")

        self._announce(session)
        return session

    def on_disconnect(self, session_id: str) -> Optional[Session]:
        """连接断开：移除会话并通知相关方

        当前主控端断开时通知所有剩余会话；其他会话断开时只通知当前主控端。
        不会自动选举新的主控端。
        """
        was_master = self.registry.is_current_master(session_id)
        session = self.registry.remove(session_id)
        if session is None:
            self.logger.debug(f"断开的会话不在注册表中: {session_id}")
            return None

        self.logger.info(f"客户端断开: {session_id} ({session.role.value})")

        if was_master:
            remaining = [s.id for s in self.registry.all()]
            self.emitter.emit_many(remaining, OutboundEvent.MASTER_DISCONNECTED)
            self.logger.info(f"主控端 {session_id} 已断开，已通知 {len(remaining)} 个会话")
            return session

        master = self.registry.find_master()
        if master is not None:
            self.emitter.emit(master.id, OutboundEvent.CLIENT_DISCONNECTED, session_id)
        return session

    def _announce(self, session: Session) -> None:
        info = {
            "id": session.id,
            "address": session.address,
            "deviceName": session.device_name,
        }
        self.emitter.emit_many(
            [s.id for s in self.registry.all_except(session.id)],
            OutboundEvent.CLIENT_CONNECTED,
            info,
        )
