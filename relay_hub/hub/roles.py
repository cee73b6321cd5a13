"""Hub 角色管理器"""

from typing import Optional, Union

from .emitter import Emitter
from .session import Session, SessionRegistry
from ..exceptions import RoleTransitionError
from ..protocol import OutboundEvent, Role
from ..utils import get_logger


class RoleManager:
    """处理 setRole 声明，更新注册表并发出角色通知"""

    def __init__(self, registry: SessionRegistry, emitter: Emitter):
        self.registry = registry
        self.emitter = emitter
        self.logger = get_logger("relay_hub.hub.roles")

    def declare_role(
        self,
        session_id: str,
        role: Union[Role, str],
        master_ip: Optional[str] = None,
        device_model: Optional[str] = None,
    ) -> Session:
        """声明会话角色

        Args:
            session_id: 会话ID
            role: master 或 client
            master_ip: 端点上报的地址，仅作记录
            device_model: 端点设备型号

        Returns:
            更新后的会话

        Raises:
            UnknownSessionError: 会话不存在
            ValidationException: 角色无法识别
            RoleTransitionError: 在 master 与 client 之间切换
        """
        session = self.registry.require(session_id)
        role = Role.parse(role)

        if session.role is not Role.UNASSIGNED and session.role is not role:
            raise RoleTransitionError(session_id, session.role.value, role.value)

        session.role = role
        session.master_ip = master_ip
        session.device_model = device_model
        self.logger.info(f"会话 {session_id} 声明角色: {role.value} (ip={master_ip})")

        if role is Role.MASTER:
            self._promote_master(session)
        else:
            self._attach_client(session)
        return session

    def _promote_master(self, session: Session) -> None:
        previous = self.registry.find_master()
        if previous is not None and previous.id != session.id:
            self.logger.warning(
                f"主控端 {previous.id} 被 {session.id} 取代，旧主控端未收到降级通知"
            )

        declaration = self.registry.record_master_declaration(session.id)
        self.logger.debug(f"主控端声明 #{declaration.sequence}: {session.id}")

        # 通知所有会话（包括新主控端自己）
        info = session.to_dict()
        sent = self.emitter.emit_many(
            [s.id for s in self.registry.all()], OutboundEvent.MASTER_CONNECTED, info
        )
        self.logger.debug(f"masterConnected 已发送给 {sent} 个会话")

    def _attach_client(self, session: Session) -> None:
        master = self.registry.find_master()
        if master is None:
            session.master_id = None
            self.logger.info(f"客户端 {session.id} 暂无可用主控端")
            return

        session.master_id = master.id
        payload = master.to_dict()
        payload["clientDeviceModel"] = session.device_model
        self.emitter.emit(session.id, OutboundEvent.CONNECTED_TO_MASTER, payload)
        self.logger.info(f"客户端 {session.id} 已关联主控端 {master.id}")
