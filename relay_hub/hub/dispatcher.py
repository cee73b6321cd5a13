"""Hub 入站事件分发

每种入站事件只对应一个处理函数；发送者角色在分发时从注册表读取，
不会为某个角色单独注册监听器。
"""

from typing import Callable, Dict

from .lifecycle import LifecycleHandler
from .roles import RoleManager
from .router import MessageRouter
from ..exceptions import RelayHubError
from ..protocol import Frame, InboundEvent, ProtocolException, RoleDeclaration, ValidationException
from ..utils import get_logger


class EventDispatcher:
    """入站事件分发器"""

    def __init__(
        self,
        lifecycle: LifecycleHandler,
        roles: RoleManager,
        router: MessageRouter,
    ):
        self.lifecycle = lifecycle
        self.roles = roles
        self.router = router
        self.logger = get_logger("relay_hub.hub.dispatcher")

        self._handlers: Dict[str, Callable[[str, Frame], None]] = {
            InboundEvent.REGISTER_DEVICE.value: self._on_register_device,
            InboundEvent.SET_ROLE.value: self._on_set_role,
            InboundEvent.SEND_DATA.value: self._on_send_data,
            InboundEvent.FORWARD_DATA.value: self._on_forward_data,
        }

    def dispatch(self, session_id: str, frame: Frame) -> bool:
        """分发一个入站帧

        错误只在本地记录，不会回传给发送端，也不会中断连接。

        Returns:
            处理函数是否正常执行完毕
        """
        handler = self._handlers.get(frame.event)
        if handler is None:
            self.logger.warning(f"会话 {session_id} 发送了未知事件: {frame.event}")
            return False

        try:
            handler(session_id, frame)
            return True
        except RelayHubError as e:
            self.logger.warning(f"处理 {frame.event} 失败 ({session_id}): [{e.error_code}] {e.message}")
        except ProtocolException as e:
            self.logger.warning(f"{frame.event} 参数无效 ({session_id}): {e}")
        return False

    def _on_register_device(self, session_id: str, frame: Frame) -> None:
        device_name = frame.arg(0)
        if not isinstance(device_name, str):
            raise ValidationException("registerDevice requires a device name string")
        self.lifecycle.on_device_registered(session_id, device_name)

    def _on_set_role(self, session_id: str, frame: Frame) -> None:
        declaration = RoleDeclaration.from_args(frame.args)
        self.roles.declare_role(
            session_id,
            declaration.role,
            master_ip=declaration.master_ip,
            device_model=declaration.device_model,
        )

    def _on_send_data(self, session_id: str, frame: Frame) -> None:
        self.router.route(session_id, frame.arg(0))

    def _on_forward_data(self, session_id: str, frame: Frame) -> None:
        self.router.forward(session_id, frame.arg(0))
