"""Hub 消息路由器"""

from typing import Any, List

from .emitter import Emitter
from .session import Session, SessionRegistry
from ..exceptions import InvalidPayloadError, NoMasterError, RoutingError, UnknownSessionError
from ..protocol import DataPayload, ForwardRequest, OutboundEvent, ValidationException
from ..utils import get_logger


class MessageRouter:
    """消息路由器

    根据发送者角色决定目标：当前主控端广播给其他所有会话，
    其他会话的数据只转发给当前主控端。路由器从不修改注册表。
    """

    def __init__(self, registry: SessionRegistry, emitter: Emitter):
        self.registry = registry
        self.emitter = emitter
        self.logger = get_logger("relay_hub.hub.router")

    def route(self, sender_id: str, payload: Any) -> bool:
        """路由 sendData 载荷

        Args:
            sender_id: 发送者会话ID
            payload: 裸字符串或 {data, deviceName} 对象

        Returns:
            是否有事件被发出；无效载荷、未知发送者、无主控端时返回 False
        """
        try:
            sender = self.registry.require(sender_id)
            message = DataPayload.from_raw(payload)
            if not message.is_valid():
                raise InvalidPayloadError()

            if self.registry.is_current_master(sender.id):
                return self._broadcast_from_master(sender, message)
            return self._forward_to_master(sender, message)

        except UnknownSessionError as e:
            self.logger.warning(f"忽略来自未知会话的数据: {e.session_id}")
        except InvalidPayloadError as e:
            self.logger.warning(f"会话 {sender_id} 的数据无效: {e.message}")
        except ValidationException as e:
            self.logger.warning(f"会话 {sender_id} 的数据格式错误: {e}")
        except NoMasterError:
            self.logger.info(f"没有可用主控端，丢弃会话 {sender_id} 的数据")
        return False

    def _broadcast_from_master(self, sender: Session, message: DataPayload) -> bool:
        targets = [s.id for s in self.registry.all_except(sender.id)]
        sent = self.emitter.emit_many(targets, OutboundEvent.RECEIVE_DATA, message.data)
        self.logger.debug(f"主控端 {sender.id} 广播完成: {sent}/{len(targets)}")
        return True

    def _forward_to_master(self, sender: Session, message: DataPayload) -> bool:
        master = self.registry.find_master()
        if master is None:
            raise NoMasterError()

        self.emitter.emit(
            master.id,
            OutboundEvent.FORWARD_DATA,
            {
                "data": message.data,
                "deviceName": message.device_name or sender.device_name,
                "senderId": sender.id,
            },
        )
        self.logger.debug(f"数据已从 {sender.id} 转发到主控端 {master.id}")
        return True

    def forward(self, sender_id: str, request: Any) -> int:
        """处理主控端的 forwardData 中继请求

        只接受当前主控端的请求。目标为指定的接收者（未指定时为所有会话），
        始终排除原始发送者和主控端自身。

        Returns:
            实际投递的会话数量
        """
        try:
            if not self.registry.is_current_master(sender_id):
                raise RoutingError(f"Session {sender_id} is not the current master")

            forward = ForwardRequest.from_raw(request)
            if not forward.is_valid():
                raise InvalidPayloadError()

            targets = self._forward_targets(sender_id, forward)
            sent = self.emitter.emit_many(
                targets,
                OutboundEvent.RECEIVE_DATA,
                {
                    "data": forward.data,
                    "senderId": forward.sender_id,
                    "deviceName": forward.device_name,
                },
            )
            self.logger.debug(f"主控端 {sender_id} 中继数据: {sent}/{len(targets)}")
            return sent

        except RoutingError as e:
            self.logger.warning(f"忽略 forwardData ({sender_id}): {e.message}")
            return 0
        except ValidationException as e:
            self.logger.warning(f"forwardData 格式错误 ({sender_id}): {e}")
            return 0

    def _forward_targets(self, master_id: str, forward: ForwardRequest) -> List[str]:
        excluded = {master_id, forward.sender_id}

        if forward.recipients is None:
            return [s.id for s in self.registry.all() if s.id not in excluded]

        targets = []
        for recipient in dict.fromkeys(forward.recipients):
            if recipient in excluded:
                continue
            if recipient not in self.registry:
                self.logger.info(f"中继目标不存在，跳过: {recipient}")
                continue
            targets.append(recipient)
        return targets
