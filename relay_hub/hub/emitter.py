"""Hub 出站事件接口"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, Union

from ..protocol import OutboundEvent


class Emitter(ABC):
    """单向出站通道

    emit 必须是非阻塞的：只负责把事件交给传输层，不等待对端确认。
    """

    @abstractmethod
    def emit(self, session_id: str, event: Union[OutboundEvent, str], *args: Any) -> bool:
        """向单个会话发送事件

        Returns:
            事件是否被交给了传输层
        """

    def emit_many(
        self, session_ids: Iterable[str], event: Union[OutboundEvent, str], *args: Any
    ) -> int:
        """向多个会话发送同一事件

        Returns:
            成功交给传输层的数量
        """
        return sum(1 for session_id in session_ids if self.emit(session_id, event, *args))
