"""测试公共夹具"""

from types import SimpleNamespace
from typing import Any, List, Optional, Tuple, Union

import pytest

from relay_hub.hub import (
    Emitter,
    EventDispatcher,
    LifecycleHandler,
    MessageRouter,
    RoleManager,
    SessionRegistry,
)
from relay_hub.protocol import OutboundEvent


class RecordingEmitter(Emitter):
    """记录所有出站事件的假传输层"""

    def __init__(self):
        self.sent: List[Tuple[str, str, Tuple[Any, ...]]] = []

    def emit(self, session_id: str, event: Union[OutboundEvent, str], *args: Any) -> bool:
        name = event.value if isinstance(event, OutboundEvent) else event
        self.sent.append((session_id, name, args))
        return True

    def events_for(self, session_id: str, event: Optional[OutboundEvent] = None) -> List[Tuple[str, Tuple[Any, ...]]]:
        """某个会话收到的 (事件名, 参数) 列表"""
        return [
            (name, args)
            for sid, name, args in self.sent
            if sid == session_id and (event is None or name == event.value)
        ]

    def recipients_of(self, event: OutboundEvent) -> List[str]:
        return [sid for sid, name, _ in self.sent if name == event.value]

    def clear(self) -> None:
        self.sent.clear()


@pytest.fixture
def emitter() -> RecordingEmitter:
    return RecordingEmitter()


@pytest.fixture
def hub(emitter: RecordingEmitter) -> SimpleNamespace:
    """不含网络层的 Hub 核心组件"""
    registry = SessionRegistry()
    lifecycle = LifecycleHandler(registry, emitter)
    roles = RoleManager(registry, emitter)
    router = MessageRouter(registry, emitter)
    dispatcher = EventDispatcher(lifecycle, roles, router)
    return SimpleNamespace(
        registry=registry,
        emitter=emitter,
        lifecycle=lifecycle,
        roles=roles,
        router=router,
        dispatcher=dispatcher,
    )
