"""
Relay Hub 会话管理

每个传输连接对应一个 Session；SessionRegistry 保存所有活跃会话，
并记录主控端（master）的声明顺序，用于确定唯一的当前主控端。
"""

import itertools
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Iterator, List, Optional

from ..exceptions import UnknownSessionError
from ..protocol import Role
from ..utils import get_logger

# 保留的主控端声明记录条数
MASTER_HISTORY_LIMIT = 64


@dataclass
class Session:
    """客户端会话信息"""

    id: str
    role: Role = Role.UNASSIGNED
    address: Optional[str] = None
    device_name: Optional[str] = None
    device_model: Optional[str] = None
    master_ip: Optional[str] = None
    # 客户端声明角色时的主控端，仅供查询；路由时始终重新查找主控端
    master_id: Optional[str] = None
    connected_at: float = field(default_factory=time.time)

    @property
    def is_master(self) -> bool:
        """角色字段为 MASTER（不代表是当前主控端）"""
        return self.role is Role.MASTER

    @property
    def is_client(self) -> bool:
        return self.role is Role.CLIENT

    def to_dict(self) -> Dict[str, Any]:
        """对外公开的会话信息"""
        return {
            "id": self.id,
            "role": self.role.value,
            "address": self.address,
            "deviceName": self.device_name,
            "deviceModel": self.device_model,
            "masterIp": self.master_ip,
        }


@dataclass(frozen=True)
class MasterDeclaration:
    """一次主控端声明记录"""

    session_id: str
    sequence: int
    declared_at: float


class SessionRegistry:
    """会话注册表

    只能在事件循环线程中访问；所有操作都是同步的，不会与其他事件交错。
    """

    def __init__(self, history_limit: int = MASTER_HISTORY_LIMIT):
        # 会话存储：session_id -> Session
        self._sessions: Dict[str, Session] = {}

        # 最近的主控端声明记录（按声明顺序，有上限）
        self._master_history: Deque[MasterDeclaration] = deque(maxlen=history_limit)
        self._sequence = itertools.count(1)
        self._declaration_count = 0

        # 最近一次声明的主控端；断开后清空，不回退到更早的声明者
        self._current_master_id: Optional[str] = None

        self.logger = get_logger("relay_hub.hub.registry")

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __iter__(self) -> Iterator[Session]:
        return iter(list(self._sessions.values()))

    def put(self, session: Session) -> None:
        """插入或覆盖会话"""
        self._sessions[session.id] = session

    def remove(self, session_id: str) -> Optional[Session]:
        """移除会话

        Returns:
            被移除的会话，不存在时返回 None
        """
        if session_id == self._current_master_id:
            self._current_master_id = None
        return self._sessions.pop(session_id, None)

    def get(self, session_id: str) -> Optional[Session]:
        """获取会话"""
        return self._sessions.get(session_id)

    def require(self, session_id: str) -> Session:
        """获取会话，不存在时抛出 UnknownSessionError"""
        session = self._sessions.get(session_id)
        if session is None:
            raise UnknownSessionError(session_id)
        return session

    def all(self) -> List[Session]:
        """所有会话的快照"""
        return list(self._sessions.values())

    def all_except(self, session_id: str) -> List[Session]:
        """除指定会话之外的所有会话"""
        return [s for s in self._sessions.values() if s.id != session_id]

    def record_master_declaration(self, session_id: str) -> MasterDeclaration:
        """记录一次主控端声明"""
        declaration = MasterDeclaration(
            session_id=session_id,
            sequence=next(self._sequence),
            declared_at=time.time(),
        )
        self._master_history.append(declaration)
        self._declaration_count += 1
        self._current_master_id = session_id
        return declaration

    def master_history(self) -> List[MasterDeclaration]:
        """最近的主控端声明记录（按时间先后，最多 history_limit 条）"""
        return list(self._master_history)

    def find_master(self) -> Optional[Session]:
        """查找当前主控端

        规则：在角色为 MASTER 的会话中，只有最近一次主控端声明的会话
        才是当前主控端。被后来者取代的主控端即使在新主控端断开后
        也不会恢复，必须重新声明。
        """
        if self._current_master_id is None:
            return None

        session = self._sessions.get(self._current_master_id)
        if session is not None and session.is_master:
            return session
        return None

    def is_current_master(self, session_id: str) -> bool:
        master = self.find_master()
        return master is not None and master.id == session_id

    def stats(self) -> Dict[str, Any]:
        """会话统计"""
        sessions = self._sessions.values()
        master = self.find_master()
        return {
            "total": len(self._sessions),
            "masters": sum(1 for s in sessions if s.is_master),
            "clients": sum(1 for s in sessions if s.is_client),
            "unassigned": sum(1 for s in sessions if s.role is Role.UNASSIGNED),
            "current_master": master.id if master else None,
            "master_declarations": self._declaration_count,
        }
