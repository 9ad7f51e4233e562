# models/mutation.py
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

# 재시도하면 중복이 생길 수 있는 액션
NOT_RETRY_SAFE: Tuple[str, ...] = ("addUser", "addConstraint", "addHoliday")

ACTIONS: Tuple[str, ...] = (
    "addUser", "editUser", "deleteUser",
    "addConstraint", "removeConstraint",
    "addHoliday", "removeHoliday",
    "saveSchedule",
)


@dataclass
class Mutation:
    """저장소에 보낼 변경 한 건(액션 이름 + 페이로드)"""
    action: str
    payload: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.action not in ACTIONS:
            raise ValueError(f"알 수 없는 액션: {self.action}")

    @property
    def retry_safe(self) -> bool:
        return self.action not in NOT_RETRY_SAFE

    def to_dict(self) -> Dict[str, Any]:
        return {"action": self.action, **self.payload}

    def describe(self) -> str:
        if self.action == "saveSchedule":
            return f"saveSchedule({len(self.payload.get('schedule', {}))} entries)"
        args = ", ".join(f"{k}={v}" for k, v in self.payload.items())
        return f"{self.action}({args})"
