"""
State Machines

계좌 생명주기 상태 전이 관리.
"""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class StateMachineError(Exception):
    """상태 전이 오류"""
    pass


class AccountState(str, Enum):
    """계좌 생명주기 상태

    전이 규칙:
    - ACTIVE → ARCHIVED: 보관 (soft delete)
    - ARCHIVED → ACTIVE: 복원
    - ACTIVE/ARCHIVED → PURGED: 영구 삭제 (종료 상태)
    """
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"
    PURGED = "PURGED"


class StateMachine:
    """상태 머신 기본 클래스

    Args:
        initial_state: 초기 상태
        transitions: 허용된 전이 정의 {from_state: [to_states]}
        name: 머신 이름 (로깅용)
    """

    def __init__(
        self,
        initial_state: str | Enum,
        transitions: dict[str, list[str]],
        name: str = "StateMachine",
    ):
        self._state = initial_state.value if isinstance(initial_state, Enum) else initial_state
        self._transitions = transitions
        self._name = name

    @property
    def state(self) -> str:
        """현재 상태"""
        return self._state

    def can_transition(self, to_state: str | Enum) -> bool:
        """전이 가능 여부 확인"""
        target = to_state.value if isinstance(to_state, Enum) else to_state
        return target in self._transitions.get(self._state, [])

    def transition(self, to_state: str | Enum) -> str:
        """상태 전이

        Args:
            to_state: 목표 상태

        Returns:
            새 상태

        Raises:
            StateMachineError: 허용되지 않은 전이
        """
        target = to_state.value if isinstance(to_state, Enum) else to_state

        if not self.can_transition(target):
            allowed = self._transitions.get(self._state, [])
            raise StateMachineError(
                f"{self._name}: Cannot transition from {self._state} to {target}. "
                f"Allowed: {allowed}"
            )

        old_state = self._state
        self._state = target

        logger.debug(f"{self._name}: {old_state} → {target}")

        return target


class AccountStateMachine(StateMachine):
    """계좌 생명주기 상태 머신

    - ACTIVE → ARCHIVED: 보관
    - ARCHIVED → ACTIVE: 복원
    - ACTIVE/ARCHIVED → PURGED: 영구 삭제 (종료)
    """

    TRANSITIONS: dict[str, list[str]] = {
        "ACTIVE": ["ARCHIVED", "PURGED"],
        "ARCHIVED": ["ACTIVE", "PURGED"],
    }

    def __init__(self, initial_state: str | AccountState = AccountState.ACTIVE):
        super().__init__(
            initial_state=initial_state,
            transitions=self.TRANSITIONS,
            name="AccountStateMachine",
        )
