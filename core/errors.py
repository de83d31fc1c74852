"""
예외 정의

Ledger 코어가 호출자에게 전달하는 예외 계층.
- NotFoundError: 존재하지 않거나 호출자 소유가 아닌 엔티티
- ConflictError: 상태 충돌 (거래가 남은 계좌 삭제, 이름 중복 등)
- ValidationError: 입력 형식 오류 (저장소 변경 전에 거부)
- StoreUnavailableError: 저장소 잠금/IO 실패 (작업 단위 전체 롤백, 재시도 가능)
"""

from typing import Any

from pydantic import ValidationError as PydanticValidationError


class LedgerError(Exception):
    """Ledger 예외 기본 클래스"""

    pass


class NotFoundError(LedgerError):
    """엔티티 조회 실패

    다른 사용자 소유의 엔티티도 존재 여부를 노출하지 않고 NotFound로 처리.
    """

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class ConflictError(LedgerError):
    """상태 충돌 (호출자가 직접 해결해야 함, 자동 재시도 없음)"""

    pass


class ValidationError(LedgerError, ValueError):
    """입력 검증 실패

    ValueError를 함께 상속하여 pydantic validator 내부에서 발생해도
    필드 오류로 수집됨.

    Args:
        message: 오류 요약
        errors: 필드별 오류 목록 [{"field": ..., "message": ...}]
    """

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        self.errors = errors or []
        super().__init__(message)

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> "ValidationError":
        """pydantic ValidationError 변환"""
        errors = [
            {
                "field": ".".join(str(part) for part in err["loc"]),
                "message": err["msg"],
            }
            for err in exc.errors()
        ]
        summary = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
        return cls(f"Invalid input: {summary}", errors)


class StoreUnavailableError(LedgerError):
    """저장소 일시 장애 (잠금 대기 초과, IO 오류)

    작업 단위 전체가 롤백된 상태이므로 동일 작업을 통째로 재시도해도 안전.
    단, create_transaction은 중복 생성 방지 없이 재시도하면 안 됨.
    """

    pass
