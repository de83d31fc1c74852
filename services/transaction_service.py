"""
거래 조회 서비스

필터 + 페이지네이션 목록, 단건 조회, 반복 거래 목록.
변경(생성/수정/삭제)은 잔액 재계산이 필요하므로 BalanceCoordinator 담당.
"""

import math
from dataclasses import dataclass
from typing import Any, Mapping

from core.errors import NotFoundError
from core.ledger.inputs import TransactionFilter, parse_input
from core.ledger.models import Transaction
from core.ledger.store import LedgerStore


@dataclass(frozen=True)
class TransactionPage:
    """거래 목록 페이지"""

    items: list[Transaction]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        """전체 페이지 수"""
        return math.ceil(self.total / self.limit) if self.total else 0


class TransactionService:
    """거래 조회 서비스

    Args:
        store: Ledger 저장소
    """

    def __init__(self, store: LedgerStore):
        self.store = store

    async def list_transactions(
        self,
        owner_id: str,
        filters: TransactionFilter | Mapping[str, Any] | None = None,
    ) -> TransactionPage:
        """거래 목록 (최신순)

        Args:
            owner_id: 호출자
            filters: kind, account_id, category_id, status, start, end, page, limit

        Raises:
            ValidationError: 잘못된 필터 (page < 1, limit 범위 초과 등)
        """
        payload = parse_input(TransactionFilter, filters if filters is not None else {})
        items, total = await self.store.list_transactions(owner_id, payload)
        return TransactionPage(items=items, total=total, page=payload.page, limit=payload.limit)

    async def get_transaction(self, owner_id: str, transaction_id: str) -> Transaction:
        """거래 단건 조회

        Raises:
            NotFoundError: 없음 / 타인 소유
        """
        transaction = await self.store.find_transaction(transaction_id, owner_id)
        if transaction is None:
            raise NotFoundError("Transaction", transaction_id)
        return transaction

    async def list_recurring(self, owner_id: str) -> list[Transaction]:
        """반복 거래 목록"""
        return await self.store.list_recurring(owner_id)
