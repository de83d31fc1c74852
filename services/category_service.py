"""
카테고리 서비스

시스템 기본 카테고리 + 사용자 카테고리 관리.
기본 카테고리는 모든 사용자에게 보이지만 수정/삭제 불가.
"""

import logging
from typing import Any, Mapping

from core.errors import ConflictError, NotFoundError
from core.ledger.inputs import CategoryCreate, CategoryPatch, parse_input, parse_kind
from core.ledger.models import Category
from core.ledger.store import LedgerStore
from core.ledger.types import TransactionKind

logger = logging.getLogger(__name__)


class CategoryService:
    """카테고리 서비스

    Args:
        store: Ledger 저장소
    """

    def __init__(self, store: LedgerStore):
        self.store = store

    async def list_categories(
        self,
        owner_id: str,
        kind: TransactionKind | str | None = None,
    ) -> list[Category]:
        """카테고리 목록 (기본 먼저, 이름순)

        Raises:
            ValidationError: 알 수 없는 유형
        """
        kind_filter = parse_kind(kind) if kind is not None else None
        return await self.store.list_categories(owner_id, kind_filter)

    async def create_category(
        self,
        owner_id: str,
        data: CategoryCreate | Mapping[str, Any],
    ) -> Category:
        """사용자 카테고리 생성

        Raises:
            ConflictError: 같은 유형에 같은 이름(대소문자 무시)이 이미 있음
        """
        payload = parse_input(CategoryCreate, data)

        async def work(unit: LedgerStore) -> Category:
            existing = await unit.find_category_by_name(owner_id, payload.kind, payload.name)
            if existing is not None:
                raise ConflictError(f"Category already exists: {payload.name} ({payload.kind.value})")
            return await unit.create_category(owner_id, payload)

        category = await self.store.run_atomic(work)
        logger.info(f"Category created: {category.id} owner={owner_id} name={category.name}")
        return category

    async def update_category(
        self,
        owner_id: str,
        category_id: str,
        patch: CategoryPatch | Mapping[str, Any],
    ) -> Category:
        """사용자 카테고리 수정 (name/color/icon)

        Raises:
            NotFoundError: 기본 카테고리 / 타인 소유 / 없음
            ConflictError: 변경할 이름이 이미 사용 중
        """
        payload = parse_input(CategoryPatch, patch)
        changes = payload.changes()

        async def work(unit: LedgerStore) -> Category:
            category = await self._load_owned(unit, owner_id, category_id)

            new_name = changes.get("name")
            if new_name is not None:
                existing = await unit.find_category_by_name(owner_id, category.kind, new_name)
                if existing is not None and existing.id != category.id:
                    raise ConflictError(f"Category already exists: {new_name} ({category.kind})")

            await unit.update_category_fields(category.id, changes)
            return await self._load_owned(unit, owner_id, category_id)

        category = await self.store.run_atomic(work)
        logger.info(f"Category updated: {category_id} fields={sorted(changes)}")
        return category

    async def delete_category(self, owner_id: str, category_id: str) -> None:
        """사용자 카테고리 삭제

        Raises:
            NotFoundError: 기본 카테고리 / 타인 소유 / 없음
            ConflictError: 거래가 참조 중
        """

        async def work(unit: LedgerStore) -> None:
            category = await self._load_owned(unit, owner_id, category_id)

            count = await unit.count_transactions_for_category(category.id)
            if count:
                raise ConflictError(
                    f"Category is used by {count} transaction(s): {category.id}"
                )
            await unit.delete_category(category.id)

        await self.store.run_atomic(work)
        logger.info(f"Category deleted: {category_id} owner={owner_id}")

    async def _load_owned(self, unit: LedgerStore, owner_id: str, category_id: str) -> Category:
        category = await unit.find_owned_category(category_id, owner_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category
