"""
개인 가계부 Ledger 코어

계좌 / 거래 / 카테고리 저장과 계좌 잔액 정합성 유지.
계좌 잔액 = 초기 잔액 + Σ(SETTLED 거래의 부호 있는 금액)

사용 예시:
```python
from core.ledger import AccountLifecycleManager, BalanceCoordinator, LedgerStore

store = LedgerStore(db)
coordinator = BalanceCoordinator(store)
lifecycle = AccountLifecycleManager(store)

account = await coordinator.create_account("user-1", {"name": "Wallet", "kind": "wallet"})
await lifecycle.archive("user-1", account.id)
```
"""

from core.domain.state_machines import AccountState
from core.ledger.balance import recompute, signed_amount
from core.ledger.coordinator import BalanceCoordinator, BalanceDrift
from core.ledger.inputs import (
    AccountCreate,
    AccountPatch,
    CategoryCreate,
    CategoryPatch,
    TransactionCreate,
    TransactionFilter,
    TransactionPatch,
)
from core.ledger.lifecycle import AccountLifecycleManager
from core.ledger.models import Account, Category, Transaction
from core.ledger.schema import init_ledger_schema
from core.ledger.store import LedgerStore
from core.ledger.types import (
    DEFAULT_CATEGORIES,
    AccountKind,
    RecurrenceFrequency,
    ReportPeriod,
    TransactionKind,
    TransactionStatus,
)

__all__ = [
    # 핵심 클래스
    "LedgerStore",
    "BalanceCoordinator",
    "BalanceDrift",
    "AccountLifecycleManager",
    "init_ledger_schema",
    # 재계산
    "recompute",
    "signed_amount",
    # 모델
    "Account",
    "Transaction",
    "Category",
    # 입력
    "AccountCreate",
    "AccountPatch",
    "TransactionCreate",
    "TransactionPatch",
    "TransactionFilter",
    "CategoryCreate",
    "CategoryPatch",
    # Enum
    "AccountKind",
    "AccountState",
    "TransactionKind",
    "TransactionStatus",
    "RecurrenceFrequency",
    "ReportPeriod",
    # 상수
    "DEFAULT_CATEGORIES",
]
