"""
core/ledger/inputs.py 테스트

생성/수정 입력 검증과 부분 수정 필드 추적
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from core.errors import ValidationError
from core.ledger.inputs import (
    AccountCreate,
    AccountPatch,
    CategoryCreate,
    CategoryPatch,
    TransactionCreate,
    TransactionFilter,
    TransactionPatch,
    check_installment_bounds,
    parse_input,
    parse_kind,
)
from core.ledger.types import AccountKind, TransactionKind, TransactionStatus


def _transaction(**overrides) -> dict:
    data = {
        "account_id": "acc-1",
        "category_id": "default:expense:food",
        "kind": "expense",
        "amount": "12.30",
        "description": "Lunch",
        "occurred_at": datetime(2026, 10, 1, 12, 0),
    }
    data.update(overrides)
    return data


class TestAccountCreate:
    """AccountCreate 테스트"""

    def test_defaults(self) -> None:
        account = parse_input(AccountCreate, {"name": "  Wallet  ", "kind": "wallet"})

        assert account.name == "Wallet"
        assert account.kind == AccountKind.WALLET
        assert account.initial_balance == Decimal("0.00")
        assert account.color == "#3b82f6"
        assert account.icon == "wallet"

    def test_negative_initial_balance(self) -> None:
        account = parse_input(AccountCreate, {"name": "Card", "kind": "checking", "initial_balance": "-20"})
        assert account.initial_balance == Decimal("-20.00")

    def test_name_too_short(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            parse_input(AccountCreate, {"name": "A", "kind": "wallet"})
        assert exc_info.value.errors[0]["field"] == "name"

    def test_unknown_kind(self) -> None:
        with pytest.raises(ValidationError):
            parse_input(AccountCreate, {"name": "Wallet", "kind": "crypto"})

    def test_bad_color(self) -> None:
        with pytest.raises(ValidationError):
            parse_input(AccountCreate, {"name": "Wallet", "kind": "wallet", "color": "blue"})

    def test_float_balance_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            parse_input(AccountCreate, {"name": "Wallet", "kind": "wallet", "initial_balance": 10.5})
        assert exc_info.value.errors[0]["field"] == "initial_balance"

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            parse_input(AccountCreate, {"name": "Wallet", "kind": "wallet", "current_balance": "5"})

    def test_model_instance_passthrough(self) -> None:
        model = AccountCreate(name="Wallet", kind=AccountKind.SAVINGS)
        assert parse_input(AccountCreate, model) is model


class TestAccountPatch:
    """AccountPatch 테스트"""

    def test_changes_only_present_fields(self) -> None:
        patch = parse_input(AccountPatch, {"name": "Renamed"})

        assert patch.changes() == {"name": "Renamed"}
        assert patch.has("name") is True
        assert patch.has("initial_balance") is False

    def test_null_for_required_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            parse_input(AccountPatch, {"name": None})

    def test_lifecycle_flag_not_patchable(self) -> None:
        """보관/복원은 생명주기 관리자를 통해서만"""
        with pytest.raises(ValidationError):
            parse_input(AccountPatch, {"active": False})


class TestTransactionCreate:
    """TransactionCreate 테스트"""

    def test_defaults(self) -> None:
        txn = parse_input(TransactionCreate, _transaction())

        assert txn.amount == Decimal("12.30")
        assert txn.status == TransactionStatus.SETTLED
        assert txn.is_installment is False
        assert txn.is_recurring is False

    def test_naive_datetime_is_utc(self) -> None:
        txn = parse_input(TransactionCreate, _transaction())
        assert txn.occurred_at == datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)

    def test_amount_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            parse_input(TransactionCreate, _transaction(amount="0"))
        with pytest.raises(ValidationError):
            parse_input(TransactionCreate, _transaction(amount="-5"))

    def test_amount_three_places_rejected(self) -> None:
        with pytest.raises(ValidationError):
            parse_input(TransactionCreate, _transaction(amount="1.234"))

    def test_integer_amount(self) -> None:
        txn = parse_input(TransactionCreate, _transaction(amount=5))
        assert txn.amount == Decimal("5.00")

    def test_description_bounds(self) -> None:
        with pytest.raises(ValidationError):
            parse_input(TransactionCreate, _transaction(description="x"))
        with pytest.raises(ValidationError):
            parse_input(TransactionCreate, _transaction(description="x" * 201))

    def test_installment_bounds(self) -> None:
        txn = parse_input(
            TransactionCreate,
            _transaction(is_installment=True, installment_count=12, installment_index=3),
        )
        assert txn.installment_index == 3

        with pytest.raises(ValidationError):
            parse_input(TransactionCreate, _transaction(installment_count=61))
        with pytest.raises(ValidationError):
            parse_input(TransactionCreate, _transaction(installment_count=1))
        with pytest.raises(ValidationError):
            parse_input(TransactionCreate, _transaction(installment_count=3, installment_index=4))
        with pytest.raises(ValidationError):
            parse_input(TransactionCreate, _transaction(installment_index=0))

    def test_receipt_url(self) -> None:
        txn = parse_input(TransactionCreate, _transaction(receipt_url="https://example.com/r/1.png"))
        assert txn.receipt_url == "https://example.com/r/1.png"

        with pytest.raises(ValidationError):
            parse_input(TransactionCreate, _transaction(receipt_url="ftp://example.com/r.png"))

    def test_notes_length(self) -> None:
        with pytest.raises(ValidationError):
            parse_input(TransactionCreate, _transaction(notes="n" * 501))

    def test_unknown_frequency(self) -> None:
        with pytest.raises(ValidationError):
            parse_input(TransactionCreate, _transaction(is_recurring=True, frequency="daily"))


class TestTransactionPatch:
    """TransactionPatch 테스트"""

    def test_explicit_null_clears_optional(self) -> None:
        """None 전달 = 삭제, 생략 = 변경 없음"""
        patch = parse_input(TransactionPatch, {"receipt_url": None})

        assert patch.changes() == {"receipt_url": None}
        assert patch.has("notes") is False

    def test_null_amount_rejected(self) -> None:
        with pytest.raises(ValidationError):
            parse_input(TransactionPatch, {"amount": None})

    def test_occurred_at_normalized(self) -> None:
        patch = parse_input(TransactionPatch, {"occurred_at": datetime(2026, 1, 1)})
        assert patch.occurred_at.tzinfo == timezone.utc

    def test_empty_patch(self) -> None:
        assert parse_input(TransactionPatch, {}).changes() == {}


class TestCheckInstallmentBounds:
    """check_installment_bounds 테스트"""

    def test_ok(self) -> None:
        check_installment_bounds(12, 12)
        check_installment_bounds(None, 5)
        check_installment_bounds(5, None)

    def test_index_exceeds_count(self) -> None:
        with pytest.raises(ValidationError):
            check_installment_bounds(2, 3)


class TestCategoryInputs:
    """CategoryCreate / CategoryPatch 테스트"""

    def test_defaults(self) -> None:
        category = parse_input(CategoryCreate, {"name": "Pets", "kind": "expense"})

        assert category.color == "#6b7280"
        assert category.icon == "tag"

    def test_kind_not_patchable(self) -> None:
        with pytest.raises(ValidationError):
            parse_input(CategoryPatch, {"kind": "income"})


class TestTransactionFilter:
    """TransactionFilter 테스트"""

    def test_defaults(self) -> None:
        filters = parse_input(TransactionFilter, {})

        assert filters.page == 1
        assert filters.limit == 50

    def test_limit_bounds(self) -> None:
        with pytest.raises(ValidationError):
            parse_input(TransactionFilter, {"limit": 0})
        with pytest.raises(ValidationError):
            parse_input(TransactionFilter, {"limit": 201})
        with pytest.raises(ValidationError):
            parse_input(TransactionFilter, {"page": 0})


class TestParseKind:
    """parse_kind 테스트"""

    def test_valid(self) -> None:
        assert parse_kind("income") == TransactionKind.INCOME

    def test_invalid(self) -> None:
        with pytest.raises(ValidationError):
            parse_kind("transfer")
