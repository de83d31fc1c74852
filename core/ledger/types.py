"""
Ledger 타입 정의

계좌/거래/카테고리에서 사용하는 Enum 정의.
모든 Enum은 str을 상속하여 문자열 직렬화 가능.
"""

from enum import Enum


class AccountKind(str, Enum):
    """계좌 유형"""

    WALLET = "wallet"  # 현금 지갑
    CHECKING = "checking"  # 입출금 계좌
    SAVINGS = "savings"  # 저축 계좌
    INVESTMENT = "investment"  # 투자 계좌


class TransactionKind(str, Enum):
    """거래 유형 (잔액 부호 결정)"""

    INCOME = "income"  # +amount
    EXPENSE = "expense"  # -amount


class TransactionStatus(str, Enum):
    """거래 상태

    SETTLED만 잔액 계산에 포함.
    """

    PENDING = "pending"
    SETTLED = "settled"
    CANCELLED = "cancelled"


class RecurrenceFrequency(str, Enum):
    """반복 주기"""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class ReportPeriod(str, Enum):
    """대시보드 집계 기간"""

    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


# 시스템 기본 카테고리 (스키마 초기화 시 삽입, owner 없음)
DEFAULT_CATEGORIES: list[tuple[str, str, str, str, str]] = [
    # (category_id, kind, name, color, icon)

    # INCOME
    ("default:income:salary", "income", "Salary", "#10b981", "dollar-sign"),
    ("default:income:freelance", "income", "Freelance", "#3b82f6", "briefcase"),
    ("default:income:investments", "income", "Investments", "#8b5cf6", "trending-up"),
    ("default:income:bonus", "income", "Bonus", "#f59e0b", "award"),
    ("default:income:sales", "income", "Sales", "#06b6d4", "shopping-bag"),
    ("default:income:other", "income", "Other", "#6b7280", "more-horizontal"),

    # EXPENSE
    ("default:expense:food", "expense", "Food", "#ef4444", "utensils"),
    ("default:expense:transport", "expense", "Transport", "#f97316", "car"),
    ("default:expense:housing", "expense", "Housing", "#84cc16", "home"),
    ("default:expense:health", "expense", "Health", "#ec4899", "heart"),
    ("default:expense:education", "expense", "Education", "#8b5cf6", "book"),
    ("default:expense:leisure", "expense", "Leisure", "#06b6d4", "smile"),
    ("default:expense:shopping", "expense", "Shopping", "#f59e0b", "shopping-cart"),
    ("default:expense:bills", "expense", "Bills", "#6366f1", "file-text"),
    ("default:expense:investments", "expense", "Investments", "#14b8a6", "trending-up"),
    ("default:expense:other", "expense", "Other", "#6b7280", "more-horizontal"),
]
