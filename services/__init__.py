"""
가계부 서비스 계층

호출자(웹 계층, CLI, 테스트)가 사용하는 조회/관리 서비스.
모든 서비스는 주입된 LedgerStore를 공유.
"""

from services.bootstrap import LedgerServices, build_services, open_services
from services.category_service import CategoryService
from services.dashboard_service import DashboardService
from services.transaction_service import TransactionPage, TransactionService

__all__ = [
    "LedgerServices",
    "build_services",
    "open_services",
    "CategoryService",
    "DashboardService",
    "TransactionPage",
    "TransactionService",
]
