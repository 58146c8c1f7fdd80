"""Domain models and services."""

from .prizes import (
    AUTO_SETTLED_CATEGORIES,
    FRAGMENT_500_ID,
    FRAGMENT_FREE_ID,
    PrizeCategory,
    PrizeDefinition,
    PrizeTable,
    Rarity,
    default_prize_table,
)
from .selector import PrizeSelector, WeightedSelector
from .notices import Notice, NoticeBoard, Severity
from .session import (
    LoginRequest,
    SessionGate,
    StaffLogin,
    StaffSession,
    StudentLogin,
    StudentSession,
)
from .settlement import DrawOutcome, SettlementEngine
from .redemption import RedemptionService, is_redeemable

__all__ = [
    "AUTO_SETTLED_CATEGORIES",
    "FRAGMENT_500_ID",
    "FRAGMENT_FREE_ID",
    "PrizeCategory",
    "PrizeDefinition",
    "PrizeTable",
    "Rarity",
    "default_prize_table",
    "PrizeSelector",
    "WeightedSelector",
    "Notice",
    "NoticeBoard",
    "Severity",
    "LoginRequest",
    "SessionGate",
    "StaffLogin",
    "StaffSession",
    "StudentLogin",
    "StudentSession",
    "DrawOutcome",
    "SettlementEngine",
    "RedemptionService",
    "is_redeemable",
]
