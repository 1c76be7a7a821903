"""Global enums — values must match DB CHECK constraints exactly."""

from enum import Enum


class BoardShape(str, Enum):
    SHOTGUN = "SHOTGUN"
    FIVE_BY_FIVE = "FIVE_BY_FIVE"
    TEN_BY_TEN = "TEN_BY_TEN"


class BoardStatus(str, Enum):
    DRAFT = "DRAFT"
    OPEN = "OPEN"
    LOCKED = "LOCKED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Sport(str, Enum):
    NFL = "nfl"
    NBA = "nba"
    NCAAF = "ncaaf"
    NCAAB = "ncaab"
    NHL = "nhl"
    OTHER = "other"


class PaymentProvider(str, Enum):
    STRIPE = "stripe"
    PAYPAL = "paypal"
