"""Charge breakdown and batch result types."""

from dataclasses import dataclass, field
from typing import List

from shiprocket_recon.config.constants import CURRENCY_DECIMAL_PLACES, SOURCE_NONE


@dataclass
class ChargeBreakdown:
    """Categorized logistics cost for one order, in INR.

    `freight_cod` is signed (COD charges reversed as credits go negative).
    """

    freight_forward: float = 0.0
    freight_cod: float = 0.0
    freight_rto: float = 0.0
    messaging: float = 0.0
    other: float = 0.0
    source: str = SOURCE_NONE

    @property
    def total(self) -> float:
        return self.freight_forward + self.freight_cod + self.freight_rto + self.messaging + self.other

    @property
    def is_billable(self) -> bool:
        """A zero (or negative) total means no billable data was found."""
        return round(self.total, CURRENCY_DECIMAL_PLACES) > 0

    def has_freight(self) -> bool:
        return bool(self.freight_forward or self.freight_cod or self.freight_rto)


@dataclass
class BatchResult:
    """Outcome counters for one reconciliation batch."""

    fetched: int = 0
    skipped: int = 0
    not_found: int = 0
    zero_charge: int = 0
    failed: int = 0
    total: int = 0
    errors: List[str] = field(default_factory=list)
