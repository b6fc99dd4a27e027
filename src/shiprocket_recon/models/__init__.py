"""Data models for Shiprocket orders, ledger entries and charge breakdowns."""

from shiprocket_recon.models.charges import BatchResult, ChargeBreakdown
from shiprocket_recon.models.order import (
    AwbCharges,
    AwbData,
    LedgerTransaction,
    RemoteOrder,
    Shipment,
)

__all__ = [
    "AwbCharges",
    "AwbData",
    "BatchResult",
    "ChargeBreakdown",
    "LedgerTransaction",
    "RemoteOrder",
    "Shipment",
]
