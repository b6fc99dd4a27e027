"""Reconciliation services."""

from shiprocket_recon.services.charge_calculator import categorize, compute
from shiprocket_recon.services.ledger_matcher import LedgerMatcher
from shiprocket_recon.services.order_indexer import OrderIndexer, key_variants, lookup
from shiprocket_recon.services.reconciliation_service import ReconciliationBatchRunner
from shiprocket_recon.services.shipping_charge_service import ShippingChargeService

__all__ = [
    "categorize",
    "compute",
    "key_variants",
    "lookup",
    "LedgerMatcher",
    "OrderIndexer",
    "ReconciliationBatchRunner",
    "ShippingChargeService",
]
