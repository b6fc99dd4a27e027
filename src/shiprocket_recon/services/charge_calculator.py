"""Charge breakdown calculation.

Three tiers, first one with data wins:

1. Wallet ledger entries, categorized by their type label.
2. The AWB charge summary on the order (freight_charges includes the COD
   component, so it is subtracted to get base freight).
3. The shipment's generic cost field, as base freight.
"""

from typing import Iterable, Optional

from shiprocket_recon.config.constants import (
    FREIGHT_COD,
    FREIGHT_FORWARD,
    FREIGHT_RTO,
    LEDGER_TYPE_CATEGORIES,
    LEDGER_TYPE_SUBSTRING_RULES,
    MESSAGING,
    OTHER,
    SIGNED_CATEGORIES,
    SOURCE_AWB_CHARGES,
    SOURCE_LEDGER,
    SOURCE_SHIPMENT_COST,
)
from shiprocket_recon.models.charges import ChargeBreakdown
from shiprocket_recon.models.order import AwbCharges, LedgerTransaction, Shipment, parse_amount

_FIELD_BY_CATEGORY = {
    FREIGHT_FORWARD: "freight_forward",
    FREIGHT_COD: "freight_cod",
    FREIGHT_RTO: "freight_rto",
    MESSAGING: "messaging",
    OTHER: "other",
}


def categorize(type_label: Optional[str]) -> str:
    """Map a ledger type label to a charge category."""
    label = " ".join((type_label or "").lower().split())
    if not label:
        return OTHER

    category = LEDGER_TYPE_CATEGORIES.get(label)
    if category:
        return category

    for needle, category in LEDGER_TYPE_SUBSTRING_RULES:
        if needle in label:
            return category
    return OTHER


def ledger_breakdown(transactions: Iterable[LedgerTransaction]) -> ChargeBreakdown:
    """Sum ledger entries per category. COD keeps its sign, the rest use absolute values."""
    breakdown = ChargeBreakdown(source=SOURCE_LEDGER)
    for txn in transactions:
        category = categorize(txn.type)
        amount = txn.amount if category in SIGNED_CATEGORIES else abs(txn.amount)
        field = _FIELD_BY_CATEGORY[category]
        setattr(breakdown, field, getattr(breakdown, field) + amount)
    return breakdown


def compute(
    transactions: Optional[Iterable[LedgerTransaction]],
    shipment: Optional[Shipment],
    raw_charges: Optional[AwbCharges],
) -> ChargeBreakdown:
    """
    Build the charge breakdown for one order.

    Args:
        transactions: Wallet ledger entries matched to the order
        shipment: The order's primary shipment
        raw_charges: AWB charge summary from the order listing

    Returns:
        ChargeBreakdown; a zero total means nothing billable was found and
        must not be persisted
    """
    transactions = list(transactions or [])
    breakdown = ledger_breakdown(transactions) if transactions else ChargeBreakdown()

    if breakdown.has_freight():
        return breakdown

    # Ledger gave no freight; messaging/other picked up from it are kept
    if raw_charges is not None:
        total_freight = parse_amount(raw_charges.freight_charges)
        cod_component = parse_amount(raw_charges.cod_charges)
        breakdown.freight_forward = total_freight - cod_component
        breakdown.freight_cod = cod_component
        breakdown.freight_rto = parse_amount(raw_charges.applied_weight_amount_rto)
        if breakdown.has_freight():
            breakdown.source = SOURCE_AWB_CHARGES

    if breakdown.freight_forward == 0 and shipment is not None:
        cost = parse_amount(shipment.cost)
        if cost:
            breakdown.freight_forward = cost
            if breakdown.source != SOURCE_AWB_CHARGES:
                breakdown.source = SOURCE_SHIPMENT_COST

    return breakdown
