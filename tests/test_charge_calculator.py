import pytest

from shiprocket_recon.config.constants import (
    FREIGHT_COD,
    FREIGHT_FORWARD,
    FREIGHT_RTO,
    LEDGER_TYPE_CATEGORIES,
    MESSAGING,
    OTHER,
    SOURCE_AWB_CHARGES,
    SOURCE_LEDGER,
    SOURCE_NONE,
    SOURCE_SHIPMENT_COST,
)
from shiprocket_recon.models.order import AwbCharges, LedgerTransaction, Shipment
from shiprocket_recon.services.charge_calculator import categorize, compute


def txn(type_label, amount):
    return LedgerTransaction(type=type_label, amount=amount)


def assert_total_invariant(breakdown):
    assert breakdown.total == pytest.approx(
        breakdown.freight_forward
        + breakdown.freight_cod
        + breakdown.freight_rto
        + breakdown.messaging
        + breakdown.other
    )


@pytest.mark.parametrize(
    "label,expected",
    [
        ("Freight Forward", FREIGHT_FORWARD),
        ("FREIGHT  FORWARD", FREIGHT_FORWARD),
        ("Freight COD", FREIGHT_COD),
        ("Freight COD Reversal", FREIGHT_COD),
        ("Freight RTO", FREIGHT_RTO),
        ("RTO", FREIGHT_RTO),
        ("RTO Freight", FREIGHT_RTO),
        ("WhatsApp Communication", MESSAGING),
        ("whatsapp", MESSAGING),
        ("Freight Forward Adjustment", FREIGHT_FORWARD),
        ("Excess Weight RTO Charges", FREIGHT_RTO),
        ("Weight Discrepancy", OTHER),
        ("Recharge", OTHER),
        ("", OTHER),
        (None, OTHER),
    ],
)
def test_categorize(label, expected):
    assert categorize(label) == expected


@pytest.mark.parametrize("label,expected", sorted(LEDGER_TYPE_CATEGORIES.items()))
def test_every_known_label_maps_to_its_category(label, expected):
    assert categorize(label.title()) == expected


def test_ledger_tier_example():
    transactions = [
        txn("Freight Forward", -50),
        txn("Freight COD", -20),
        txn("WhatsApp Communication", -5),
    ]

    breakdown = compute(transactions, Shipment(cost=999), AwbCharges(freight_charges=500))

    assert breakdown.freight_forward == 50
    assert breakdown.freight_cod == -20
    assert breakdown.freight_rto == 0
    assert breakdown.messaging == 5
    assert breakdown.other == 0
    assert breakdown.total == 35
    assert breakdown.source == SOURCE_LEDGER
    assert_total_invariant(breakdown)


def test_ledger_tier_cod_reversal_keeps_sign():
    breakdown = compute(
        [txn("Freight Forward", -60), txn("Freight COD", -25), txn("Freight COD", 25)],
        None,
        None,
    )

    assert breakdown.freight_cod == 0
    assert breakdown.total == 60


def test_ledger_tier_uses_absolute_values_for_other_categories():
    breakdown = compute(
        [txn("Freight Forward", 40), txn("Freight RTO", -30), txn("Weight Discrepancy", -12.5)],
        None,
        None,
    )

    assert breakdown.freight_forward == 40
    assert breakdown.freight_rto == 30
    assert breakdown.other == 12.5
    assert breakdown.total == 82.5


def test_raw_field_fallback_example():
    breakdown = compute([], Shipment(), AwbCharges(freight_charges=120, cod_charges=20))

    assert breakdown.freight_forward == 100
    assert breakdown.freight_cod == 20
    assert breakdown.freight_rto == 0
    assert breakdown.total == 120
    assert breakdown.source == SOURCE_AWB_CHARGES
    assert_total_invariant(breakdown)


def test_raw_field_fallback_parses_strings_and_rto():
    charges = AwbCharges(freight_charges="150.50", cod_charges="30.5", applied_weight_amount_rto="80")

    breakdown = compute(None, None, charges)

    assert breakdown.freight_forward == pytest.approx(120.0)
    assert breakdown.freight_cod == pytest.approx(30.5)
    assert breakdown.freight_rto == 80
    assert breakdown.total == pytest.approx(230.5)


def test_malformed_raw_fields_default_to_zero():
    charges = AwbCharges(freight_charges="N/A", cod_charges="", applied_weight_amount_rto=None)

    breakdown = compute([], Shipment(cost="abc"), charges)

    assert breakdown.total == 0
    assert not breakdown.is_billable
    assert breakdown.source == SOURCE_NONE


def test_raw_fields_used_when_ledger_has_no_freight():
    breakdown = compute(
        [txn("WhatsApp Communication", -3)],
        None,
        AwbCharges(freight_charges=90, cod_charges=0),
    )

    assert breakdown.freight_forward == 90
    assert breakdown.messaging == 3
    assert breakdown.total == 93
    assert breakdown.source == SOURCE_AWB_CHARGES


def test_shipment_cost_tier():
    breakdown = compute([], Shipment(cost="75"), None)

    assert breakdown.freight_forward == 75
    assert breakdown.total == 75
    assert breakdown.source == SOURCE_SHIPMENT_COST


def test_shipment_cost_fills_forward_when_raw_fields_only_have_cod():
    breakdown = compute([], Shipment(cost=60), AwbCharges(freight_charges=20, cod_charges=20))

    assert breakdown.freight_forward == 60
    assert breakdown.freight_cod == 20
    assert breakdown.total == 80
    assert_total_invariant(breakdown)


def test_no_data_is_zero_and_not_billable():
    breakdown = compute([], None, None)

    assert breakdown.total == 0
    assert not breakdown.is_billable


def test_cod_reversal_netting_to_zero_is_not_billable():
    breakdown = compute([txn("Freight COD", 40)], None, None)

    assert breakdown.total == 40
    assert breakdown.is_billable

    reversed_only = compute([txn("Freight COD", 40), txn("Freight COD", -40)], None, None)
    assert not reversed_only.is_billable
