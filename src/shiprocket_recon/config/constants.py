"""
Centralized reconciliation constants.

Single point of truth for the wallet ledger vocabulary and the charge
categories used by the breakdown calculator and the persistence layer.
"""

# ==============================================================================
# CHARGE CATEGORIES
# ==============================================================================

FREIGHT_FORWARD = "freight_forward"
FREIGHT_COD = "freight_cod"
FREIGHT_RTO = "freight_rto"
MESSAGING = "messaging"
OTHER = "other"

# Categories whose ledger amounts keep their sign (COD charges can be reversed
# as credits). Every other category sums absolute values.
SIGNED_CATEGORIES = {FREIGHT_COD}

# ==============================================================================
# WALLET LEDGER VOCABULARY
# ==============================================================================

# Known literal "type" labels from the Shiprocket wallet feed, lower-cased and
# whitespace-normalized.
LEDGER_TYPE_CATEGORIES = {
    "freight forward": FREIGHT_FORWARD,
    "freight forward charges": FREIGHT_FORWARD,
    "freight forward reversal": FREIGHT_FORWARD,
    "freight cod": FREIGHT_COD,
    "freight cod charges": FREIGHT_COD,
    "freight cod reversal": FREIGHT_COD,
    "freight rto": FREIGHT_RTO,
    "freight rto charges": FREIGHT_RTO,
    "rto": FREIGHT_RTO,
    "rto freight": FREIGHT_RTO,
    "rto charges": FREIGHT_RTO,
    "whatsapp": MESSAGING,
    "whatsapp communication": MESSAGING,
    "whatsapp charges": MESSAGING,
}

# Substring rules for labels missing from the table, evaluated in order.
# "freight rto" is covered by the bare "rto" rule.
LEDGER_TYPE_SUBSTRING_RULES = [
    ("freight forward", FREIGHT_FORWARD),
    ("freight cod", FREIGHT_COD),
    ("rto", FREIGHT_RTO),
    ("whatsapp", MESSAGING),
]

# ==============================================================================
# BREAKDOWN SOURCES
# ==============================================================================

SOURCE_LEDGER = "ledger"
SOURCE_AWB_CHARGES = "awb_charges"
SOURCE_SHIPMENT_COST = "shipment_cost"
SOURCE_NONE = "none"

# ==============================================================================
# REGIONAL SETTINGS
# ==============================================================================

# Shiprocket bills in INR; logs are stamped in India Standard Time
TIMEZONE_NAME = "Asia/Kolkata"

CURRENCY_DECIMAL_PLACES = 2
