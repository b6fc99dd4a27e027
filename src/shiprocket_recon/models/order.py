"""Pydantic models for Shiprocket API payloads."""

from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, field_validator

# Shiprocket sends numeric charge fields as numbers or strings
RawNumber = Optional[Union[float, int, str]]


def parse_amount(value: Any) -> float:
    """Parse a loosely typed numeric field, defaulting to 0 when malformed."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


class Shipment(BaseModel):
    """Single shipment attached to a Shiprocket order."""

    id: Optional[int] = None
    awb_code: Optional[str] = Field(default=None, validation_alias=AliasChoices("awb_code", "awb"))
    courier_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("courier_name", "courier")
    )
    status: Optional[str] = None
    weight: RawNumber = None
    cost: RawNumber = None
    freight_charge: RawNumber = None
    shipping_charges: RawNumber = None
    total_charge: RawNumber = None
    charge_weight: RawNumber = None
    volumetric_weight: RawNumber = None

    class Config:
        extra = "allow"

    @field_validator("status", mode="before")
    @classmethod
    def _status_to_str(cls, value):
        return None if value is None else str(value)

    @field_validator("awb_code", mode="before")
    @classmethod
    def _awb_to_str(cls, value):
        return None if value is None else str(value)

    @property
    def weight_kg(self) -> Optional[float]:
        value = parse_amount(self.weight)
        return value or None


class AwbCharges(BaseModel):
    """Charge summary Shiprocket reports on the AWB."""

    freight_charges: RawNumber = None
    cod_charges: RawNumber = None
    applied_weight_amount: RawNumber = None
    charged_weight_amount_rto: RawNumber = None
    applied_weight_amount_rto: RawNumber = None

    class Config:
        extra = "allow"


class AwbData(BaseModel):
    """AWB block of an order listing entry."""

    charges: Optional[AwbCharges] = None

    class Config:
        extra = "allow"


class RemoteOrder(BaseModel):
    """Order as returned by the Shiprocket order listing."""

    id: int
    channel_order_id: Optional[str] = None
    order_id: Optional[Union[int, str]] = None
    shipments: List[Shipment] = Field(default_factory=list)
    awb_data: Optional[AwbData] = None

    class Config:
        extra = "allow"

    @field_validator("channel_order_id", mode="before")
    @classmethod
    def _channel_id_to_str(cls, value):
        return None if value is None else str(value)

    @field_validator("shipments", mode="before")
    @classmethod
    def _single_shipment_to_list(cls, value):
        # Some listing responses embed one shipment object instead of a list
        if value is None:
            return []
        if isinstance(value, dict):
            return [value]
        return value

    @property
    def primary_shipment(self) -> Optional[Shipment]:
        return self.shipments[0] if self.shipments else None

    @property
    def raw_charges(self) -> Optional[AwbCharges]:
        return self.awb_data.charges if self.awb_data else None


class LedgerTransaction(BaseModel):
    """Wallet transaction from the Shiprocket billing ledger.

    `amount` is signed: positive is a credit, negative a debit.
    """

    id: Optional[int] = None
    type: Optional[str] = None
    amount: float = 0.0
    balance: Optional[float] = None
    description: Optional[str] = None
    awb: Optional[str] = None
    order_id: Optional[str] = None
    created_at: Optional[str] = None

    class Config:
        extra = "allow"

    @field_validator("amount", mode="before")
    @classmethod
    def _parse_amount(cls, value):
        return parse_amount(value)

    @field_validator("balance", mode="before")
    @classmethod
    def _parse_balance(cls, value):
        return None if value is None else parse_amount(value)

    @field_validator("awb", "order_id", "created_at", mode="before")
    @classmethod
    def _to_str(cls, value):
        return None if value is None else str(value)

    def created_date(self) -> Optional[str]:
        """Calendar date of the transaction as YYYY-MM-DD, or None if unparseable."""
        if not self.created_at:
            return None
        text = self.created_at.strip()
        for fmt in ("%Y-%m-%d %H:%M:%S", "%d %b %Y, %I:%M %p", "%Y-%m-%d"):
            try:
                return datetime.strptime(text, fmt).date().isoformat()
            except ValueError:
                continue
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
        except ValueError:
            return None
