"""SQLAlchemy models for reconciled shipping charges."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ShippingCharge(Base):
    """
    Total logistics cost paid to Shiprocket for one sales-channel order.

    One row per order number; the unique constraint is what makes batch
    reconciliation idempotent. Rows are written once and never updated by
    the reconciliation engine.
    """

    __tablename__ = "shipping_charges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Sales-channel order number (e.g. "PB1159S")
    order_number: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)

    # Total amount paid to Shiprocket (INR)
    shipping_charge: Mapped[float] = mapped_column(Float, nullable=False)

    # Breakdown
    freight_forward: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    # Positive if applied, negative if reversed
    freight_cod: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    freight_rto: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    whatsapp_charges: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    other_charges: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    # Provenance
    shiprocket_order_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    awb_code: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    courier_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    weight: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    status: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    source: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    fetched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    def breakdown_dict(self) -> dict:
        return {
            "freightForward": self.freight_forward or 0,
            "freightCOD": self.freight_cod or 0,
            "freightRTO": self.freight_rto or 0,
            "whatsappCharges": self.whatsapp_charges or 0,
            "otherCharges": self.other_charges or 0,
        }
