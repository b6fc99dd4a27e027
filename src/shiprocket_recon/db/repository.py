"""Repository for shipping charge data access."""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker

from shiprocket_recon.core.exceptions import DuplicateChargeError
from shiprocket_recon.core.logger import setup_logger
from shiprocket_recon.models.charges import ChargeBreakdown
from shiprocket_recon.models.order import RemoteOrder, Shipment

from .models import ShippingCharge

logger = setup_logger(__name__)


class ShippingChargeRepository:
    """Data access layer for ShippingCharge.

    Opens a short-lived session per call so concurrent reconciliation tasks
    never share a session.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def exists(self, order_number: str) -> bool:
        """Check if a charge has already been recorded for an order."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(ShippingCharge.id).where(ShippingCharge.order_number == order_number)
            )
            return result.first() is not None

    async def get(self, order_number: str) -> Optional[ShippingCharge]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(ShippingCharge).where(ShippingCharge.order_number == order_number)
            )
            return result.scalar_one_or_none()

    async def get_many(self, order_numbers: List[str]) -> Dict[str, ShippingCharge]:
        """Get stored charges keyed by order number."""
        if not order_numbers:
            return {}
        async with self.session_factory() as session:
            result = await session.execute(
                select(ShippingCharge).where(ShippingCharge.order_number.in_(list(set(order_numbers))))
            )
            return {row.order_number: row for row in result.scalars().all()}

    async def create(
        self,
        order_number: str,
        breakdown: ChargeBreakdown,
        order: Optional[RemoteOrder] = None,
        shipment: Optional[Shipment] = None,
    ) -> ShippingCharge:
        """
        Insert a charge record.

        Raises:
            DuplicateChargeError: If a record for the order number already exists
        """
        now = datetime.now(timezone.utc)
        record = ShippingCharge(
            order_number=order_number,
            shipping_charge=breakdown.total,
            freight_forward=breakdown.freight_forward,
            freight_cod=breakdown.freight_cod,
            freight_rto=breakdown.freight_rto,
            whatsapp_charges=breakdown.messaging,
            other_charges=breakdown.other,
            shiprocket_order_id=order.id if order else None,
            awb_code=(shipment.awb_code or None) if shipment else None,
            courier_name=shipment.courier_name if shipment else None,
            weight=shipment.weight_kg if shipment else None,
            status=shipment.status if shipment else None,
            source=breakdown.source,
            fetched_at=now,
            updated_at=now,
        )

        async with self.session_factory() as session:
            session.add(record)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise DuplicateChargeError(order_number) from e

        logger.info(
            f"Stored shipping charge {breakdown.total:.2f} for {order_number}",
            extra={"order_number": order_number},
        )
        return record

    async def health_check(self) -> bool:
        """Check that the database answers a trivial query."""
        async with self.session_factory() as session:
            await session.execute(select(1))
        return True
