"""Shipping charge service: the entry point used by reporting and admin routes."""

from typing import Any, Dict, List, Optional

from shiprocket_recon.core.logger import setup_logger
from shiprocket_recon.models.charges import BatchResult
from shiprocket_recon.models.order import LedgerTransaction
from shiprocket_recon.services.reconciliation_service import ReconciliationBatchRunner

logger = setup_logger(__name__)


class ShippingChargeService:
    """Reads stored shipping charges and triggers reconciliation."""

    def __init__(self, repository, batch_runner: ReconciliationBatchRunner, ledger_matcher):
        self.repository = repository
        self.batch_runner = batch_runner
        self.ledger_matcher = ledger_matcher

    async def get_shipping_charges(self, order_numbers: List[str]) -> Dict[str, Dict[str, Any]]:
        """
        Get stored shipping charges with breakdown. Database only, no API calls.

        Returns:
            {order_number: {"shippingCharge": total, "breakdown": {...}}} for
            orders that have a record
        """
        records = await self.repository.get_many(order_numbers)
        return {
            order_number: {
                "shippingCharge": record.shipping_charge,
                "breakdown": record.breakdown_dict(),
            }
            for order_number, record in records.items()
        }

    async def bulk_fetch_shipping_charges(self, order_numbers: List[str]) -> BatchResult:
        """Reconcile every order that has no stored charge yet."""
        return await self.batch_runner.run(order_numbers)

    async def fetch_shipping_charge(self, order_number: str) -> Optional[float]:
        """Reconcile a single order; returns its total or None."""
        return await self.batch_runner.reconcile_order(order_number)

    async def get_wallet_transactions(
        self,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[LedgerTransaction]:
        """List recent wallet transactions, optionally within a date range."""
        return await self.ledger_matcher.fetch_all(start_date, end_date)
