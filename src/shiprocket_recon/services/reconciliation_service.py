"""
Reconciliation Service for Shiprocket shipping charges.

Determines what Shiprocket actually billed for each sales-channel order and
stores the categorized breakdown once per order number.
"""

import asyncio
from typing import Dict, Iterable, Optional

from shiprocket_recon.core.exceptions import AuthError, DuplicateChargeError
from shiprocket_recon.core.logger import new_run_id, order_context, setup_logger
from shiprocket_recon.models.charges import BatchResult, ChargeBreakdown
from shiprocket_recon.models.order import RemoteOrder
from shiprocket_recon.services.charge_calculator import compute
from shiprocket_recon.services.order_indexer import lookup

logger = setup_logger(__name__)

# Per-order outcomes
FETCHED = "fetched"
SKIPPED = "skipped"
NOT_FOUND = "not_found"
ZERO_CHARGE = "zero_charge"
FAILED = "failed"


class ReconciliationBatchRunner:
    """
    Reconciles shipping charges for many orders.

    Steps:
    1. Build the order index once for the whole run
    2. Process orders in fixed-size windows; orders inside a window run
       concurrently, windows run one after another
    3. Per order: skip if already stored, look up the Shiprocket order, match
       ledger entries, compute the breakdown, store it if the total is positive
    """

    def __init__(
        self,
        order_indexer,
        ledger_matcher,
        repository,
        batch_size: int = 5,
        max_index_orders: int = 1000,
        order_timeout_seconds: Optional[float] = 60.0,
    ):
        self.order_indexer = order_indexer
        self.ledger_matcher = ledger_matcher
        self.repository = repository
        self.batch_size = max(1, batch_size)
        self.max_index_orders = max_index_orders
        self.order_timeout_seconds = order_timeout_seconds

    async def run(self, order_numbers: Iterable[str]) -> BatchResult:
        """
        Bulk-reconcile shipping charges.

        Returns:
            BatchResult with fetched/skipped counts plus diagnostics

        Raises:
            AuthError: If Shiprocket rejects our credentials (aborts the run)
        """
        unique_orders = list(dict.fromkeys(o for o in order_numbers if o))
        result = BatchResult(total=len(unique_orders))
        run_id = new_run_id()
        run_log = order_context(run_id=run_id)

        logger.info(f"Starting bulk fetch for {len(unique_orders)} orders", extra=run_log)
        if not unique_orders:
            return result

        index = await self.order_indexer.build_index(self.max_index_orders)

        for i in range(0, len(unique_orders), self.batch_size):
            batch = unique_orders[i:i + self.batch_size]

            outcomes = await asyncio.gather(
                *(self._process_with_timeout(order_number, index, run_id) for order_number in batch),
                return_exceptions=True,
            )

            for order_number, outcome in zip(batch, outcomes):
                if isinstance(outcome, AuthError):
                    logger.error(
                        f"Authentication failed during bulk fetch: {outcome}",
                        extra=order_context(run_id, order_number),
                    )
                    raise outcome
                if isinstance(outcome, BaseException):
                    # _process_order catches Exception; this is a cancellation or worse
                    error_msg = f"Error processing {order_number}: {outcome!r}"
                    logger.error(error_msg, extra=order_context(run_id, order_number, outcome=FAILED))
                    result.failed += 1
                    result.errors.append(error_msg)
                    continue
                status, error_msg = outcome
                setattr(result, status, getattr(result, status) + 1)
                if error_msg:
                    result.errors.append(error_msg)

            logger.info(
                f"Progress: {min(i + self.batch_size, len(unique_orders))}/{len(unique_orders)} orders processed",
                extra=run_log,
            )

        logger.info(
            f"Bulk fetch complete: {result.fetched} fetched, {result.skipped} skipped, "
            f"{result.not_found} not found, {result.zero_charge} without charges, {result.failed} failed",
            extra=run_log,
        )
        return result

    async def _process_with_timeout(self, order_number: str, index: Dict[str, RemoteOrder], run_id: str):
        if not self.order_timeout_seconds:
            return await self._process_order(order_number, index, run_id)
        try:
            return await asyncio.wait_for(
                self._process_order(order_number, index, run_id),
                timeout=self.order_timeout_seconds,
            )
        except asyncio.TimeoutError:
            error_msg = f"Timed out processing {order_number} after {self.order_timeout_seconds}s"
            logger.error(error_msg, extra=order_context(run_id, order_number, outcome=FAILED))
            return FAILED, error_msg

    async def _process_order(self, order_number: str, index: Dict[str, RemoteOrder], run_id: str):
        try:
            if await self.repository.exists(order_number):
                logger.debug(
                    f"Shipping charge for {order_number} already stored",
                    extra=order_context(run_id, order_number, outcome=SKIPPED),
                )
                return SKIPPED, None

            order = lookup(index, order_number)
            if order is None or not order.shipments:
                logger.debug(
                    f"No Shiprocket shipment for {order_number}",
                    extra=order_context(run_id, order_number, outcome=NOT_FOUND),
                )
                return NOT_FOUND, None

            breakdown = await self._compute_breakdown(order_number, order, ledger_requires_awb=True, run_id=run_id)
            return await self._store(order_number, order, breakdown, run_id), None

        except AuthError:
            raise
        except Exception as e:
            error_msg = f"Error processing {order_number}: {e}"
            logger.error(error_msg, exc_info=True, extra=order_context(run_id, order_number, outcome=FAILED))
            return FAILED, error_msg

    async def reconcile_order(self, order_number: str) -> Optional[float]:
        """
        Fetch and store the shipping charge for a single order.

        Scans the order listing instead of building a full index.

        Returns:
            Total charge (existing or newly stored), or None if nothing billable

        Raises:
            AuthError: If Shiprocket rejects our credentials
        """
        existing = await self.repository.get(order_number)
        if existing is not None:
            return existing.shipping_charge

        run_id = new_run_id()
        order = await self.order_indexer.find_order(order_number)
        if order is None or not order.shipments:
            logger.info(
                f"No Shiprocket shipment found for {order_number}",
                extra=order_context(run_id, order_number, outcome=NOT_FOUND),
            )
            return None

        breakdown = await self._compute_breakdown(order_number, order, ledger_requires_awb=False, run_id=run_id)
        status = await self._store(order_number, order, breakdown, run_id)

        if status == FETCHED:
            return breakdown.total
        if status == SKIPPED:
            existing = await self.repository.get(order_number)
            return existing.shipping_charge if existing else None
        return None

    async def _compute_breakdown(
        self,
        order_number: str,
        order: RemoteOrder,
        ledger_requires_awb: bool,
        run_id: Optional[str] = None,
    ) -> ChargeBreakdown:
        shipment = order.primary_shipment
        awb_code = (shipment.awb_code or "") if shipment else ""

        transactions = []
        if awb_code or not ledger_requires_awb:
            transactions = await self.ledger_matcher.fetch_for_order(awb_code, order_number)

        breakdown = compute(transactions, shipment, order.raw_charges)
        logger.debug(
            f"Breakdown for {order_number} from {breakdown.source}: total={breakdown.total:.2f}",
            extra=order_context(run_id, order_number, awb_code),
        )
        return breakdown

    async def _store(
        self,
        order_number: str,
        order: RemoteOrder,
        breakdown: ChargeBreakdown,
        run_id: Optional[str] = None,
    ) -> str:
        awb_code = order.primary_shipment.awb_code if order.primary_shipment else None
        if not breakdown.is_billable:
            logger.info(
                f"No billable shipping charge yet for {order_number}",
                extra=order_context(run_id, order_number, awb_code, outcome=ZERO_CHARGE),
            )
            return ZERO_CHARGE
        try:
            await self.repository.create(order_number, breakdown, order=order, shipment=order.primary_shipment)
        except DuplicateChargeError:
            logger.info(
                f"Shipping charge for {order_number} stored concurrently, treating as reconciled",
                extra=order_context(run_id, order_number, awb_code, outcome=SKIPPED),
            )
            return SKIPPED
        logger.info(
            f"Stored shipping charge {breakdown.total:.2f} for {order_number}",
            extra=order_context(run_id, order_number, awb_code, outcome=FETCHED),
        )
        return FETCHED
