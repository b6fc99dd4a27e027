"""Wallet ledger matching for Shiprocket billing entries."""

from typing import List, Optional

from shiprocket_recon.core.exceptions import NotFoundError, TransientAPIError
from shiprocket_recon.core.logger import setup_logger
from shiprocket_recon.models.order import LedgerTransaction

logger = setup_logger(__name__)


def matches_order(txn: LedgerTransaction, awb_code: str, order_number: str) -> bool:
    """Check if a ledger entry belongs to an order number or AWB.

    Description matching is a case-sensitive substring test. Empty
    identifiers never match.
    """
    if order_number and txn.order_id == order_number:
        return True
    if awb_code and txn.awb == awb_code:
        return True

    description = txn.description or ""
    if order_number and order_number in description:
        return True
    if awb_code and awb_code in description:
        return True
    return False


class LedgerMatcher:
    """Finds wallet transactions belonging to one order or tracking code."""

    def __init__(
        self,
        api_client,
        page_size: int = 100,
        max_pages: int = 20,
        search_max_pages: int = 1,
    ):
        self.api_client = api_client
        self.page_size = page_size
        self.max_pages = max_pages
        self.search_max_pages = search_max_pages

    async def fetch_for_order(self, awb_code: str, order_number: str) -> List[LedgerTransaction]:
        """
        Get wallet transactions for an order to build a detailed charge breakdown.

        Orders not yet shipped or billed answer 404; that is treated as no data.

        Returns:
            Matching transactions, empty on 404 or upstream error

        Raises:
            AuthError: If the platform rejects our credentials
        """
        matched: List[LedgerTransaction] = []
        page = 1

        try:
            while page <= self.search_max_pages:
                transactions = await self.api_client.list_wallet_transactions(
                    page=page,
                    per_page=self.page_size,
                    search=order_number,
                )
                if not transactions:
                    break

                matched.extend(t for t in transactions if matches_order(t, awb_code, order_number))

                if len(transactions) < self.page_size:
                    break
                page += 1
        except NotFoundError:
            logger.debug(f"No wallet transactions yet for {order_number}")
            return []
        except TransientAPIError as e:
            logger.error(
                f"Error fetching wallet transactions for {order_number}: {e}",
                extra={"order_number": order_number, "awb_code": awb_code},
            )
            return []

        return matched

    async def fetch_all(
        self,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[LedgerTransaction]:
        """
        Page through recent wallet transactions.

        The feed ignores date filters, so the optional range (YYYY-MM-DD,
        inclusive) is applied on the transaction's created_at date after
        fetching.

        Raises:
            AuthError: If the platform rejects our credentials
        """
        all_transactions: List[LedgerTransaction] = []
        page = 1

        logger.info("Fetching recent wallet transactions (no server-side date filter)")

        try:
            while page <= self.max_pages:
                transactions = await self.api_client.list_wallet_transactions(
                    page=page,
                    per_page=self.page_size,
                )
                if not transactions:
                    break

                all_transactions.extend(transactions)

                if len(transactions) < self.page_size:
                    break
                page += 1
        except NotFoundError:
            logger.info("Wallet transactions API not available (404)")
            return []
        except TransientAPIError as e:
            logger.error(f"Error fetching wallet transactions: {e}")
            return []

        logger.info(f"Fetched {len(all_transactions)} wallet transactions")

        if not start_date and not end_date:
            return all_transactions

        filtered = []
        for txn in all_transactions:
            txn_date = txn.created_date()
            if not txn_date:
                continue
            if start_date and txn_date < start_date:
                continue
            if end_date and txn_date > end_date:
                continue
            filtered.append(txn)

        logger.info(
            f"Filtered to {len(filtered)} transactions between "
            f"{start_date or 'start'} and {end_date or 'end'}"
        )
        return filtered
