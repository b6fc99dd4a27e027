"""Order lookup against the Shiprocket order listing.

Shiprocket's channel_order_id filter silently returns wrong results, and the
channel id is stored with or without a leading "#" depending on how the order
was created. Lookups therefore scan the listing page by page and compare every
formatting variant of the id.
"""

import math
from typing import Dict, List, Optional

from shiprocket_recon.core.exceptions import TransientAPIError
from shiprocket_recon.core.logger import setup_logger
from shiprocket_recon.models.order import RemoteOrder

logger = setup_logger(__name__)


def key_variants(order_number: str) -> List[str]:
    """Return the raw id, the id without a leading '#', and the id with one.

    Order is preserved and duplicates removed.
    """
    raw = str(order_number)
    stripped = raw[1:] if raw.startswith("#") else raw
    variants = []
    for key in (raw, stripped, f"#{stripped}"):
        if key not in variants:
            variants.append(key)
    return variants


def lookup(index: Dict[str, RemoteOrder], order_number: str) -> Optional[RemoteOrder]:
    """Find an order in a prebuilt index by any key variant."""
    for key in key_variants(order_number):
        order = index.get(key)
        if order is not None:
            return order
    return None


class OrderIndexer:
    """Bulk-paginates the order listing into a channel-id lookup table."""

    def __init__(self, api_client, page_size: int = 50, scan_max_pages: int = 10):
        self.api_client = api_client
        self.page_size = page_size
        self.scan_max_pages = scan_max_pages

    async def build_index(self, max_orders: int = 500) -> Dict[str, RemoteOrder]:
        """
        Fetch up to `max_orders` recent orders and key them by channel order id.

        Each order is registered under the raw id, the id without a leading
        '#', and the id with a '#' added. An upstream failure part-way through
        keeps the pages already fetched.

        Raises:
            AuthError: If the platform rejects our credentials
        """
        index: Dict[str, RemoteOrder] = {}
        max_pages = max(1, math.ceil(max_orders / self.page_size))
        total_fetched = 0
        page = 1

        logger.info(f"Fetching up to {max_orders} recent orders in bulk")

        try:
            while page <= max_pages and total_fetched < max_orders:
                orders = await self.api_client.list_orders(page=page, per_page=self.page_size)
                if not orders:
                    break

                for order in orders:
                    if total_fetched >= max_orders:
                        break
                    total_fetched += 1
                    if not order.channel_order_id:
                        continue
                    for key in key_variants(order.channel_order_id):
                        index[key] = order

                if len(orders) < self.page_size:
                    break
                page += 1
        except TransientAPIError as e:
            logger.error(f"Order listing failed on page {page}, keeping partial index: {e}")

        logger.info(f"Fetched {total_fetched} orders, mapped {len(index)} lookup keys")
        return index

    async def find_order(self, order_number: str) -> Optional[RemoteOrder]:
        """
        Scan the order listing for a channel order id.

        Returns:
            First order matching any key variant, or None

        Raises:
            AuthError: If the platform rejects our credentials
        """
        variants = set(key_variants(order_number))
        page = 1

        try:
            while page <= self.scan_max_pages:
                orders = await self.api_client.list_orders(page=page, per_page=self.page_size)
                if not orders:
                    break

                for order in orders:
                    if order.channel_order_id in variants:
                        return order

                if len(orders) < self.page_size:
                    break
                page += 1
        except TransientAPIError as e:
            logger.error(f"Error scanning Shiprocket orders for {order_number}: {e}")

        return None
