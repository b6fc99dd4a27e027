import asyncio
import os
import tempfile
from typing import Any, Dict, List, Optional

# Keep test log files out of the working tree; must run before the logger import
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "shiprocket_recon_test_logs"))

import httpx
import pytest
import pytest_asyncio

from shiprocket_recon.api.client import ShiprocketAPIClient
from shiprocket_recon.db import ShippingChargeRepository, get_engine, get_session_factory, init_db

BASE_URL = "https://apiv2.shiprocket.in/v1/external"


class FakeClock:
    """Manually advanced epoch clock."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeShiprocket:
    """In-memory stand-in for the Shiprocket external API, served via MockTransport.

    The wallet search is deliberately loose (returns every transaction) so the
    client-side matching is what gets exercised.
    """

    def __init__(self):
        self.orders: List[Dict[str, Any]] = []
        self.transactions: List[Dict[str, Any]] = []
        self.login_status = 200
        self.orders_status = 200
        self.orders_fail_on_page: Optional[int] = None
        self.ledger_status = 200
        self.ledger_status_by_search: Dict[str, int] = {}
        self.reject_tokens: set = set()
        # Seconds per page before a rejected token gets its 401
        self.reject_delay = 0.0
        self.login_calls = 0
        self.requests: List[httpx.Request] = []

    def calls_to(self, suffix: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(suffix)]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path.endswith("/auth/login"):
            self.login_calls += 1
            if self.login_status != 200:
                return httpx.Response(self.login_status, json={"message": "Invalid email and password combination"})
            return httpx.Response(200, json={"token": f"token-{self.login_calls}"})

        page = int(request.url.params.get("page", 1))
        token = request.headers.get("Authorization", "").removeprefix("Bearer ")
        if token in self.reject_tokens:
            if self.reject_delay:
                await asyncio.sleep(self.reject_delay * page)
            return httpx.Response(401, json={"message": "Token has expired"})

        per_page = int(request.url.params.get("per_page", 50))
        start = (page - 1) * per_page

        if path.endswith("/orders"):
            if self.orders_status != 200 or self.orders_fail_on_page == page:
                status = self.orders_status if self.orders_status != 200 else 500
                return httpx.Response(status, json={"message": "Server error"})
            return httpx.Response(200, json={"data": self.orders[start:start + per_page]})

        if path.endswith("/wallet/transactions"):
            search = request.url.params.get("search")
            status = self.ledger_status_by_search.get(search, self.ledger_status)
            if status != 200:
                return httpx.Response(status, json={"message": "No data found"})
            return httpx.Response(200, json={"data": self.transactions[start:start + per_page]})

        return httpx.Response(404, json={"message": "Not found"})


def make_order(
    channel_order_id: str,
    order_id: int,
    awb_code: Optional[str] = "AWB0001",
    charges: Optional[Dict[str, Any]] = None,
    cost: Any = None,
    with_shipment: bool = True,
) -> Dict[str, Any]:
    shipments = []
    if with_shipment:
        shipment = {
            "id": order_id * 10,
            "awb_code": awb_code,
            "courier_name": "Delhivery Surface",
            "status": "DELIVERED",
            "weight": "0.5",
        }
        if cost is not None:
            shipment["cost"] = cost
        shipments.append(shipment)

    order = {"id": order_id, "channel_order_id": channel_order_id, "shipments": shipments}
    if charges is not None:
        order["awb_data"] = {"charges": charges}
    return order


def make_txn(type_label: str, amount: float, order_id: str = None, awb: str = None, description: str = "",
             created_at: str = "2024-03-15 10:00:00", txn_id: int = 1) -> Dict[str, Any]:
    return {
        "id": txn_id,
        "type": type_label,
        "amount": amount,
        "balance": 1000.0,
        "description": description,
        "awb": awb,
        "order_id": order_id,
        "created_at": created_at,
    }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def platform():
    return FakeShiprocket()


@pytest_asyncio.fixture
async def api_client(platform, clock):
    http = httpx.AsyncClient(transport=httpx.MockTransport(platform.handler))
    client = ShiprocketAPIClient(
        email="ops@example.com",
        password="secret",
        base_url=BASE_URL,
        clock=clock,
        client=http,
    )
    try:
        yield client
    finally:
        await client.close()


@pytest_asyncio.fixture
async def repository(tmp_path):
    engine = get_engine(f"sqlite+aiosqlite:///{tmp_path / 'charges.db'}")
    await init_db(engine)
    try:
        yield ShippingChargeRepository(get_session_factory(engine))
    finally:
        await engine.dispose()
