"""Shiprocket external API client."""

from typing import Any, Callable, List, Optional

import httpx
from pydantic import ValidationError

from shiprocket_recon.core.exceptions import AuthError, NotFoundError, TransientAPIError
from shiprocket_recon.core.logger import setup_logger
from shiprocket_recon.core.token_manager import TOKEN_LIFETIME_SECONDS, TokenManager
from shiprocket_recon.models.order import LedgerTransaction, RemoteOrder
from .endpoints import AUTH_LOGIN, ORDERS, WALLET_TRANSACTIONS

logger = setup_logger(__name__)


class ShiprocketAPIClient:
    """Async HTTP client for the Shiprocket external API."""

    def __init__(
        self,
        email: Optional[str],
        password: Optional[str],
        base_url: str = "https://apiv2.shiprocket.in/v1/external",
        timeout: float = 30.0,
        token_lifetime_seconds: int = TOKEN_LIFETIME_SECONDS,
        clock: Optional[Callable[[], float]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize API client with credentials.

        Args:
            email: Shiprocket API user email
            password: Shiprocket API user password
            base_url: External API root
            timeout: Per-request timeout in seconds
            token_lifetime_seconds: How long a login token is trusted
            clock: Epoch-seconds clock for token expiry (defaults to time.time)
            client: Pre-built httpx client (tests inject a MockTransport here)
        """
        self.email = email
        self.password = password
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=timeout)

        token_kwargs = {"lifetime_seconds": token_lifetime_seconds}
        if clock is not None:
            token_kwargs["clock"] = clock
        self.token_manager = TokenManager(self.login, **token_kwargs)

    async def login(self) -> str:
        """
        Exchange email/password for a bearer token.

        Returns:
            Raw token string

        Raises:
            AuthError: If credentials are missing or rejected
        """
        if not self.email or not self.password:
            raise AuthError("Shiprocket credentials not configured")

        try:
            response = await self.client.post(
                f"{self.base_url}{AUTH_LOGIN}",
                json={"email": self.email, "password": self.password},
            )
        except httpx.HTTPError as e:
            raise AuthError(f"Shiprocket auth request failed: {e}") from e

        if response.status_code >= 400:
            raise AuthError(f"Shiprocket Auth Error: {response.status_code} - {response.text}")

        try:
            data = response.json()
        except ValueError as e:
            raise AuthError("Shiprocket auth response was not JSON") from e

        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise AuthError(f"Shiprocket auth response missing token: {data}")
        return token

    async def _make_request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
        _retry_auth: bool = True,
    ) -> Any:
        """
        Make an authenticated request to the Shiprocket API.

        A 401 drops the cached token and retries once with a fresh login.

        Raises:
            AuthError: If a token cannot be obtained
            NotFoundError: On 404
            TransientAPIError: On any other non-2xx or transport failure
        """
        token = await self.token_manager.get_valid_token()
        url = f"{self.base_url}{path}"
        headers = {"Authorization": f"Bearer {token}"}

        try:
            logger.debug(f"Making API request to {path} params={params}")
            response = await self.client.request(method, url, params=params, json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"HTTP error calling {path}: {e}")
            raise TransientAPIError(f"HTTP error calling {path}: {e}", path=path) from e

        if response.status_code == 401 and _retry_auth:
            logger.warning(f"Token rejected calling {path}, re-authenticating")
            self.token_manager.invalidate(token)
            return await self._make_request(method, path, params, json, _retry_auth=False)

        if response.status_code == 404:
            raise NotFoundError(f"Shiprocket API 404 for {path}", status_code=404, path=path)

        if response.status_code >= 400:
            raise TransientAPIError(
                f"Shiprocket API Error: {response.status_code} - {response.text[:200]}",
                status_code=response.status_code,
                path=path,
            )

        try:
            return response.json()
        except ValueError as e:
            raise TransientAPIError(f"Invalid JSON from {path}", status_code=response.status_code, path=path) from e

    async def list_orders(self, page: int, per_page: int) -> List[RemoteOrder]:
        """
        Fetch one page of the order listing.

        Entries that fail validation are logged and dropped.
        """
        data = await self._make_request("GET", ORDERS, params={"page": page, "per_page": per_page})
        orders = []
        for entry in _extract_rows(data):
            try:
                orders.append(RemoteOrder.model_validate(entry))
            except ValidationError as e:
                logger.warning(f"Skipping malformed order entry on page {page}: {e.error_count()} errors")
        return orders

    async def list_wallet_transactions(
        self,
        page: int,
        per_page: int,
        search: Optional[str] = None,
    ) -> List[LedgerTransaction]:
        """Fetch one page of wallet transactions, optionally filtered by a search term."""
        params = {"page": page, "per_page": per_page}
        if search:
            params["search"] = search

        data = await self._make_request("GET", WALLET_TRANSACTIONS, params=params)
        transactions = []
        for entry in _extract_rows(data):
            try:
                transactions.append(LedgerTransaction.model_validate(entry))
            except ValidationError as e:
                logger.warning(f"Skipping malformed wallet transaction: {e.error_count()} errors")
        return transactions

    async def close(self) -> None:
        """Close HTTP client connection."""
        await self.client.aclose()


def _extract_rows(data: Any) -> List[dict]:
    """Pull the row list out of a `{"data": [...]}` envelope."""
    if isinstance(data, dict):
        rows = data.get("data")
    else:
        rows = data
    if not isinstance(rows, list):
        return []
    return [row for row in rows if isinstance(row, dict)]
