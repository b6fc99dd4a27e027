"""Shipping charge API routes."""

from dataclasses import asdict
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from shiprocket_recon.core.exceptions import AuthError
from shiprocket_recon.core.logger import setup_logger
from shiprocket_recon.server.auth import verify_api_key
from shiprocket_recon.services.shipping_charge_service import ShippingChargeService

logger = setup_logger(__name__)
router = APIRouter()

# Global instances (initialized in app.py on startup)
shipping_charge_service: Optional[ShippingChargeService] = None
repository = None


def set_shipping_charge_service(service: Optional[ShippingChargeService]):
    """Set the global shipping charge service instance.

    Called by app.py during startup event.
    """
    global shipping_charge_service
    shipping_charge_service = service


def set_repository(repo):
    """Set the global repository instance used by the health check."""
    global repository
    repository = repo


class OrderNumbersRequest(BaseModel):
    """Request body carrying sales-channel order numbers."""

    order_numbers: List[str] = Field(default_factory=list, max_length=5000)


def _not_initialized() -> dict:
    return {"success": False, "error": "Shipping charge service not initialized"}


def _valid_date(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return datetime.strptime(value, "%Y-%m-%d").date().isoformat()


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns:
        {
            "status": "healthy|degraded|unhealthy",
            "service": "shiprocket-reconciliation",
            "storage": "ok|error"
        }
    """
    if not shipping_charge_service or repository is None:
        return {
            "status": "unhealthy",
            "service": "shiprocket-reconciliation",
            "error": "Service not initialized",
        }

    try:
        storage_ok = await repository.health_check()
    except Exception as e:
        logger.error(f"Health check error: {e}")
        storage_ok = False

    return {
        "status": "healthy" if storage_ok else "degraded",
        "service": "shiprocket-reconciliation",
        "storage": "ok" if storage_ok else "error",
    }


@router.post("/api/shipping-charges/lookup", dependencies=[Depends(verify_api_key)])
async def lookup_shipping_charges(body: OrderNumbersRequest) -> dict:
    """Get stored shipping charges for a list of orders (no Shiprocket calls)."""
    if not shipping_charge_service:
        return _not_initialized()

    try:
        charges = await shipping_charge_service.get_shipping_charges(body.order_numbers)
        return {"success": True, "charges": charges}
    except Exception as e:
        logger.error(f"Error reading shipping charges: {e}", exc_info=True)
        return {"success": False, "error": str(e)}


@router.post("/api/shipping-charges/bulk-fetch", dependencies=[Depends(verify_api_key)])
async def bulk_fetch_shipping_charges(body: OrderNumbersRequest) -> dict:
    """Reconcile shipping charges for every listed order without a stored record.

    Returns:
        {"success": true, "fetched": int, "skipped": int, "result": {...}}
    """
    if not shipping_charge_service:
        return _not_initialized()

    try:
        result = await shipping_charge_service.bulk_fetch_shipping_charges(body.order_numbers)
        return {
            "success": True,
            "fetched": result.fetched,
            "skipped": result.skipped,
            "result": asdict(result),
        }
    except AuthError as e:
        logger.error(f"Shiprocket authentication failed: {e}")
        return {"success": False, "error": f"Shiprocket authentication failed: {e}"}
    except Exception as e:
        logger.error(f"Error in bulk fetch: {e}", exc_info=True)
        return {"success": False, "error": str(e)}


@router.post("/api/shipping-charges/{order_number}/fetch", dependencies=[Depends(verify_api_key)])
async def fetch_shipping_charge(order_number: str) -> dict:
    """Reconcile a single order."""
    if not shipping_charge_service:
        return _not_initialized()

    try:
        total = await shipping_charge_service.fetch_shipping_charge(order_number)
        return {"success": True, "order_number": order_number, "shippingCharge": total}
    except AuthError as e:
        logger.error(f"Shiprocket authentication failed: {e}")
        return {"success": False, "error": f"Shiprocket authentication failed: {e}"}
    except Exception as e:
        logger.error(f"Error fetching shipping charge for {order_number}: {e}", exc_info=True)
        return {"success": False, "error": str(e)}


@router.get("/api/shipping-charges/wallet-transactions", dependencies=[Depends(verify_api_key)])
async def list_wallet_transactions(
    start_date: Optional[str] = Query(None, description="Start date YYYY-MM-DD"),
    end_date: Optional[str] = Query(None, description="End date YYYY-MM-DD"),
) -> dict:
    """List recent wallet transactions, filtered to a date range if given."""
    if not shipping_charge_service:
        return _not_initialized()

    try:
        start = _valid_date(start_date)
        end = _valid_date(end_date)
    except ValueError as e:
        return {"success": False, "error": f"Invalid date format: {e}"}

    try:
        transactions = await shipping_charge_service.get_wallet_transactions(start, end)
        return {
            "success": True,
            "count": len(transactions),
            "transactions": [t.model_dump() for t in transactions],
        }
    except AuthError as e:
        logger.error(f"Shiprocket authentication failed: {e}")
        return {"success": False, "error": f"Shiprocket authentication failed: {e}"}
    except Exception as e:
        logger.error(f"Error listing wallet transactions: {e}", exc_info=True)
        return {"success": False, "error": str(e)}
