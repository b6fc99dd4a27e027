import pytest

from shiprocket_recon.core.exceptions import DuplicateChargeError
from shiprocket_recon.models.charges import ChargeBreakdown
from shiprocket_recon.models.order import RemoteOrder
from tests.conftest import make_order

pytestmark = [pytest.mark.asyncio]


def _order(channel_id="PB1", order_id=11):
    return RemoteOrder.model_validate(make_order(channel_id, order_id, awb_code="AWB11"))


async def test_create_stores_breakdown_and_provenance(repository):
    order = _order()
    breakdown = ChargeBreakdown(freight_forward=50, freight_cod=-20, messaging=5, source="ledger")

    await repository.create("PB1", breakdown, order=order, shipment=order.primary_shipment)
    record = await repository.get("PB1")

    assert record.shipping_charge == 35
    assert record.freight_forward == 50
    assert record.freight_cod == -20
    assert record.whatsapp_charges == 5
    assert record.other_charges == 0
    assert record.shiprocket_order_id == 11
    assert record.awb_code == "AWB11"
    assert record.courier_name == "Delhivery Surface"
    assert record.weight == 0.5
    assert record.status == "DELIVERED"
    assert record.fetched_at is not None


async def test_create_duplicate_raises(repository):
    breakdown = ChargeBreakdown(freight_forward=10)
    await repository.create("PB1", breakdown)

    with pytest.raises(DuplicateChargeError):
        await repository.create("PB1", ChargeBreakdown(freight_forward=99))

    record = await repository.get("PB1")
    assert record.shipping_charge == 10


async def test_exists_and_get_many(repository):
    await repository.create("PB1", ChargeBreakdown(freight_forward=10))
    await repository.create("PB2", ChargeBreakdown(freight_forward=20, freight_rto=5))

    assert await repository.exists("PB1")
    assert not await repository.exists("PB3")

    records = await repository.get_many(["PB1", "PB2", "PB3", "PB1"])
    assert set(records) == {"PB1", "PB2"}
    assert records["PB2"].breakdown_dict() == {
        "freightForward": 20,
        "freightCOD": 0,
        "freightRTO": 5,
        "whatsappCharges": 0,
        "otherCharges": 0,
    }
    assert await repository.get_many([]) == {}


async def test_health_check(repository):
    assert await repository.health_check() is True
