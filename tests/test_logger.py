import json
import logging

import pytest

from shiprocket_recon.core.logger import JSONFormatter, order_context
from shiprocket_recon.services.ledger_matcher import LedgerMatcher
from shiprocket_recon.services.order_indexer import OrderIndexer
from shiprocket_recon.services.reconciliation_service import ReconciliationBatchRunner
from tests.conftest import make_order, make_txn

RUNNER_LOGGER = "shiprocket_recon.services.reconciliation_service"


def _record(**extra):
    record = logging.LogRecord(RUNNER_LOGGER, logging.INFO, __file__, 1, "Stored charge", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_emits_reconciliation_context():
    record = _record(**order_context("run-1", "PB1", "AWB1", outcome="fetched"))

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "Stored charge"
    assert payload["level"] == "INFO"
    assert payload["run_id"] == "run-1"
    assert payload["order_number"] == "PB1"
    assert payload["awb_code"] == "AWB1"
    assert payload["outcome"] == "fetched"


def test_formatter_omits_missing_context():
    payload = json.loads(JSONFormatter().format(_record(**order_context(run_id="run-1"))))

    assert payload["run_id"] == "run-1"
    assert "order_number" not in payload
    assert "awb_code" not in payload


def test_order_context_drops_empty_awb():
    assert order_context("run-1", "PB3", "") == {"run_id": "run-1", "order_number": "PB3"}


@pytest.mark.asyncio
async def test_batch_logs_share_run_id(api_client, platform, repository, caplog):
    platform.orders = [
        make_order("#PB1", 1, awb_code="AWB1"),
        make_order("PB4", 4, with_shipment=False),
    ]
    platform.transactions = [make_txn("Freight Forward", -50, order_id="PB1", txn_id=1)]
    runner = ReconciliationBatchRunner(OrderIndexer(api_client, page_size=50), LedgerMatcher(api_client), repository)

    with caplog.at_level(logging.DEBUG, logger="shiprocket_recon"):
        await runner.run(["PB1", "PB4"])

    records = [r for r in caplog.records if r.name == RUNNER_LOGGER]
    assert records
    assert len({r.run_id for r in records}) == 1

    stored = [r for r in records if getattr(r, "outcome", None) == "fetched"]
    assert [(r.order_number, r.awb_code) for r in stored] == [("PB1", "AWB1")]

    not_found = [r for r in records if getattr(r, "outcome", None) == "not_found"]
    assert [r.order_number for r in not_found] == ["PB4"]
