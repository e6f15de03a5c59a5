"""
Correlation ID tests.
"""

import logging
import pytest

from parceltrack.app.core.observability import CorrelationIdFilter, correlation_id_var


def make_record():
    return logging.LogRecord("parceltrack.store", logging.INFO, __file__, 1, "Parcel added", None, None)


def test_filter_stamps_current_correlation_id():
    token = correlation_id_var.set("req-42")
    try:
        record = make_record()
        assert CorrelationIdFilter().filter(record) is True
    finally:
        correlation_id_var.reset(token)

    assert record.correlation_id == "req-42"


def test_filter_outside_request():
    record = make_record()
    CorrelationIdFilter().filter(record)

    assert record.correlation_id == "-"


@pytest.mark.asyncio
async def test_store_logs_carry_request_correlation_id(client, caplog):
    caplog.set_level(logging.INFO, logger="parceltrack")
    caplog.handler.addFilter(CorrelationIdFilter())

    response = await client.post(
        "/v1/parcels",
        json={"client": 5, "address": "Omsk, Lenina 2"},
        headers={"X-Correlation-ID": "req-7"},
    )

    assert response.headers["X-Correlation-ID"] == "req-7"
    added = [r for r in caplog.records if r.name == "parceltrack.store" and r.getMessage() == "Parcel added"]
    assert len(added) == 1
    assert added[0].correlation_id == "req-7"


@pytest.mark.asyncio
async def test_correlation_id_generated_when_absent(client):
    response = await client.get("/health")

    assert response.headers["X-Correlation-ID"]
