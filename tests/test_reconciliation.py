"""
Tests for sardis_multisafepay.reconciliation module.

Tests cover:
- Invoice number extraction from webhook requests
- Case-insensitive settlement check
- Audit entries on every path once a request exists
- Missing request short-circuit
"""
from __future__ import annotations

import json

import httpx
import pytest

from sardis_multisafepay.models import AuditDirection, Environment, GatewayResult, InboundRequest, RemoteOrderResponse
from sardis_multisafepay.reconciliation import (
    StatusReconciliationOrchestrator,
    get_invoice_number_from_request,
    reconciliation_outcome_from_result,
)

from conftest import TEST_API, TEST_KEY


def _order(status):
    return {"success": True, "data": {"order_id": "ORD-1", "status": status}}


@pytest.fixture
def orchestrator(resolver, audit, client_factory):
    return StatusReconciliationOrchestrator(
        resolver, audit, Environment.TEST, client_factory=client_factory
    )


@pytest.fixture
def webhook():
    return InboundRequest(query={"transactionid": "ORD-1"})


class TestGetInvoiceNumberFromRequest:
    """Tests for get_invoice_number_from_request."""

    def test_from_query(self, webhook):
        assert get_invoice_number_from_request(webhook) == "ORD-1"

    def test_from_form(self):
        request = InboundRequest(form={"transactionid": "ORD-9"})
        assert get_invoice_number_from_request(request) == "ORD-9"

    def test_query_wins_over_form(self):
        request = InboundRequest(query={"transactionid": "Q"}, form={"transactionid": "F"})
        assert get_invoice_number_from_request(request) == "Q"

    def test_missing(self):
        assert get_invoice_number_from_request(InboundRequest()) == ""
        assert get_invoice_number_from_request(None) == ""


class TestReconciliationOutcomeFromResult:
    """Tests for the status mapping."""

    @pytest.mark.parametrize("status", ["completed", "COMPLETED", "Completed"])
    def test_completed_any_case(self, status):
        result = GatewayResult.success(RemoteOrderResponse(order_id="ORD-1", status=status))

        outcome = reconciliation_outcome_from_result(result)

        assert outcome.settled is True
        assert outcome.status_label == status

    @pytest.mark.parametrize("status", ["initialized", "declined", "cancelled", "expired", "uncleared"])
    def test_other_statuses_not_settled(self, status):
        result = GatewayResult.success(RemoteOrderResponse(order_id="ORD-1", status=status))
        assert reconciliation_outcome_from_result(result).settled is False

    def test_failure(self):
        outcome = reconciliation_outcome_from_result(GatewayResult.failure("boom"))
        assert outcome.status_label == "unable to retrieve order information"
        assert outcome.settled is False


class TestReconcileStatus:
    """Tests for StatusReconciliationOrchestrator.reconcile_status."""

    @pytest.mark.asyncio
    async def test_completed(self, httpx_mock, orchestrator, webhook, method_settings, audit_sink):
        httpx_mock.add_response(method="GET", url=f"{TEST_API}orders/ORD-1", json=_order("completed"))

        outcome = await orchestrator.reconcile_status(webhook, method_settings)

        assert outcome.status_label == "completed"
        assert outcome.settled is True
        assert httpx_mock.get_request().headers["api_key"] == TEST_KEY

        incoming, outgoing = audit_sink.entries
        assert incoming.direction == AuditDirection.INCOMING
        assert incoming.correlation_id == "ORD-1"
        assert incoming.status_code == 1
        assert json.loads(incoming.request_body) == {"transactionid": "ORD-1"}
        assert incoming.response_body is None
        assert outgoing.direction == AuditDirection.OUTGOING
        assert outgoing.status_code == 1
        assert json.loads(outgoing.response_body)["status"] == "completed"
        assert outgoing.error is None

    @pytest.mark.asyncio
    async def test_pending_status(self, httpx_mock, orchestrator, webhook, method_settings, audit_sink):
        httpx_mock.add_response(method="GET", url=f"{TEST_API}orders/ORD-1", json=_order("initialized"))

        outcome = await orchestrator.reconcile_status(webhook, method_settings)

        assert outcome.status_label == "initialized"
        assert outcome.settled is False
        assert [entry.status_code for entry in audit_sink.entries] == [0, 0]

    @pytest.mark.asyncio
    async def test_remote_failure(self, httpx_mock, orchestrator, webhook, method_settings, audit_sink):
        httpx_mock.add_exception(httpx.ConnectError("no route to host"))

        outcome = await orchestrator.reconcile_status(webhook, method_settings)

        assert outcome.status_label == "unable to retrieve order information"
        assert outcome.settled is False

        incoming, outgoing = audit_sink.entries
        assert incoming.direction == AuditDirection.INCOMING
        assert outgoing.response_body is None
        assert "ConnectError" in outgoing.error

    @pytest.mark.asyncio
    async def test_no_request(self, orchestrator, method_settings, audit_sink):
        """Should short-circuit without remote call or audit entries."""
        outcome = await orchestrator.reconcile_status(None, method_settings)

        assert outcome.status_label == "request unavailable"
        assert outcome.settled is False
        assert audit_sink.entries == []

    @pytest.mark.asyncio
    async def test_missing_transaction_id(self, httpx_mock, orchestrator, method_settings, audit_sink):
        """Should audit the hit without querying MultiSafepay for a blank order id."""
        request = InboundRequest(query={"type": "notification"})

        outcome = await orchestrator.reconcile_status(request, method_settings)

        assert outcome.status_label == "unable to retrieve order information"
        assert outcome.settled is False
        assert httpx_mock.get_requests() == []

        incoming, outgoing = audit_sink.entries
        assert incoming.correlation_id == ""
        assert json.loads(incoming.request_body) == {"type": "notification"}
        assert outgoing.request_body is None
        assert outgoing.error == "Webhook request has no transactionid"

    @pytest.mark.asyncio
    async def test_settings_store_failure(self, audit, audit_sink, client_factory, webhook, method_settings):
        """Should report a failure instead of raising when settings cannot be read."""

        class BrokenResolver:
            async def resolve_settings(self, provider_settings):
                raise ConnectionError("settings database unavailable")

        orchestrator = StatusReconciliationOrchestrator(
            BrokenResolver(), audit, Environment.TEST, client_factory=client_factory
        )

        outcome = await orchestrator.reconcile_status(webhook, method_settings)

        assert outcome.settled is False
        assert outcome.status_label == "unable to retrieve order information"
        assert len(audit_sink.entries) == 2
