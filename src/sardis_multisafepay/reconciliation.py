"""
Status reconciliation for MultiSafepay webhooks.

MultiSafepay calls the notification url with ``?transactionid=<order id>``.
The webhook itself carries no trusted status, so the order is fetched from
the API and only a "completed" status counts as settled.
"""
from __future__ import annotations

import logging
from typing import Optional

from sardis_multisafepay.audit import AuditTrail, serialize_body
from sardis_multisafepay.constants import OrderStatuses, WebhookProperties
from sardis_multisafepay.exceptions import PreconditionUnavailable
from sardis_multisafepay.gateway import describe_failure, new_client
from sardis_multisafepay.models import (
    AuditDirection,
    Environment,
    GatewayResult,
    InboundRequest,
    PaymentMethodSettings,
    ReconciliationOutcome,
)
from sardis_multisafepay.orchestrator import ClientFactory
from sardis_multisafepay.settings import SettingsResolver

logger = logging.getLogger(__name__)


def get_invoice_number_from_request(request: Optional[InboundRequest]) -> str:
    """Return the ``transactionid`` of a webhook hit, or "" if there is none.

    The query string is checked first, then the form body.
    """
    if request is None:
        return ""
    key = WebhookProperties.INVOICE_NUMBER
    value = request.query.get(key) or request.form.get(key)
    return value or ""


def is_settled(status: str) -> bool:
    return status.lower() == OrderStatuses.COMPLETED


def reconciliation_outcome_from_result(result: GatewayResult) -> ReconciliationOutcome:
    """Map a get-order result to a settled / not settled outcome."""
    if not result.ok:
        return ReconciliationOutcome(status_label=OrderStatuses.RETRIEVAL_FAILED, settled=False)
    status = result.response.status
    return ReconciliationOutcome(status_label=status, settled=is_settled(status))


class StatusReconciliationOrchestrator:
    """Checks the status of the order a webhook refers to."""

    def __init__(
        self,
        resolver: SettingsResolver,
        audit: AuditTrail,
        environment: Environment,
        client_factory: Optional[ClientFactory] = None,
    ):
        self.resolver = resolver
        self.audit = audit
        self.environment = environment
        self.client_factory = client_factory or new_client

    def get_invoice_number_from_request(self, request: Optional[InboundRequest]) -> str:
        return get_invoice_number_from_request(request)

    def extract_order_id(self, request: Optional[InboundRequest]) -> str:
        if request is None:
            raise PreconditionUnavailable("No inbound request available to reconcile")
        return request.query.get(WebhookProperties.INVOICE_NUMBER, "")

    async def _get_order(
        self,
        method_settings: PaymentMethodSettings,
        order_id: str,
    ) -> GatewayResult:
        if not order_id:
            logger.warning("Webhook request has no transactionid; not querying MultiSafepay")
            return GatewayResult.failure("Webhook request has no transactionid")
        try:
            provider_settings = await self.resolver.resolve_settings(method_settings.provider_settings)
            api_key = provider_settings.multisafepay.api_key if provider_settings.multisafepay else None
            async with self.client_factory(api_key, self.environment) as client:
                return await client.get_order(order_id)
        except Exception as e:
            logger.exception("Unexpected error retrieving MultiSafepay order %s", order_id)
            return GatewayResult.failure(describe_failure(e), str(e))

    async def reconcile_status(
        self,
        request: Optional[InboundRequest],
        method_settings: PaymentMethodSettings,
    ) -> ReconciliationOutcome:
        """
        Fetch the current status of the order named in ``request``.

        Never raises. Without a request nothing is called or logged;
        otherwise both the incoming webhook hit and the outgoing status
        query are audited, the incoming one first.
        """
        try:
            order_id = self.extract_order_id(request)
        except PreconditionUnavailable as e:
            logger.warning("Skipping status update: %s", e.message)
            return ReconciliationOutcome(status_label=OrderStatuses.REQUEST_UNAVAILABLE, settled=False)

        async with self.audit.pending(order_id, AuditDirection.OUTGOING) as outgoing, \
                self.audit.pending(order_id, AuditDirection.INCOMING) as incoming:
            incoming.request_body = serialize_body(dict(request.query))
            outgoing.status_code = incoming.status_code = 0
            result = await self._get_order(method_settings, order_id)
            outcome = reconciliation_outcome_from_result(result)

            settled_flag = 1 if outcome.settled else 0
            outgoing.status_code = incoming.status_code = settled_flag
            outgoing.response_body = serialize_body(result.response.raw) if result.ok else None
            outgoing.error = result.error

        logger.info(
            "MultiSafepay order %s has status %r (settled=%s)",
            order_id,
            outcome.status_label,
            outcome.settled,
        )
        return outcome
