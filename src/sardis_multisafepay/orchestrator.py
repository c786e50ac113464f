"""
Payment request orchestration.

Flow:
1. Resolve provider settings (credentials for the running environment)
2. Build the order from the baskets
3. Create a client for the resolved key and environment
4. Create the order at MultiSafepay
5. Map the result to a PaymentOutcome

The outbound exchange is audited on every path once the baskets are
validated, including when settings or pricing fail before any request.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Callable, Optional, Sequence

from sardis_multisafepay.audit import AuditTrail, serialize_body
from sardis_multisafepay.gateway import MultiSafepayClient, describe_failure, new_client
from sardis_multisafepay.models import (
    AuditDirection,
    BasketGroup,
    BasketItem,
    Environment,
    GatewayResult,
    PaymentMethodSettings,
    PaymentOrder,
    PaymentOutcome,
    PaymentRequestAction,
)
from sardis_multisafepay.order_builder import OrderBuilder, first_basket
from sardis_multisafepay.settings import SettingsResolver

logger = logging.getLogger(__name__)

ClientFactory = Callable[[Optional[str], Environment], MultiSafepayClient]


def payment_outcome_from_result(result: GatewayResult, fail_url: str) -> PaymentOutcome:
    """Map a create-order result to what the checkout shows the buyer."""
    if result.ok:
        return PaymentOutcome(
            successful=True,
            redirect_url=result.response.payment_url,
            action=PaymentRequestAction.REDIRECT,
        )
    return PaymentOutcome(
        successful=False,
        redirect_url=fail_url,
        error_message=result.message,
        action=PaymentRequestAction.REDIRECT,
    )


class PaymentRequestOrchestrator:
    """Starts a MultiSafepay redirect payment for a set of baskets."""

    def __init__(
        self,
        resolver: SettingsResolver,
        builder: OrderBuilder,
        audit: AuditTrail,
        environment: Environment,
        client_factory: Optional[ClientFactory] = None,
    ):
        self.resolver = resolver
        self.builder = builder
        self.audit = audit
        self.environment = environment
        self.client_factory = client_factory or new_client

    async def _create_order(self, api_key: Optional[str], order: PaymentOrder) -> GatewayResult:
        try:
            async with self.client_factory(api_key, self.environment) as client:
                return await client.create_order(order)
        except Exception as e:
            logger.exception("Unexpected error creating MultiSafepay order %s", order.order_id)
            return GatewayResult.failure(describe_failure(e), str(e))

    async def initiate_payment(
        self,
        baskets: Sequence[BasketGroup],
        buyer: Optional[BasketItem],
        method_settings: PaymentMethodSettings,
        invoice_number: str,
    ) -> PaymentOutcome:
        """
        Create the order at MultiSafepay and tell the caller where to send the buyer.

        Only an empty basket list raises. Settings lookup, pricing and
        remote failures send the buyer to the configured fail url instead,
        and the attempt is audited either way.

        Args:
            baskets: Basket groups paid in this transaction (at least one)
            buyer: Buyer record
            method_settings: Chosen payment method
            invoice_number: Invoice number, used as MultiSafepay order id

        Returns:
            PaymentOutcome with a redirect url on every path

        Raises:
            InvalidArgument: If no basket is given
        """
        first_basket(baskets)
        fail_url = method_settings.provider_settings.fail_url

        async with self.audit.pending(invoice_number, AuditDirection.OUTGOING) as entry:
            try:
                provider_settings = await self.resolver.resolve_settings(method_settings.provider_settings)
                fail_url = provider_settings.fail_url
                method_settings = dataclasses.replace(method_settings, provider_settings=provider_settings)

                api_key = self.builder.resolve_api_key(baskets, provider_settings)
                order = await self.builder.build_order(baskets, buyer, method_settings, invoice_number)
            except Exception as e:
                logger.exception("Could not prepare MultiSafepay order %s", invoice_number)
                result = GatewayResult.failure(describe_failure(e), str(e))
            else:
                entry.request_body = serialize_body(order.to_payload())
                result = await self._create_order(api_key, order)
                entry.response_body = serialize_body(result.response.raw) if result.ok else None
            entry.error = result.error

        outcome = payment_outcome_from_result(result, fail_url)
        if not outcome.successful:
            logger.warning(
                "Payment request for invoice %s failed; redirecting to fail url",
                invoice_number,
            )
        return outcome
