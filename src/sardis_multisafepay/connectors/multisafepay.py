"""MultiSafepay payment service provider."""
from __future__ import annotations

import logging
from functools import partial
from typing import Callable, Optional, Sequence

from sardis_multisafepay.audit import AuditLogSink, AuditTrail, LoggingAuditLogSink
from sardis_multisafepay.config import MultiSafepayConfig, load_config
from sardis_multisafepay.connectors.base import PaymentServiceProviderService
from sardis_multisafepay.gateway import new_client
from sardis_multisafepay.models import (
    BasketGroup,
    BasketItem,
    InboundRequest,
    PaymentMethodSettings,
    PaymentOutcome,
    PaymentServiceProviderSettings,
    PSPType,
    ReconciliationOutcome,
)
from sardis_multisafepay.order_builder import OrderBuilder
from sardis_multisafepay.orchestrator import ClientFactory, PaymentRequestOrchestrator
from sardis_multisafepay.pricing import BasketPricer
from sardis_multisafepay.reconciliation import StatusReconciliationOrchestrator
from sardis_multisafepay.settings import SettingsResolver, SettingsStore

logger = logging.getLogger(__name__)

RequestAccessor = Callable[[], Optional[InboundRequest]]


class MultiSafepayService(PaymentServiceProviderService):
    """
    MultiSafepay adapter for the checkout.

    Wires the settings resolver, order builder and both orchestrators
    around one configuration and one audit sink.
    """

    def __init__(
        self,
        settings_store: SettingsStore,
        pricer: BasketPricer,
        audit_sink: Optional[AuditLogSink] = None,
        request_accessor: Optional[RequestAccessor] = None,
        config: Optional[MultiSafepayConfig] = None,
        client_factory: Optional[ClientFactory] = None,
    ):
        self.config = config or load_config()
        self.request_accessor = request_accessor or (lambda: None)

        environment = self.config.environment
        client_factory = client_factory or partial(new_client, config=self.config)
        audit = AuditTrail(audit_sink or LoggingAuditLogSink(), self.config.psp_name)

        self.resolver = SettingsResolver(settings_store, environment)
        self.builder = OrderBuilder(pricer)
        self.payments = PaymentRequestOrchestrator(
            self.resolver,
            self.builder,
            audit,
            environment,
            client_factory=client_factory,
        )
        self.reconciliation = StatusReconciliationOrchestrator(
            self.resolver,
            audit,
            environment,
            client_factory=client_factory,
        )
        logger.info("MultiSafepay service configured for %s", environment.value)

    @property
    def psp_type(self) -> PSPType:
        return PSPType.MULTISAFEPAY

    async def handle_payment_request(
        self,
        baskets: Sequence[BasketGroup],
        buyer: Optional[BasketItem],
        method_settings: PaymentMethodSettings,
        invoice_number: str,
    ) -> PaymentOutcome:
        return await self.payments.initiate_payment(baskets, buyer, method_settings, invoice_number)

    async def process_status_update(
        self,
        method_settings: PaymentMethodSettings,
    ) -> ReconciliationOutcome:
        return await self.reconciliation.reconcile_status(self.request_accessor(), method_settings)

    async def get_provider_settings(
        self,
        provider_settings: PaymentServiceProviderSettings,
    ) -> PaymentServiceProviderSettings:
        return await self.resolver.resolve_settings(provider_settings)

    def get_invoice_number_from_request(self) -> str:
        return self.reconciliation.get_invoice_number_from_request(self.request_accessor())
