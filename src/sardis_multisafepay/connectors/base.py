"""Base payment service provider interface."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from sardis_multisafepay.models import (
    BasketGroup,
    BasketItem,
    PaymentMethodSettings,
    PaymentOutcome,
    PaymentServiceProviderSettings,
    PSPType,
    ReconciliationOutcome,
)


class PaymentServiceProviderService(ABC):
    """Abstract interface every PSP adapter in the checkout implements."""

    @property
    @abstractmethod
    def psp_type(self) -> PSPType:
        """Return the PSP type."""
        pass

    @abstractmethod
    async def handle_payment_request(
        self,
        baskets: Sequence[BasketGroup],
        buyer: Optional[BasketItem],
        method_settings: PaymentMethodSettings,
        invoice_number: str,
    ) -> PaymentOutcome:
        """
        Start a payment at the PSP.

        Args:
            baskets: Basket groups paid together
            buyer: Buyer record
            method_settings: Chosen payment method
            invoice_number: Invoice number of the order

        Returns:
            PaymentOutcome telling the checkout where to redirect
        """
        pass

    @abstractmethod
    async def process_status_update(
        self,
        method_settings: PaymentMethodSettings,
    ) -> ReconciliationOutcome:
        """
        Handle a status webhook for the current inbound request.

        Returns:
            ReconciliationOutcome; never raises
        """
        pass

    @abstractmethod
    async def get_provider_settings(
        self,
        provider_settings: PaymentServiceProviderSettings,
    ) -> PaymentServiceProviderSettings:
        """Return ``provider_settings`` completed with PSP credentials."""
        pass

    @abstractmethod
    def get_invoice_number_from_request(self) -> str:
        """Return the invoice number the current inbound request refers to."""
        pass
