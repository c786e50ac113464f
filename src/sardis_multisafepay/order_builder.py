"""Builds the outbound MultiSafepay order from basket state and settings."""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Optional, Sequence

from sardis_multisafepay.constants import BasketProperties, DEFAULT_DESCRIPTION_TEMPLATE
from sardis_multisafepay.exceptions import InvalidArgument, InvariantViolation
from sardis_multisafepay.models import (
    BasketGroup,
    BasketItem,
    PaymentMethodSettings,
    PaymentOrder,
    PaymentServiceProviderSettings,
    PriceType,
)
from sardis_multisafepay.pricing import BasketPricer

logger = logging.getLogger(__name__)

MINOR_UNITS_PER_MAJOR = Decimal(100)


def to_minor_units(total: Decimal) -> int:
    """Convert a decimal amount to minor units.

    Rounds half to even, the same rule the basket service uses when it
    rounds prices, so 19.995 becomes 2000 and 0.125 becomes 12.
    """
    return int((total * MINOR_UNITS_PER_MAJOR).quantize(Decimal(1), rounding=ROUND_HALF_EVEN))


def first_basket(baskets: Sequence[BasketGroup]) -> BasketGroup:
    if not baskets:
        raise InvalidArgument("At least one shopping basket is required", field="baskets")
    return baskets[0]


def _override(main: BasketItem, key: str) -> Optional[str]:
    value = main.get_detail_value(key)
    return value.strip() if value and value.strip() else None


class OrderBuilder:
    """Derives amount, currency, description and urls of a PaymentOrder."""

    def __init__(self, pricer: BasketPricer):
        self.pricer = pricer

    def resolve_api_key(
        self,
        baskets: Sequence[BasketGroup],
        provider_settings: PaymentServiceProviderSettings,
    ) -> Optional[str]:
        """Return the API key to use: a basket override wins over settings."""
        first = first_basket(baskets)
        from_basket = _override(first.main, BasketProperties.API_KEY)
        if from_basket:
            logger.debug("Using MultiSafepay API key override from basket %s", first.main.id)
            return from_basket
        if provider_settings.multisafepay is None:
            return None
        return provider_settings.multisafepay.api_key

    async def get_total_price(self, baskets: Sequence[BasketGroup]) -> Decimal:
        """Sum the VAT-inclusive price of every basket group."""
        first_basket(baskets)
        total = Decimal("0")
        for group in baskets:
            price = await self.pricer.get_price(group.main, group.lines, PriceType.PSP_PRICE_IN_VAT)
            try:
                total += Decimal(price)
            except (InvalidOperation, TypeError, ValueError) as e:
                raise InvariantViolation(
                    f"Basket {group.main.id} has a non-numeric price: {price!r}",
                    details={"basket_id": group.main.id},
                ) from e

        if not total.is_finite() or total < 0:
            raise InvariantViolation(
                f"Basket total must be a non-negative amount, got {total}",
                details={"total": str(total)},
            )
        return total

    async def build_order(
        self,
        baskets: Sequence[BasketGroup],
        buyer: Optional[BasketItem],
        method_settings: PaymentMethodSettings,
        invoice_number: str,
    ) -> PaymentOrder:
        """
        Build the order for ``invoice_number``.

        Args:
            baskets: Basket groups paid together; the first one carries the
                per-transaction overrides
            buyer: Buyer record (not sent to MultiSafepay)
            method_settings: Payment method with resolved provider settings
            invoice_number: Order id at MultiSafepay

        Returns:
            PaymentOrder ready to be sent

        Raises:
            InvalidArgument: If no basket is given
            InvariantViolation: If pricing yields a negative or non-numeric total
        """
        first = first_basket(baskets)
        provider_settings = method_settings.provider_settings
        total = await self.get_total_price(baskets)

        currency = _override(first.main, BasketProperties.CURRENCY) or provider_settings.currency
        description = (
            _override(first.main, BasketProperties.TRANSACTION_REFERENCE)
            or DEFAULT_DESCRIPTION_TEMPLATE.format(basket_id=first.main.id)
        )

        return PaymentOrder(
            order_id=invoice_number,
            gateway_id=method_settings.external_name,
            amount_in_minor_units=to_minor_units(total),
            currency_code=currency,
            description=description,
            webhook_url=provider_settings.webhook_url,
            success_url=provider_settings.success_url,
            fail_url=provider_settings.fail_url,
            locale=_override(first.main, BasketProperties.LANGUAGE_CODE),
        )
