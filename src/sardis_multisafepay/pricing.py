"""
Basket pricing collaborator.

Tax and discount rules belong to the basket service; the adapter only asks
for the VAT-inclusive price of each basket group.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import ROUND_HALF_EVEN, Decimal
from typing import List

from sardis_multisafepay.models import BasketItem, PriceType

LINE_PRICE_PROPERTY = "price"
LINE_QUANTITY_PROPERTY = "quantity"
LINE_VAT_RATE_PROPERTY = "vatrate"

CENT = Decimal("0.01")


class BasketPricer(ABC):
    """Abstract interface of the basket pricing service."""

    @abstractmethod
    async def get_price(
        self,
        main: BasketItem,
        lines: List[BasketItem],
        price_type: PriceType = PriceType.PSP_PRICE_IN_VAT,
    ) -> Decimal:
        """Return the price of one basket group."""
        pass


class LineDetailPricer(BasketPricer):
    """
    Prices a basket from its line details.

    Each line contributes ``price * quantity`` plus ``vatrate`` percent.
    Intended for development and tests; production wires in the real
    basket service.
    """

    async def get_price(
        self,
        main: BasketItem,
        lines: List[BasketItem],
        price_type: PriceType = PriceType.PSP_PRICE_IN_VAT,
    ) -> Decimal:
        total = Decimal("0")
        for line in lines:
            price = Decimal(line.get_detail_value(LINE_PRICE_PROPERTY) or "0")
            quantity = Decimal(line.get_detail_value(LINE_QUANTITY_PROPERTY) or "1")
            vat_rate = Decimal(line.get_detail_value(LINE_VAT_RATE_PROPERTY) or "0")
            total += price * quantity * (1 + vat_rate / 100)
        return total.quantize(CENT, rounding=ROUND_HALF_EVEN)
