"""
Tests for sardis_multisafepay.order_builder module.

Tests cover:
- Minor unit conversion and its rounding rule
- Basket overrides (API key, currency, description, locale)
- Url and gateway mapping from settings
- Contract violations
"""
from __future__ import annotations

import dataclasses
from decimal import Decimal

import pytest

from sardis_multisafepay.constants import BasketProperties
from sardis_multisafepay.exceptions import InvalidArgument, InvariantViolation
from sardis_multisafepay.models import (
    BasketGroup,
    BasketItem,
    MultiSafepayProviderSettings,
    PriceType,
)
from sardis_multisafepay.order_builder import OrderBuilder, to_minor_units

from conftest import FAIL_URL, SUCCESS_URL, WEBHOOK_URL, StaticPricer


class TestToMinorUnits:
    """Tests for to_minor_units."""

    @pytest.mark.parametrize(
        "total,expected",
        [
            (Decimal("19.995"), 2000),
            (Decimal("0.125"), 12),
            (Decimal("0.135"), 14),
            (Decimal("10"), 1000),
            (Decimal("0"), 0),
            (Decimal("12.344"), 1234),
        ],
    )
    def test_rounds_half_to_even(self, total, expected):
        """Should round to the nearest cent, ties to even."""
        assert to_minor_units(total) == expected


class TestBuildOrder:
    """Tests for OrderBuilder.build_order."""

    @pytest.mark.asyncio
    async def test_defaults_from_settings(self, builder, baskets, method_settings):
        """Should take amount, currency, urls and gateway from settings."""
        order = await builder.build_order(baskets, None, method_settings, "ORD-1")

        assert order.order_id == "ORD-1"
        assert order.gateway_id == "IDEAL"
        assert order.amount_in_minor_units == 2000
        assert order.currency_code == "EUR"
        assert order.description == "Order #1001"
        assert order.webhook_url == WEBHOOK_URL
        assert order.success_url == SUCCESS_URL
        assert order.fail_url == FAIL_URL
        assert order.order_type == "redirect"
        assert order.locale is None

    @pytest.mark.asyncio
    async def test_sums_all_basket_groups(self, builder, method_settings):
        """Should add up the price of every basket group."""
        baskets = [
            BasketGroup(main=BasketItem(id=1001)),
            BasketGroup(main=BasketItem(id=1002)),
        ]

        order = await builder.build_order(baskets, None, method_settings, "ORD-2")

        assert order.amount_in_minor_units == 2500

    @pytest.mark.asyncio
    async def test_asks_for_vat_inclusive_price(self, builder, pricer, baskets, method_settings):
        """Should request the PSP price including VAT."""
        await builder.build_order(baskets, None, method_settings, "ORD-1")
        assert pricer.calls == [PriceType.PSP_PRICE_IN_VAT]

    @pytest.mark.asyncio
    async def test_basket_overrides(self, builder, method_settings):
        """Should prefer currency, description and locale from the first basket."""
        main = BasketItem(
            id=1001,
            details={
                BasketProperties.CURRENCY: "USD",
                BasketProperties.TRANSACTION_REFERENCE: "Invoice 2024-17",
                BasketProperties.LANGUAGE_CODE: "nl_NL",
            },
        )

        order = await builder.build_order([BasketGroup(main=main)], None, method_settings, "ORD-3")

        assert order.currency_code == "USD"
        assert order.description == "Invoice 2024-17"
        assert order.locale == "nl_NL"
        assert order.to_payload()["customer"] == {"locale": "nl_NL"}

    @pytest.mark.asyncio
    async def test_blank_overrides_fall_back(self, builder, method_settings):
        """Should ignore whitespace-only override values."""
        main = BasketItem(
            id=1001,
            details={
                BasketProperties.CURRENCY: "  ",
                BasketProperties.TRANSACTION_REFERENCE: "",
            },
        )

        order = await builder.build_order([BasketGroup(main=main)], None, method_settings, "ORD-4")

        assert order.currency_code == "EUR"
        assert order.description == "Order #1001"

    @pytest.mark.asyncio
    async def test_only_first_basket_overrides(self, builder, method_settings):
        """Should read overrides from the first basket only."""
        baskets = [
            BasketGroup(main=BasketItem(id=1001)),
            BasketGroup(main=BasketItem(id=1002, details={BasketProperties.CURRENCY: "GBP"})),
        ]

        order = await builder.build_order(baskets, None, method_settings, "ORD-5")

        assert order.currency_code == "EUR"

    @pytest.mark.asyncio
    async def test_empty_baskets(self, builder, method_settings):
        """Should reject an empty basket collection."""
        with pytest.raises(InvalidArgument) as exc_info:
            await builder.build_order([], None, method_settings, "ORD-6")
        assert exc_info.value.details["field"] == "baskets"

    @pytest.mark.asyncio
    async def test_negative_total(self, method_settings):
        """Should treat a negative total as an invariant violation."""
        builder = OrderBuilder(StaticPricer({1001: Decimal("-1.00")}))
        with pytest.raises(InvariantViolation):
            await builder.build_order(
                [BasketGroup(main=BasketItem(id=1001))], None, method_settings, "ORD-7"
            )

    @pytest.mark.asyncio
    async def test_non_numeric_price(self, method_settings):
        """Should treat a non-numeric price as an invariant violation."""
        builder = OrderBuilder(StaticPricer({1001: "free"}))
        with pytest.raises(InvariantViolation):
            await builder.build_order(
                [BasketGroup(main=BasketItem(id=1001))], None, method_settings, "ORD-8"
            )


class TestResolveApiKey:
    """Tests for OrderBuilder.resolve_api_key."""

    def test_basket_override_wins(self, builder, provider_settings):
        """Should use the key stored on the first basket."""
        settings = dataclasses.replace(
            provider_settings, multisafepay=MultiSafepayProviderSettings(api_key="from-settings")
        )
        baskets = [BasketGroup(main=BasketItem(id=1, details={BasketProperties.API_KEY: "from-basket"}))]

        assert builder.resolve_api_key(baskets, settings) == "from-basket"

    def test_falls_back_to_settings(self, builder, baskets, provider_settings):
        """Should use the resolved settings key without an override."""
        settings = dataclasses.replace(
            provider_settings, multisafepay=MultiSafepayProviderSettings(api_key="from-settings")
        )
        assert builder.resolve_api_key(baskets, settings) == "from-settings"

    def test_no_key_anywhere(self, builder, baskets, provider_settings):
        """Should return None when neither basket nor settings have a key."""
        assert builder.resolve_api_key(baskets, provider_settings) is None
