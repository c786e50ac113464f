"""
Pytest configuration and fixtures for sardis-multisafepay tests.
"""
from __future__ import annotations

import sys
from decimal import Decimal
from functools import partial
from pathlib import Path
from typing import Dict, List

import pytest

# Add package source to path
package_src = Path(__file__).parent.parent / "src"
if str(package_src) not in sys.path:
    sys.path.insert(0, str(package_src))

from sardis_multisafepay.audit import AuditTrail, InMemoryAuditLogSink
from sardis_multisafepay.config import MultiSafepayConfig
from sardis_multisafepay.constants import SettingsProperties
from sardis_multisafepay.gateway import new_client
from sardis_multisafepay.models import (
    BasketGroup,
    BasketItem,
    Environment,
    PaymentMethodSettings,
    PaymentServiceProviderSettings,
    PriceType,
)
from sardis_multisafepay.order_builder import OrderBuilder
from sardis_multisafepay.pricing import BasketPricer
from sardis_multisafepay.settings import InMemorySettingsStore, SettingsResolver

PROVIDER_ID = 42
LIVE_KEY = "live_key_0123456789"
TEST_KEY = "test_key_0123456789"

TEST_API = "https://testapi.multisafepay.com/v1/json/"
LIVE_API = "https://api.multisafepay.com/v1/json/"

WEBHOOK_URL = "https://shop.example.com/payment/webhook"
SUCCESS_URL = "https://shop.example.com/payment/success"
FAIL_URL = "https://shop.example.com/payment/failed"


class StaticPricer(BasketPricer):
    """Returns a fixed price per basket main id."""

    def __init__(self, prices: Dict[int, Decimal]):
        self.prices = prices
        self.calls: List[PriceType] = []

    async def get_price(self, main, lines, price_type=PriceType.PSP_PRICE_IN_VAT):
        self.calls.append(price_type)
        return self.prices[main.id]


@pytest.fixture
def settings_store():
    """Settings store holding one MultiSafepay provider record."""
    return InMemorySettingsStore({
        PROVIDER_ID: (
            SettingsProperties.ENTITY_TYPE,
            {
                SettingsProperties.API_KEY_LIVE: LIVE_KEY,
                SettingsProperties.API_KEY_TEST: TEST_KEY,
            },
        ),
    })


@pytest.fixture
def provider_settings():
    return PaymentServiceProviderSettings(
        id=PROVIDER_ID,
        title="MultiSafepay",
        webhook_url=WEBHOOK_URL,
        success_url=SUCCESS_URL,
        fail_url=FAIL_URL,
        currency="EUR",
    )


@pytest.fixture
def method_settings(provider_settings):
    return PaymentMethodSettings(
        id=7,
        title="iDEAL",
        external_name="IDEAL",
        provider_settings=provider_settings,
    )


@pytest.fixture
def baskets():
    return [BasketGroup(main=BasketItem(id=1001), lines=[BasketItem(id=1)])]


@pytest.fixture
def pricer():
    return StaticPricer({1001: Decimal("19.995"), 1002: Decimal("5.00")})


@pytest.fixture
def audit_sink():
    return InMemoryAuditLogSink()


@pytest.fixture
def audit(audit_sink):
    return AuditTrail(audit_sink, "multisafepay")


@pytest.fixture
def config():
    return MultiSafepayConfig(environment=Environment.TEST)


@pytest.fixture
def client_factory(config):
    return partial(new_client, config=config)


@pytest.fixture
def resolver(settings_store):
    return SettingsResolver(settings_store, Environment.TEST)


@pytest.fixture
def builder(pricer):
    return OrderBuilder(pricer)
