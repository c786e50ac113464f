"""
Fixed names and endpoints used by the MultiSafepay adapter.

Usage:
    from sardis_multisafepay.constants import BasketProperties, Endpoints
"""
from __future__ import annotations

from typing import Final


PSP_NAME: Final[str] = "multisafepay"


class BasketProperties:
    """Detail keys read from the first basket's main item."""

    API_KEY: Final[str] = "MultiSafePay_ApiKey"
    TRANSACTION_REFERENCE: Final[str] = "MultiSafePay_TransactionReference"
    LANGUAGE_CODE: Final[str] = "MultiSafePay_LanguageCode"
    CURRENCY: Final[str] = "MultiSafePay_Currency"


class SettingsProperties:
    """Secret keys stored on the payment service provider record."""

    API_KEY_LIVE: Final[str] = "multisafepayapikeylive"
    API_KEY_TEST: Final[str] = "multisafepayapikeytest"
    ENTITY_TYPE: Final[str] = "paymentserviceprovider"


class WebhookProperties:
    """Parameters MultiSafepay sends on its notification url."""

    INVOICE_NUMBER: Final[str] = "transactionid"


class Endpoints:
    """MultiSafepay JSON API base urls."""

    LIVE: Final[str] = "https://api.multisafepay.com/v1/json/"
    TEST: Final[str] = "https://testapi.multisafepay.com/v1/json/"


class OrderStatuses:
    """Status labels reported back to callers."""

    COMPLETED: Final[str] = "completed"
    REQUEST_UNAVAILABLE: Final[str] = "request unavailable"
    RETRIEVAL_FAILED: Final[str] = "unable to retrieve order information"


DEFAULT_DESCRIPTION_TEMPLATE: Final[str] = "Order #{basket_id}"
DEFAULT_REQUEST_TIMEOUT_SECONDS: Final[float] = 30.0
