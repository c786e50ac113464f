"""MultiSafepay adapter data models."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from sardis_multisafepay.logging import mask_value


class Environment(str, Enum):
    """Deployment environment of the running process."""
    DEVELOPMENT = "development"
    TEST = "test"
    ACCEPTANCE = "acceptance"
    LIVE = "live"

    @property
    def uses_production_endpoint(self) -> bool:
        return self in (Environment.LIVE, Environment.ACCEPTANCE)

    @property
    def uses_test_credentials(self) -> bool:
        return self in (Environment.DEVELOPMENT, Environment.TEST)


class PSPType(str, Enum):
    """Payment Service Provider types."""
    MULTISAFEPAY = "multisafepay"
    STRIPE = "stripe"
    PAYPAL = "paypal"
    UNKNOWN = "unknown"


class PriceType(str, Enum):
    """Price variants the pricing collaborator can compute."""
    PSP_PRICE_IN_VAT = "psp_price_in_vat"


class PaymentRequestAction(str, Enum):
    """What the checkout should do with a payment outcome."""
    REDIRECT = "redirect"


class AuditDirection(str, Enum):
    """Direction of a logged PSP exchange, seen from this service."""
    INCOMING = "in"
    OUTGOING = "out"


@dataclass
class BasketItem:
    """A basket main, basket line or buyer record with its detail values."""
    id: int
    entity_type: str = ""
    details: Dict[str, str] = field(default_factory=dict)

    def get_detail_value(self, key: str) -> str:
        value = self.details.get(key)
        return "" if value is None else str(value)


@dataclass
class BasketGroup:
    """A basket main item and its lines, priced together."""
    main: BasketItem
    lines: List[BasketItem] = field(default_factory=list)


@dataclass(frozen=True)
class MultiSafepayProviderSettings:
    """Settings only the MultiSafepay adapter reads."""
    api_key: Optional[str] = None

    def __repr__(self) -> str:
        key = mask_value(self.api_key) if self.api_key else None
        return f"MultiSafepayProviderSettings(api_key={key!r})"


@dataclass(frozen=True)
class PaymentServiceProviderSettings:
    """Configuration of a payment service provider record.

    ``provider`` tags which variant field is populated; each adapter only
    reads its own.
    """
    id: int
    title: str = ""
    provider: PSPType = PSPType.UNKNOWN
    log_all_requests: bool = False
    orders_can_be_set_directly_to_finished: bool = False
    skip_payment_when_order_amount_equals_zero: bool = False
    webhook_url: str = ""
    success_url: str = ""
    fail_url: str = ""
    currency: str = "EUR"
    multisafepay: Optional[MultiSafepayProviderSettings] = None


@dataclass(frozen=True)
class PaymentMethodSettings:
    """A payment method offered in checkout and the PSP that handles it."""
    id: int
    provider_settings: PaymentServiceProviderSettings
    title: str = ""
    # Gateway identifier at the PSP, e.g. "IDEAL" or "VISA".
    external_name: str = ""


@dataclass(frozen=True)
class PspCredentials:
    """Live and test API keys of one provider record."""
    api_key_live: Optional[str] = None
    api_key_test: Optional[str] = None

    def select(self, environment: Environment) -> Optional[str]:
        if environment.uses_test_credentials:
            return self.api_key_test
        return self.api_key_live

    def __repr__(self) -> str:
        live = mask_value(self.api_key_live) if self.api_key_live else None
        test = mask_value(self.api_key_test) if self.api_key_test else None
        return f"PspCredentials(api_key_live={live!r}, api_key_test={test!r})"


@dataclass(frozen=True)
class PaymentOrder:
    """Outbound order sent to MultiSafepay."""
    order_id: str
    gateway_id: str
    amount_in_minor_units: int
    currency_code: str
    description: str
    webhook_url: str
    success_url: str
    fail_url: str
    order_type: str = "redirect"
    locale: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        """Build the JSON body of a MultiSafepay ``POST /orders`` request."""
        payload: Dict[str, Any] = {
            "type": self.order_type,
            "order_id": self.order_id,
            "gateway": self.gateway_id,
            "amount": self.amount_in_minor_units,
            "currency": self.currency_code,
            "description": self.description,
            "payment_options": {
                "notification_url": self.webhook_url,
                "redirect_url": self.success_url,
                "cancel_url": self.fail_url,
            },
        }
        if self.locale:
            payload["customer"] = {"locale": self.locale}
        return payload


@dataclass(frozen=True)
class RemoteOrderResponse:
    """Order data returned by MultiSafepay."""
    order_id: str
    status: str = ""
    payment_url: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "RemoteOrderResponse":
        return cls(
            order_id=str(data.get("order_id", "")),
            status=str(data.get("status") or ""),
            payment_url=data.get("payment_url"),
            raw=dict(data),
        )


@dataclass(frozen=True)
class GatewayResult:
    """Outcome of one remote call: either a response or a failure detail."""
    response: Optional[RemoteOrderResponse] = None
    error: Optional[str] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.response is not None and self.error is None

    @classmethod
    def success(cls, response: RemoteOrderResponse) -> "GatewayResult":
        return cls(response=response)

    @classmethod
    def failure(cls, error: str, message: Optional[str] = None) -> "GatewayResult":
        return cls(error=error, message=message or error)


@dataclass(frozen=True)
class PaymentOutcome:
    """Result of initiating a payment, as shown to the checkout."""
    successful: bool
    redirect_url: str
    error_message: Optional[str] = None
    action: PaymentRequestAction = PaymentRequestAction.REDIRECT


@dataclass(frozen=True)
class ReconciliationOutcome:
    """Result of a status inquiry."""
    status_label: str
    settled: bool


@dataclass
class AuditLogEntry:
    """One logged exchange with the PSP."""
    psp_name: str
    correlation_id: str
    direction: AuditDirection
    request_body: Optional[str] = None
    response_body: Optional[str] = None
    error: Optional[str] = None
    status_code: Optional[int] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class InboundRequest:
    """Parameters of the current inbound webhook request."""
    query: Mapping[str, str] = field(default_factory=dict)
    form: Mapping[str, str] = field(default_factory=dict)
