"""
Sardis MultiSafepay adapter - redirect payments and status reconciliation.

This package turns checkout baskets into MultiSafepay redirect orders and
reconciles their outcome when MultiSafepay calls the notification url.

Features:
- Environment-driven credential and endpoint selection
- Per-basket API key, currency, description and locale overrides
- Audit entry for every exchange with the PSP, on every code path
- Webhook reconciliation that never raises back to the caller
"""

from sardis_multisafepay.models import (
    AuditDirection,
    AuditLogEntry,
    BasketGroup,
    BasketItem,
    Environment,
    GatewayResult,
    InboundRequest,
    MultiSafepayProviderSettings,
    PaymentMethodSettings,
    PaymentOrder,
    PaymentOutcome,
    PaymentRequestAction,
    PaymentServiceProviderSettings,
    PriceType,
    PspCredentials,
    PSPType,
    ReconciliationOutcome,
    RemoteOrderResponse,
)
from sardis_multisafepay.config import MultiSafepayConfig, load_config
from sardis_multisafepay.exceptions import (
    ConfigurationError,
    InvalidArgument,
    InvariantViolation,
    MultiSafepayError,
    PreconditionUnavailable,
    RemoteFailure,
)
from sardis_multisafepay.audit import (
    AuditLogSink,
    AuditTrail,
    CompositeAuditLogSink,
    InMemoryAuditLogSink,
    LoggingAuditLogSink,
)
from sardis_multisafepay.settings import InMemorySettingsStore, SettingsResolver, SettingsStore
from sardis_multisafepay.pricing import BasketPricer, LineDetailPricer
from sardis_multisafepay.order_builder import OrderBuilder, to_minor_units
from sardis_multisafepay.gateway import MultiSafepayClient, new_client
from sardis_multisafepay.orchestrator import PaymentRequestOrchestrator
from sardis_multisafepay.reconciliation import (
    StatusReconciliationOrchestrator,
    get_invoice_number_from_request,
)
from sardis_multisafepay.connectors import MultiSafepayService, PaymentServiceProviderService

__all__ = [
    # Models
    "AuditDirection",
    "AuditLogEntry",
    "BasketGroup",
    "BasketItem",
    "Environment",
    "GatewayResult",
    "InboundRequest",
    "MultiSafepayProviderSettings",
    "PaymentMethodSettings",
    "PaymentOrder",
    "PaymentOutcome",
    "PaymentRequestAction",
    "PaymentServiceProviderSettings",
    "PriceType",
    "PspCredentials",
    "PSPType",
    "ReconciliationOutcome",
    "RemoteOrderResponse",
    # Configuration
    "MultiSafepayConfig",
    "load_config",
    # Errors
    "MultiSafepayError",
    "InvalidArgument",
    "ConfigurationError",
    "RemoteFailure",
    "PreconditionUnavailable",
    "InvariantViolation",
    # Audit
    "AuditLogSink",
    "AuditTrail",
    "CompositeAuditLogSink",
    "InMemoryAuditLogSink",
    "LoggingAuditLogSink",
    # Settings
    "SettingsStore",
    "InMemorySettingsStore",
    "SettingsResolver",
    # Orders
    "BasketPricer",
    "LineDetailPricer",
    "OrderBuilder",
    "to_minor_units",
    # Gateway
    "MultiSafepayClient",
    "new_client",
    # Orchestration
    "PaymentRequestOrchestrator",
    "StatusReconciliationOrchestrator",
    "get_invoice_number_from_request",
    # Connectors
    "PaymentServiceProviderService",
    "MultiSafepayService",
]

__version__ = "0.1.0"
