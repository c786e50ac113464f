"""PSP connector implementations."""
from sardis_multisafepay.connectors.base import PaymentServiceProviderService
from sardis_multisafepay.connectors.multisafepay import MultiSafepayService

__all__ = [
    "PaymentServiceProviderService",
    "MultiSafepayService",
]
