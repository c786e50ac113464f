"""
Provider settings resolution.

Credentials live on the payment service provider record in an external
settings store, encrypted at rest. The store decrypts them; this module only
picks the key that belongs to the running environment.
"""
from __future__ import annotations

import asyncio
import dataclasses
import logging
from abc import ABC, abstractmethod
from typing import Dict, Mapping, Optional, Sequence, Tuple

from sardis_multisafepay.constants import SettingsProperties
from sardis_multisafepay.logging import mask_value
from sardis_multisafepay.models import (
    Environment,
    MultiSafepayProviderSettings,
    PaymentServiceProviderSettings,
    PspCredentials,
    PSPType,
)

logger = logging.getLogger(__name__)


class SettingsStore(ABC):
    """Abstract key-value store holding provider record details."""

    @abstractmethod
    async def get_item_details(
        self,
        item_id: int,
        entity_type: str,
        keys: Sequence[str],
    ) -> Optional[Dict[str, Optional[str]]]:
        """
        Read decrypted detail values of one record.

        Args:
            item_id: Record id
            entity_type: Entity type the record must have
            keys: Detail keys to read

        Returns:
            Mapping of each requested key to its plaintext value (None when
            the record has no such detail), or None if no matching record
            exists
        """
        pass


class InMemorySettingsStore(SettingsStore):
    """
    In-memory settings store for development and testing.

    Values are held as plaintext; there is nothing to decrypt.
    """

    def __init__(
        self,
        records: Optional[Mapping[int, Tuple[str, Mapping[str, str]]]] = None,
    ) -> None:
        self._records: Dict[int, Tuple[str, Dict[str, str]]] = {
            item_id: (entity_type, dict(details))
            for item_id, (entity_type, details) in (records or {}).items()
        }
        self._lock = asyncio.Lock()

    async def put_item(
        self,
        item_id: int,
        entity_type: str,
        details: Mapping[str, str],
    ) -> None:
        async with self._lock:
            self._records[item_id] = (entity_type, dict(details))

    async def get_item_details(
        self,
        item_id: int,
        entity_type: str,
        keys: Sequence[str],
    ) -> Optional[Dict[str, Optional[str]]]:
        async with self._lock:
            record = self._records.get(item_id)
            if record is None or record[0] != entity_type:
                return None
            details = record[1]
            return {key: details.get(key) for key in keys}


class SettingsResolver:
    """Loads MultiSafepay credentials for a provider record."""

    def __init__(self, store: SettingsStore, environment: Environment):
        self.store = store
        self.environment = environment

    async def get_credentials(self, item_id: int) -> Optional[PspCredentials]:
        """Fetch both live and test keys, or None if the record is missing."""
        details = await self.store.get_item_details(
            item_id,
            SettingsProperties.ENTITY_TYPE,
            [SettingsProperties.API_KEY_LIVE, SettingsProperties.API_KEY_TEST],
        )
        if details is None:
            return None
        return PspCredentials(
            api_key_live=details.get(SettingsProperties.API_KEY_LIVE) or None,
            api_key_test=details.get(SettingsProperties.API_KEY_TEST) or None,
        )

    async def resolve_settings(
        self,
        provider_settings: PaymentServiceProviderSettings,
    ) -> PaymentServiceProviderSettings:
        """
        Return a copy of ``provider_settings`` carrying the active API key.

        The base settings are returned unchanged when the store has no
        matching record. A missing key is not an error here; it surfaces
        when the remote call is made.
        """
        credentials = await self.get_credentials(provider_settings.id)
        if credentials is None:
            logger.warning(
                "No payment service provider record found for id=%s; "
                "continuing without an API key",
                provider_settings.id,
            )
            return provider_settings

        api_key = credentials.select(self.environment)
        logger.debug(
            "Resolved MultiSafepay key for provider id=%s environment=%s key=%s",
            provider_settings.id,
            self.environment.value,
            mask_value(api_key) if api_key else None,
        )
        return dataclasses.replace(
            provider_settings,
            provider=PSPType.MULTISAFEPAY,
            multisafepay=MultiSafepayProviderSettings(api_key=api_key),
        )
