"""Thin async wrappers around the three remote lookups. No caching."""

import logging

from geocontacts.application.dto import UniqueKind
from geocontacts.application.errors import ValidationError
from geocontacts.application.ports import AddressLookup, ContactStore
from geocontacts.domain import AddressCandidate, AddressFields
from geocontacts.domain.national_id import POSTAL_CODE_LENGTH, digits_only

logger = logging.getLogger(__name__)

MIN_STREET_QUERY = 3


def can_search_addresses(state: str, city: str, street: str) -> bool:
    """Street search needs region, city and at least 3 typed characters."""
    return bool(
        (state or "").strip()
        and (city or "").strip()
        and len((street or "").strip()) >= MIN_STREET_QUERY
    )


class LookupGateway:
    def __init__(self, contacts: ContactStore, addresses: AddressLookup) -> None:
        self._contacts = contacts
        self._addresses = addresses

    async def lookup_by_postal_code(self, code: str) -> AddressFields:
        """Resolve an 8-digit postal code. Raises NotFound / Unavailable."""
        cep = digits_only(code)
        if len(cep) != POSTAL_CODE_LENGTH:
            raise ValidationError("postal_code", f"Postal code must have {POSTAL_CODE_LENGTH} digits.")
        logger.debug("Postal code lookup %s", cep)
        return await self._addresses.by_postal_code(cep)

    async def search_addresses(
        self, state: str, city: str, street: str
    ) -> list[AddressCandidate]:
        """Street candidates in first-returned order. Short input returns [] without a call."""
        if not can_search_addresses(state, city, street):
            return []
        logger.debug("Address search %s/%s %r", state, city, street)
        return list(await self._addresses.search(state.strip(), city.strip(), street.strip()))

    async def check_unique(self, kind: UniqueKind, value: str) -> bool:
        """Advisory existence check. A False here never skips server validation."""
        logger.debug("Uniqueness check %s", kind.value)
        return bool(await self._contacts.check_unique(kind, value))
