"""
Geocontacts core: clean-architecture layout.

- domain: entities (Contact, LocationGroup), national ID and phone helpers.
- application: use cases (ContactsPage, ContactForm, RegistrationForm),
  the lookup controller, grouping, selection, ports and DTOs.
- infrastructure: adapters (HTTP via httpx, in-memory store, map surface).
"""

from geocontacts.application import (
    ContactForm,
    ContactsPage,
    LookupController,
    LookupGateway,
    LookupKind,
    RegistrationForm,
    SelectionSynchronizer,
    group_by_location,
)
from geocontacts.domain import Contact, LocationGroup
from geocontacts.infrastructure import (
    HttpAddressLookup,
    HttpContactStore,
    InMemoryAddressLookup,
    InMemoryContactStore,
    InMemoryMapSurface,
)

__all__ = [
    "Contact",
    "ContactForm",
    "ContactsPage",
    "HttpAddressLookup",
    "HttpContactStore",
    "InMemoryAddressLookup",
    "InMemoryContactStore",
    "InMemoryMapSurface",
    "LocationGroup",
    "LookupController",
    "LookupGateway",
    "LookupKind",
    "RegistrationForm",
    "SelectionSynchronizer",
    "group_by_location",
]
