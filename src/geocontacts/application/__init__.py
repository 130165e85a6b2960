"""Application layer: use cases, ports, and DTOs. Depends only on domain."""

from geocontacts.application.contact_form import ContactForm, FormDraft
from geocontacts.application.debounce import LookupController, LookupKind, LookupOutcome
from geocontacts.application.dto import (
    ContactPage,
    DeleteFailed,
    DeleteSucceeded,
    Marker,
    MarkerIcon,
    MenuClosed,
    MenuEntry,
    MenuOpen,
    MenuState,
    RegistrationFailed,
    RegistrationSucceeded,
    SaveFailed,
    SaveSucceeded,
    UniqueKind,
)
from geocontacts.application.errors import (
    Conflict,
    GeoContactsError,
    NotFound,
    Unavailable,
    ValidationError,
)
from geocontacts.application.grouping import group_by_location, render_markers
from geocontacts.application.lookup_gateway import LookupGateway
from geocontacts.application.page import ContactsPage
from geocontacts.application.ports import (
    AccountStore,
    AddressLookup,
    AuthSession,
    ContactStore,
    MapSurface,
)
from geocontacts.application.registration import RegistrationForm
from geocontacts.application.selection import SelectionSynchronizer

__all__ = [
    "AccountStore",
    "AddressLookup",
    "AuthSession",
    "Conflict",
    "ContactForm",
    "ContactPage",
    "ContactStore",
    "ContactsPage",
    "DeleteFailed",
    "DeleteSucceeded",
    "FormDraft",
    "GeoContactsError",
    "LookupController",
    "LookupGateway",
    "LookupKind",
    "LookupOutcome",
    "MapSurface",
    "Marker",
    "MarkerIcon",
    "MenuClosed",
    "MenuEntry",
    "MenuOpen",
    "MenuState",
    "NotFound",
    "RegistrationFailed",
    "RegistrationForm",
    "RegistrationSucceeded",
    "SaveFailed",
    "SaveSucceeded",
    "SelectionSynchronizer",
    "UniqueKind",
    "Unavailable",
    "ValidationError",
    "group_by_location",
    "render_markers",
]
