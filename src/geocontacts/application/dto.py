"""DTOs and result types for application use cases."""

from dataclasses import dataclass, field
from enum import Enum

from geocontacts.domain import Contact, LocationGroup


class UniqueKind(str, Enum):
    NATIONAL_ID = "national_id"
    EMAIL = "email"


@dataclass(frozen=True)
class ContactPage:
    """One page of the remote contact listing."""

    items: list[Contact] = field(default_factory=list)
    total_pages: int = 0


@dataclass(frozen=True)
class MarkerIcon:
    """Icon for a multi-member marker. `svg` embeds the literal badge count."""

    badge: int
    color: str
    svg: str


@dataclass(frozen=True)
class Marker:
    """What the map surface draws for one LocationGroup. icon None = plain pin."""

    key: str
    latitude: float
    longitude: float
    tooltip: str
    group: LocationGroup
    icon: MarkerIcon | None = None
    selected: bool = False


@dataclass(frozen=True)
class MenuEntry:
    contact_id: str
    name: str
    address: str


@dataclass(frozen=True)
class MenuClosed:
    pass


@dataclass(frozen=True)
class MenuOpen:
    """Disambiguation menu for a multi-member group, anchored at a screen point."""

    group: LocationGroup
    anchor: tuple[float, float]
    entries: tuple[MenuEntry, ...]


MenuState = MenuClosed | MenuOpen


@dataclass(frozen=True)
class SaveSucceeded:
    contact: Contact


@dataclass(frozen=True)
class SaveFailed:
    reason: str
    field_errors: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RegistrationSucceeded:
    email: str


@dataclass(frozen=True)
class RegistrationFailed:
    reason: str


@dataclass(frozen=True)
class DeleteSucceeded:
    contact_id: str


@dataclass(frozen=True)
class DeleteFailed:
    contact_id: str
    reason: str
