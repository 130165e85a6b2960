"""Keep the active contact, the marker layer, the disambiguation menu and the
map camera consistent with each other."""

import logging

from geocontacts.application.dto import (
    Marker,
    MenuClosed,
    MenuEntry,
    MenuOpen,
    MenuState,
)
from geocontacts.application.errors import NotFound
from geocontacts.application.grouping import group_by_location, render_markers
from geocontacts.application.ports import MapSurface
from geocontacts.domain import COORDINATE_PRECISION, Contact, LocationGroup

logger = logging.getLogger(__name__)

CLOSE_UP_ZOOM = 15
FIT_PADDING = 50
DEFAULT_CENTER = (-25.4284, -49.2733)
DEFAULT_ZOOM = 12


class SelectionSynchronizer:
    """Owns Selection and MenuState; drives the MapSurface.

    Groups and markers are recomputed from scratch on every change.
    """

    def __init__(
        self,
        surface: MapSurface,
        *,
        close_up_zoom: int = CLOSE_UP_ZOOM,
        fit_padding: int = FIT_PADDING,
        default_center: tuple[float, float] = DEFAULT_CENTER,
        default_zoom: int = DEFAULT_ZOOM,
        precision: int = COORDINATE_PRECISION,
    ) -> None:
        self._surface = surface
        self.close_up_zoom = close_up_zoom
        self.fit_padding = fit_padding
        self.default_center = default_center
        self.default_zoom = default_zoom
        self.precision = precision
        self._contacts: list[Contact] = []
        self._by_id: dict[str, Contact] = {}
        self._selected_id: str | None = None
        self._menu: MenuState = MenuClosed()
        self._groups: list[LocationGroup] = []
        self._markers: list[Marker] = []

    @property
    def selected_id(self) -> str | None:
        return self._selected_id

    @property
    def selected(self) -> Contact | None:
        if self._selected_id is None:
            return None
        return self._by_id.get(self._selected_id)

    @property
    def menu(self) -> MenuState:
        return self._menu

    @property
    def groups(self) -> list[LocationGroup]:
        return list(self._groups)

    @property
    def markers(self) -> list[Marker]:
        return list(self._markers)

    def is_highlighted(self, contact_id: str) -> bool:
        """Whether the list row for this contact should be highlighted."""
        return contact_id is not None and contact_id == self._selected_id

    def set_contacts(
        self, contacts: list[Contact], *, reset_selection: bool = False
    ) -> None:
        """Replace the contact set. Clears a selection that is no longer present,
        or any selection with reset_selection=True, before markers are redrawn."""
        self._contacts = list(contacts)
        self._by_id = {c.id: c for c in self._contacts if c.id is not None}
        if reset_selection or self._selected_id not in self._by_id:
            self._selected_id = None
        self._menu = MenuClosed()
        self.refresh_markers()

    def refresh_markers(self) -> None:
        self._groups = group_by_location(self._contacts, self.precision)
        self._markers = render_markers(self._groups, self._by_id, self._selected_id)
        self._surface.set_markers(list(self._markers))

    def select_contact(self, contact_id: str | None) -> None:
        """Set Selection and frame the camera on it, or on everything if None."""
        if contact_id is not None and contact_id not in self._by_id:
            raise NotFound(f"Contact {contact_id} is not in the current list.")
        self._selected_id = contact_id
        self.refresh_markers()
        if contact_id is None:
            self.fit_all()
            return
        contact = self._by_id[contact_id]
        if contact.has_location:
            lat, lng = contact.position
            self._surface.pan_to(lat, lng)
            self._surface.zoom_to(self.close_up_zoom)
        else:
            logger.debug("Contact %s has no location; camera unchanged", contact_id)

    def fit_all(self) -> None:
        points = [c.position for c in self._contacts if c.has_location]
        if not points:
            self._surface.set_view(self.default_center, self.default_zoom)
            return
        self._surface.fit_bounds(points, self.fit_padding)

    def marker_group(self, key: str) -> LocationGroup:
        for group in self._groups:
            if group.key == key:
                return group
        raise NotFound(f"No marker at {key}.")

    def click_marker_group(
        self, group: LocationGroup, anchor: tuple[float, float] = (0.0, 0.0)
    ) -> MenuState:
        """Select a single member directly; open the menu for several."""
        if not group.is_cluster:
            self._menu = MenuClosed()
            self.select_contact(group.contact_ids[0])
            return self._menu
        entries = []
        for cid in group.contact_ids:
            contact = self._by_id.get(cid)
            if contact is not None:
                entries.append(
                    MenuEntry(contact_id=cid, name=contact.name, address=contact.short_address)
                )
        self._menu = MenuOpen(group=group, anchor=anchor, entries=tuple(entries))
        return self._menu

    def pick_menu_entry(self, contact_id: str) -> None:
        if not isinstance(self._menu, MenuOpen):
            raise NotFound("No disambiguation menu is open.")
        if contact_id not in self._menu.group.contact_ids:
            raise NotFound(f"Contact {contact_id} is not in this group.")
        self._menu = MenuClosed()
        self.select_contact(contact_id)

    def dismiss_menu(self) -> None:
        """Click outside the menu: close it, keep Selection."""
        self._menu = MenuClosed()

    def back_to_all(self) -> None:
        self._menu = MenuClosed()
        self.select_contact(None)

    def contact_deleted(self, contact_id: str) -> None:
        """Drop a deleted contact; clears Selection first if it was selected."""
        was_selected = contact_id == self._selected_id
        self._contacts = [c for c in self._contacts if c.id != contact_id]
        self._by_id.pop(contact_id, None)
        if isinstance(self._menu, MenuOpen) and contact_id in self._menu.group.contact_ids:
            self._menu = MenuClosed()
        if was_selected:
            self.select_contact(None)
        else:
            self.refresh_markers()
