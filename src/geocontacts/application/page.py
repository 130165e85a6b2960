"""Contacts page controller: owns the contact set, Selection and the open form.

All mutations go through named methods or `dispatch(command)`.
"""

import logging
from dataclasses import dataclass
from typing import Any

from geocontacts.application.contact_form import ContactForm
from geocontacts.application.debounce import LookupController
from geocontacts.application.dto import (
    DeleteFailed,
    DeleteSucceeded,
    MenuState,
    SaveFailed,
    SaveSucceeded,
)
from geocontacts.application.errors import GeoContactsError, NotFound
from geocontacts.application.lookup_gateway import LookupGateway
from geocontacts.application.messages import get_messages, message
from geocontacts.application.ports import ContactStore
from geocontacts.application.selection import SelectionSynchronizer
from geocontacts.domain import Contact

logger = logging.getLogger(__name__)

PAGE_SIZE = 10
SORT = "name,asc"


@dataclass(frozen=True)
class LoadContacts:
    pass


@dataclass(frozen=True)
class SearchContacts:
    text: str


@dataclass(frozen=True)
class ChangePage:
    page: int


@dataclass(frozen=True)
class SelectContact:
    contact_id: str | None


@dataclass(frozen=True)
class ClickMarker:
    key: str
    anchor: tuple[float, float] = (0.0, 0.0)


@dataclass(frozen=True)
class PickMenuEntry:
    contact_id: str


@dataclass(frozen=True)
class DismissMenu:
    pass


@dataclass(frozen=True)
class BackToAll:
    pass


@dataclass(frozen=True)
class DeleteContact:
    contact_id: str


@dataclass(frozen=True)
class OpenForm:
    contact_id: str | None = None


@dataclass(frozen=True)
class CloseForm:
    pass


@dataclass(frozen=True)
class EditField:
    field: str
    value: str


@dataclass(frozen=True)
class BlurField:
    field: str


@dataclass(frozen=True)
class PickSuggestion:
    index: int


@dataclass(frozen=True)
class SubmitForm:
    pass


PageCommand = (
    LoadContacts
    | SearchContacts
    | ChangePage
    | SelectContact
    | ClickMarker
    | PickMenuEntry
    | DismissMenu
    | BackToAll
    | DeleteContact
    | OpenForm
    | CloseForm
    | EditField
    | BlurField
    | PickSuggestion
    | SubmitForm
)


class ContactsPage:
    def __init__(
        self,
        store: ContactStore,
        gateway: LookupGateway,
        synchronizer: SelectionSynchronizer,
        lookups: LookupController,
        *,
        page_size: int = PAGE_SIZE,
        sort: str = SORT,
        messages: dict | None = None,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self.synchronizer = synchronizer
        self.lookups = lookups
        self.page_size = page_size
        self.sort = sort
        self._messages = messages if messages is not None else get_messages()
        self.contacts: list[Contact] = []
        self.total_pages = 0
        self.page = 0
        self.search = ""
        self.loading = False
        self.error: str | None = None
        self.alert: str | None = None
        self.form: ContactForm | None = None

    @property
    def selected_id(self) -> str | None:
        return self.synchronizer.selected_id

    @property
    def menu(self) -> MenuState:
        return self.synchronizer.menu

    # --- list ---

    async def load(self) -> bool:
        """Fetch the current page. On success Selection resets to none."""
        self.loading = True
        self.error = None
        try:
            result = await self._store.list(
                self.search or None, self.page, self.page_size, self.sort
            )
        except GeoContactsError as exc:
            logger.error("Loading contacts failed: %s", exc)
            self.error = message(self._messages, "page.load_failed")
            return False
        finally:
            self.loading = False
        self.contacts = list(result.items)
        self.total_pages = result.total_pages
        self.synchronizer.set_contacts(self.contacts, reset_selection=True)
        self.synchronizer.fit_all()
        return True

    async def set_search(self, text: str) -> bool:
        self.search = (text or "").strip()
        self.page = 0
        return await self.load()

    async def set_page(self, page: int) -> bool:
        if page < 0:
            raise ValueError("Page must be >= 0.")
        self.page = page
        return await self.load()

    def contact(self, contact_id: str) -> Contact:
        for c in self.contacts:
            if c.id == contact_id:
                return c
        raise NotFound(f"Contact {contact_id} is not in the current list.")

    async def delete_contact(self, contact_id: str) -> DeleteSucceeded | DeleteFailed:
        """Delete, clear Selection if it pointed at the contact, then reload."""
        self.alert = None
        try:
            await self._store.delete(contact_id)
        except GeoContactsError as exc:
            logger.error("Deleting contact %s failed: %s", contact_id, exc)
            self.alert = message(self._messages, "page.delete_failed")
            return DeleteFailed(contact_id=contact_id, reason=self.alert)
        self.synchronizer.contact_deleted(contact_id)
        self.contacts = [c for c in self.contacts if c.id != contact_id]
        await self.load()
        return DeleteSucceeded(contact_id=contact_id)

    # --- form ---

    def open_form(self, contact_id: str | None = None) -> ContactForm:
        if self.form is not None:
            self.form.close()
        contact = self.contact(contact_id) if contact_id is not None else None
        self.form = ContactForm(
            self._store,
            self._gateway,
            self.lookups,
            contact=contact,
            messages=self._messages,
        )
        return self.form

    def close_form(self) -> None:
        if self.form is not None:
            self.form.close()
        self.form = None

    def _require_form(self) -> ContactForm:
        if self.form is None:
            raise NotFound("No contact form is open.")
        return self.form

    async def submit_form(self) -> SaveSucceeded | SaveFailed:
        result = await self._require_form().submit()
        if isinstance(result, SaveSucceeded):
            self.close_form()
            await self.load()
        return result

    # --- commands ---

    async def dispatch(self, command: PageCommand) -> Any:
        """Run one command against the page and return its result."""
        sync = self.synchronizer
        if isinstance(command, LoadContacts):
            return await self.load()
        if isinstance(command, SearchContacts):
            return await self.set_search(command.text)
        if isinstance(command, ChangePage):
            return await self.set_page(command.page)
        if isinstance(command, SelectContact):
            sync.dismiss_menu()
            sync.select_contact(command.contact_id)
            return sync.selected_id
        if isinstance(command, ClickMarker):
            return sync.click_marker_group(sync.marker_group(command.key), command.anchor)
        if isinstance(command, PickMenuEntry):
            sync.pick_menu_entry(command.contact_id)
            return sync.selected_id
        if isinstance(command, DismissMenu):
            sync.dismiss_menu()
            return sync.menu
        if isinstance(command, BackToAll):
            sync.back_to_all()
            return None
        if isinstance(command, DeleteContact):
            return await self.delete_contact(command.contact_id)
        if isinstance(command, OpenForm):
            return self.open_form(command.contact_id)
        if isinstance(command, CloseForm):
            self.close_form()
            return None
        if isinstance(command, EditField):
            self._require_form().set_field(command.field, command.value)
            return self.form.draft
        if isinstance(command, BlurField):
            return self._require_form().blur(command.field)
        if isinstance(command, PickSuggestion):
            return self._require_form().pick_suggestion(command.index)
        if isinstance(command, SubmitForm):
            return await self.submit_form()
        raise ValueError(f"Unknown command: {command!r}")
