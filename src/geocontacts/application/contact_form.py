"""Contact create/edit form: field rules, address lookups, uniqueness check,
and submission."""

import logging
from dataclasses import dataclass, field

from geocontacts.application.debounce import LookupController, LookupKind
from geocontacts.application.dto import SaveFailed, SaveSucceeded, UniqueKind
from geocontacts.application.errors import GeoContactsError, NotFound, Unavailable
from geocontacts.application.lookup_gateway import LookupGateway, can_search_addresses
from geocontacts.application.messages import get_messages, message
from geocontacts.application.ports import ContactStore
from geocontacts.domain import REGION_CODES, AddressCandidate, AddressFields, Contact
from geocontacts.domain.national_id import (
    CPF_LENGTH,
    POSTAL_CODE_LENGTH,
    digits_only,
    format_cpf,
    format_postal_code,
    is_valid_cpf,
)
from geocontacts.domain.phone import MAX_PHONE_DIGITS, format_phone, normalize_phone

logger = logging.getLogger(__name__)

FIELDS = (
    "name",
    "national_id",
    "phone",
    "postal_code",
    "street",
    "number",
    "complement",
    "neighborhood",
    "city",
    "state",
)
OPTIONAL_FIELDS = frozenset({"complement"})
REQUIRED_FIELDS = tuple(f for f in FIELDS if f not in OPTIONAL_FIELDS)

# Lookups owned by this form; cancelled when it closes.
FORM_LOOKUPS = (
    LookupKind.ADDRESS_SEARCH,
    LookupKind.POSTAL_CODE,
    LookupKind.NATIONAL_ID_UNIQUE,
)


@dataclass
class FormDraft:
    """Working copy of a contact plus field errors. Never persisted partially."""

    contact_id: str | None = None
    values: dict[str, str] = field(default_factory=lambda: {f: "" for f in FIELDS})
    latitude: float | None = None
    longitude: float | None = None
    errors: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_contact(cls, contact: Contact) -> "FormDraft":
        values = {f: str(getattr(contact, f) or "") for f in FIELDS}
        values["national_id"] = format_cpf(contact.national_id)
        values["phone"] = format_phone(contact.phone)
        values["postal_code"] = format_postal_code(contact.postal_code)
        return cls(
            contact_id=contact.id,
            values=values,
            latitude=contact.latitude,
            longitude=contact.longitude,
        )

    def to_contact(self) -> Contact:
        """Build the payload to submit, with punctuation stripped from
        national ID, postal code and phone."""
        v = {f: (self.values.get(f) or "").strip() for f in FIELDS}
        return Contact(
            id=self.contact_id,
            name=v["name"],
            national_id=digits_only(v["national_id"]),
            phone=digits_only(v["phone"]),
            postal_code=digits_only(v["postal_code"]),
            street=v["street"],
            number=v["number"],
            complement=v["complement"],
            neighborhood=v["neighborhood"],
            city=v["city"],
            state=v["state"].upper(),
            latitude=self.latitude,
            longitude=self.longitude,
        )


class ContactForm:
    """State machine behind the contact dialog.

    Street autocomplete is debounced; postal code and national-ID checks run
    on field exit. Results land through the LookupController, so a stale
    response never overwrites a newer one.
    """

    def __init__(
        self,
        store: ContactStore,
        gateway: LookupGateway,
        lookups: LookupController,
        *,
        contact: Contact | None = None,
        messages: dict | None = None,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._lookups = lookups
        self._messages = messages if messages is not None else get_messages()
        self.original = contact
        self.draft = FormDraft.from_contact(contact) if contact else FormDraft()
        self.suggestions: list[AddressCandidate] = []
        self.lookup_notice: str | None = None
        self.form_error: str | None = None
        self.saving = False
        self._national_id_taken = False

    @property
    def is_edit(self) -> bool:
        return self.draft.contact_id is not None

    @property
    def errors(self) -> dict[str, str]:
        return dict(self.draft.errors)

    def value(self, name: str) -> str:
        return self.draft.values.get(name, "")

    @property
    def street_search_enabled(self) -> bool:
        return bool(self.value("state") and self.value("city"))

    @property
    def checking_national_id(self) -> bool:
        return self._lookups.is_busy(LookupKind.NATIONAL_ID_UNIQUE)

    # --- field edits ---

    def set_field(self, name: str, value: str) -> None:
        """Apply a keystroke-level edit. Over-long numeric input is ignored."""
        if name not in FIELDS:
            raise KeyError(name)
        formatted = self._format(name, value or "")
        if formatted is None:
            return
        self.draft.values[name] = formatted
        self.draft.errors.pop(name, None)
        if name == "national_id":
            self._national_id_taken = False
            self._lookups.cancel(LookupKind.NATIONAL_ID_UNIQUE)
        if name == "postal_code":
            self._lookups.cancel(LookupKind.POSTAL_CODE)
        if name in ("street", "state", "city"):
            self._schedule_suggestions()

    @staticmethod
    def _format(name: str, value: str) -> str | None:
        if name == "national_id":
            digits = digits_only(value)
            if len(digits) > CPF_LENGTH:
                return None
            return format_cpf(digits)
        if name == "phone":
            digits = digits_only(value)
            if len(digits) > MAX_PHONE_DIGITS:
                return None
            return format_phone(digits)
        if name == "postal_code":
            digits = digits_only(value)
            if len(digits) > POSTAL_CODE_LENGTH:
                return None
            return format_postal_code(digits)
        if name == "number":
            return digits_only(value)
        if name == "state":
            return value.strip().upper()
        return value

    # --- street autocomplete ---

    def _schedule_suggestions(self) -> None:
        state, city, street = self.value("state"), self.value("city"), self.value("street")
        if not can_search_addresses(state, city, street):
            self._lookups.cancel(LookupKind.ADDRESS_SEARCH)
            self.suggestions = []
            return
        self._lookups.schedule(
            LookupKind.ADDRESS_SEARCH,
            lambda: self._gateway.search_addresses(state, city, street),
            self._apply_suggestions,
            on_error=self._suggestions_failed,
        )

    def _apply_suggestions(self, candidates: list[AddressCandidate]) -> None:
        self.suggestions = list(candidates)

    def _suggestions_failed(self, exc: Exception) -> None:
        logger.warning("Street suggestions failed: %s", exc)
        self.suggestions = []

    def pick_suggestion(self, index: int) -> AddressCandidate:
        """Fill street, postal code and neighborhood from a suggestion."""
        if index < 0:
            raise IndexError(f"No suggestion at {index}.")
        candidate = self.suggestions[index]
        self._lookups.cancel(LookupKind.ADDRESS_SEARCH)
        self.draft.values["street"] = candidate.street
        self.draft.values["postal_code"] = format_postal_code(candidate.postal_code)
        if candidate.neighborhood:
            self.draft.values["neighborhood"] = candidate.neighborhood
        for name in ("street", "postal_code", "neighborhood"):
            if self.draft.values[name]:
                self.draft.errors.pop(name, None)
        self.suggestions = []
        return candidate

    # --- field exits ---

    def blur(self, name: str) -> bool:
        """Field-exit hook. Returns True if a lookup was started."""
        if name == "postal_code":
            return self.blur_postal_code()
        if name == "national_id":
            return self.blur_national_id()
        return False

    def blur_postal_code(self) -> bool:
        cep = digits_only(self.value("postal_code"))
        if len(cep) != POSTAL_CODE_LENGTH:
            return False
        self.lookup_notice = None
        self._lookups.schedule(
            LookupKind.POSTAL_CODE,
            lambda: self._gateway.lookup_by_postal_code(cep),
            self._apply_postal_code,
            on_error=self._postal_code_failed,
            debounce=False,
        )
        return True

    def _apply_postal_code(self, address: AddressFields) -> None:
        for name in ("street", "neighborhood", "city", "state"):
            found = (getattr(address, name) or "").strip()
            if found:
                self.draft.values[name] = found.upper() if name == "state" else found
                self.draft.errors.pop(name, None)

    def _postal_code_failed(self, exc: Exception) -> None:
        if isinstance(exc, NotFound):
            logger.debug("Postal code not found; keeping current address")
            return
        logger.warning("Postal code lookup failed: %s", exc)
        if isinstance(exc, Unavailable):
            self.lookup_notice = message(self._messages, "lookup.unavailable")

    def blur_national_id(self) -> bool:
        cpf = digits_only(self.value("national_id"))
        if not cpf:
            return False
        error = self._national_id_error()
        if error:
            self.draft.errors["national_id"] = error
            return False
        if self.original is not None and cpf == digits_only(self.original.national_id):
            return False
        self._lookups.schedule(
            LookupKind.NATIONAL_ID_UNIQUE,
            lambda: self._gateway.check_unique(UniqueKind.NATIONAL_ID, cpf),
            self._apply_national_id_check,
            on_error=self._national_id_check_failed,
            debounce=False,
        )
        return True

    def _apply_national_id_check(self, exists: bool) -> None:
        if exists:
            self._national_id_taken = True
            self.draft.errors["national_id"] = message(self._messages, "national_id.taken")

    def _national_id_check_failed(self, exc: Exception) -> None:
        logger.warning("National ID check failed: %s", exc)

    # --- validation and submit ---

    def _national_id_error(self) -> str | None:
        cpf = digits_only(self.value("national_id"))
        if not cpf:
            return message(self._messages, "fields.national_id")
        if len(cpf) != CPF_LENGTH:
            return message(self._messages, "national_id.length")
        if not is_valid_cpf(cpf):
            return message(self._messages, "national_id.checksum")
        return None

    def _collect_errors(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        for name in REQUIRED_FIELDS:
            if not self.value(name).strip():
                errors[name] = message(self._messages, f"fields.{name}")
        national_id_error = self._national_id_error()
        if national_id_error:
            errors["national_id"] = national_id_error
        elif self._national_id_taken:
            errors["national_id"] = message(self._messages, "national_id.taken")
        phone = self.value("phone")
        if phone and normalize_phone(digits_only(phone)) is None:
            errors["phone"] = message(self._messages, "phone.invalid")
        state = self.value("state")
        if state and state not in REGION_CODES:
            errors["state"] = message(self._messages, "state.invalid")
        return errors

    def validate(self) -> bool:
        """Run the synchronous rules and store the resulting field errors."""
        self.draft.errors = self._collect_errors()
        return not self.draft.errors

    @property
    def can_submit(self) -> bool:
        return (
            not self.saving
            and not self.checking_national_id
            and not self._collect_errors()
        )

    async def submit(self) -> SaveSucceeded | SaveFailed:
        """Create or update the contact. The form stays open on failure."""
        if self.checking_national_id or not self.validate():
            return SaveFailed(
                reason=message(self._messages, "form.fix_errors"),
                field_errors=dict(self.draft.errors),
            )
        self.saving = True
        self.form_error = None
        contact = self.draft.to_contact()
        try:
            if self.draft.contact_id:
                saved = await self._store.update(self.draft.contact_id, contact)
            else:
                saved = await self._store.create(contact)
        except GeoContactsError as exc:
            logger.warning("Saving contact failed: %s", exc)
            self.form_error = exc.message or message(self._messages, "form.save_failed")
            return SaveFailed(reason=self.form_error)
        finally:
            self.saving = False
        return SaveSucceeded(contact=saved)

    def close(self) -> None:
        for kind in FORM_LOOKUPS:
            self._lookups.cancel(kind)
        self.suggestions = []
