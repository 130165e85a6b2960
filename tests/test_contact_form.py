"""Tests for ContactForm: formatting, lookups, uniqueness and submit."""

import asyncio

import pytest

from geocontacts.application.contact_form import ContactForm, FormDraft
from geocontacts.application.debounce import LookupKind
from geocontacts.application.dto import SaveFailed, SaveSucceeded, UniqueKind
from geocontacts.application.errors import Unavailable
from geocontacts.application.lookup_gateway import LookupGateway
from geocontacts.domain import AddressFields

from conftest import CPF_A, QUIET

NEW_CPF = "39053344705"


async def _settle(lookups):
    await asyncio.sleep(QUIET * 3)
    await lookups.drain()


def _fill(form, **overrides):
    values = {
        "name": "Eva",
        "national_id": NEW_CPF,
        "phone": "41988887777",
        "postal_code": "80010000",
        "street": "Rua XV de Novembro",
        "number": "12",
        "neighborhood": "Centro",
        "city": "Curitiba",
        "state": "PR",
    }
    values.update(overrides)
    for name, value in values.items():
        form.set_field(name, value)


@pytest.fixture
def form(store, gateway, lookups):
    return ContactForm(store, gateway, lookups)


def test_fields_are_formatted_while_typing(form):
    form.set_field("national_id", "52998224725")
    form.set_field("postal_code", "80010000")
    form.set_field("number", "12a")
    form.set_field("state", "pr")
    assert form.value("national_id") == "529.982.247-25"
    assert form.value("postal_code") == "80010-000"
    assert form.value("number") == "12"
    assert form.value("state") == "PR"


def test_overlong_numeric_input_is_ignored(form):
    form.set_field("national_id", "52998224725")
    form.set_field("national_id", "529982247251")
    assert form.value("national_id") == "529.982.247-25"
    form.set_field("postal_code", "800100001")
    assert form.value("postal_code") == ""


def test_unknown_field_raises(form):
    with pytest.raises(KeyError):
        form.set_field("email", "x@y.z")


@pytest.mark.asyncio
async def test_draft_strips_punctuation_on_submit_payload(form):
    _fill(form)
    contact = form.draft.to_contact()
    assert contact.national_id == NEW_CPF
    assert contact.postal_code == "80010000"
    assert contact.phone == "41988887777"


def test_edit_draft_starts_formatted(contacts, store, gateway, lookups):
    form = ContactForm(store, gateway, lookups, contact=contacts[0])
    assert form.is_edit
    assert form.value("national_id") == "529.982.247-25"
    assert form.value("postal_code") == "80010-000"
    assert FormDraft.from_contact(contacts[0]).latitude == 10.0


@pytest.mark.asyncio
async def test_repeated_digit_cpf_fails_checksum_without_server_call(form, store, lookups):
    form.set_field("national_id", "11111111111")
    started = form.blur("national_id")
    await lookups.drain()
    assert not started
    assert form.errors["national_id"] == "Invalid checksum"
    assert store.unique_checks == []


@pytest.mark.asyncio
async def test_taken_cpf_blocks_submit(form, store, lookups):
    _fill(form, national_id=CPF_A)
    assert form.blur("national_id")
    assert form.checking_national_id
    assert not form.can_submit
    await lookups.drain()

    assert store.unique_checks == [("national_id", CPF_A)]
    assert form.errors["national_id"] == "National ID already registered"
    assert not form.can_submit
    result = await form.submit()
    assert isinstance(result, SaveFailed)
    assert "national_id" in result.field_errors


@pytest.mark.asyncio
async def test_editing_cpf_clears_taken_flag(form, lookups):
    _fill(form, national_id=CPF_A)
    form.blur("national_id")
    await lookups.drain()
    form.set_field("national_id", NEW_CPF)
    assert "national_id" not in form.errors
    assert form.can_submit


@pytest.mark.asyncio
async def test_unchanged_cpf_on_edit_skips_check(contacts, store, gateway, lookups):
    form = ContactForm(store, gateway, lookups, contact=contacts[0])
    assert not form.blur("national_id")
    await lookups.drain()
    assert store.unique_checks == []


@pytest.mark.asyncio
async def test_postal_code_fills_address(form, address_lookup, lookups):
    form.set_field("postal_code", "80020000")
    assert form.blur("postal_code")
    await lookups.drain()
    assert address_lookup.postal_codes == ["80020000"]
    assert form.value("street") == "Rua Abc"
    assert form.value("neighborhood") == "Batel"
    assert form.value("city") == "Curitiba"
    assert form.value("state") == "PR"


@pytest.mark.asyncio
async def test_unknown_postal_code_leaves_fields_alone(form, lookups):
    form.set_field("street", "Rua Minha")
    form.set_field("postal_code", "99999999")
    form.blur("postal_code")
    await lookups.drain()
    assert form.value("street") == "Rua Minha"
    assert form.errors == {}
    assert form.lookup_notice is None


def test_short_postal_code_does_not_look_up(form, address_lookup):
    form.set_field("postal_code", "8001")
    assert not form.blur("postal_code")
    assert address_lookup.postal_codes == []


@pytest.mark.asyncio
async def test_postal_code_outage_sets_notice(store, address_lookup, lookups):
    class DownLookup:
        async def by_postal_code(self, code):
            raise Unavailable("timeout")

        async def search(self, state, city, street):
            return []

    form = ContactForm(store, LookupGateway(store, DownLookup()), lookups)
    form.set_field("postal_code", "80010000")
    form.blur("postal_code")
    await lookups.drain()
    assert form.lookup_notice == "Address lookup is unavailable right now"


@pytest.mark.asyncio
async def test_street_suggestions_are_debounced(form, address_lookup, lookups):
    form.set_field("state", "PR")
    form.set_field("city", "Curitiba")
    for text in ("Rua A", "Rua Ab", "Rua Abc"):
        form.set_field("street", text)
    assert form.street_search_enabled
    await _settle(lookups)

    assert address_lookup.searches == [("PR", "Curitiba", "Rua Abc")]
    assert [s.street for s in form.suggestions] == ["Rua Abc"]


@pytest.mark.asyncio
async def test_street_search_needs_state_and_city(form, address_lookup, lookups):
    form.set_field("street", "Rua Abc")
    assert not form.street_search_enabled
    await _settle(lookups)
    assert address_lookup.searches == []


@pytest.mark.asyncio
async def test_pick_suggestion_fills_street_and_postal_code(form, lookups):
    form.set_field("state", "PR")
    form.set_field("city", "Curitiba")
    form.set_field("street", "Rua Ab")
    await _settle(lookups)
    picked = form.pick_suggestion(0)
    assert picked.postal_code == "80020000"
    assert form.value("street") == "Rua Abc"
    assert form.value("postal_code") == "80020-000"
    assert form.value("neighborhood") == "Batel"
    assert form.suggestions == []


@pytest.mark.asyncio
async def test_missing_fields_block_submit(form, store, lookups):
    form.set_field("name", "Eva")
    result = await form.submit()
    assert isinstance(result, SaveFailed)
    assert result.field_errors["street"] == "Street is required"
    assert "complement" not in result.field_errors
    page = await store.list(None, 0, 50, "name,asc")
    assert "Eva" not in [c.name for c in page.items]


@pytest.mark.asyncio
async def test_invalid_phone_and_state(form, lookups):
    _fill(form, phone="123", state="XX")
    assert not form.validate()
    assert form.errors["phone"] == "Phone number is invalid"
    assert form.errors["state"] == "Unknown state code"


@pytest.mark.asyncio
async def test_submit_creates_contact(form, store, lookups):
    _fill(form)
    result = await form.submit()
    assert isinstance(result, SaveSucceeded)
    assert result.contact.id is not None
    assert result.contact.national_id == NEW_CPF
    assert await store.check_unique(UniqueKind.NATIONAL_ID, NEW_CPF)


@pytest.mark.asyncio
async def test_submit_updates_contact(contacts, store, gateway, lookups):
    form = ContactForm(store, gateway, lookups, contact=contacts[2])
    form.set_field("name", "Carla Souza")
    result = await form.submit()
    assert isinstance(result, SaveSucceeded)
    assert result.contact.id == "c"
    assert result.contact.name == "Carla Souza"
    assert result.contact.latitude == -25.4284


@pytest.mark.asyncio
async def test_server_conflict_keeps_form_open(store, gateway, lookups):
    form = ContactForm(store, gateway, lookups)
    _fill(form, national_id=CPF_A)
    result = await form.submit()
    assert isinstance(result, SaveFailed)
    assert form.form_error == "National ID already registered"
    assert not form.saving
    assert form.value("name") == "Eva"


@pytest.mark.asyncio
async def test_close_cancels_pending_lookups(form, address_lookup, lookups):
    form.set_field("state", "PR")
    form.set_field("city", "Curitiba")
    form.set_field("street", "Rua Abc")
    form.close()
    await _settle(lookups)
    assert address_lookup.searches == []


@pytest.mark.asyncio
async def test_editing_postal_code_drops_pending_lookup(store, lookups):
    release = asyncio.Event()

    class SlowLookup:
        async def by_postal_code(self, code):
            await release.wait()
            return AddressFields(
                postal_code=code, street="Rua Velha", neighborhood="Antigo", city="Curitiba", state="PR"
            )

        async def search(self, state, city, street):
            return []

    form = ContactForm(store, LookupGateway(store, SlowLookup()), lookups)
    form.set_field("street", "Rua Minha")
    form.set_field("postal_code", "80010000")
    assert form.blur("postal_code")
    form.set_field("postal_code", "8002")
    release.set()
    await lookups.drain()

    assert form.value("street") == "Rua Minha"
    assert form.value("neighborhood") == ""
    assert not lookups.is_busy(LookupKind.POSTAL_CODE)


@pytest.mark.asyncio
async def test_negative_suggestion_index_is_rejected(form, lookups):
    form.set_field("state", "PR")
    form.set_field("city", "Curitiba")
    form.set_field("street", "Rua Ab")
    await _settle(lookups)
    assert form.suggestions
    with pytest.raises(IndexError):
        form.pick_suggestion(-1)
    assert form.value("street") == "Rua Ab"
