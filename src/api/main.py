"""
FastAPI session shell: drives one ContactsPage over HTTP for a thin map UI.
Run with uvicorn: uvicorn api.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from geocontacts.config import BACKEND_MEMORY, Settings, load_env

load_env()

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel

from geocontacts.application import (
    ContactsPage,
    DeleteFailed,
    LookupController,
    LookupGateway,
    MenuOpen,
    SelectionSynchronizer,
)
from geocontacts.application.errors import NotFound
from geocontacts.application.page import (
    BackToAll,
    BlurField,
    ChangePage,
    ClickMarker,
    CloseForm,
    DeleteContact,
    DismissMenu,
    EditField,
    LoadContacts,
    OpenForm,
    PageCommand,
    PickMenuEntry,
    PickSuggestion,
    SearchContacts,
    SelectContact,
    SubmitForm,
)
from geocontacts.infrastructure import (
    HttpAddressLookup,
    HttpContactStore,
    InMemoryAddressLookup,
    InMemoryContactStore,
    InMemoryMapSurface,
    StaticAuthSession,
    build_client,
)

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)


def build_page(settings: Settings, surface: InMemoryMapSurface | None = None):
    """Wire a ContactsPage from settings. Returns (page, http_client or None)."""
    client = None
    if settings.backend == BACKEND_MEMORY:
        store = InMemoryContactStore()
        addresses = InMemoryAddressLookup()
    else:
        client = build_client(settings.api_base_url, StaticAuthSession(settings.api_token))
        store = HttpContactStore(client)
        addresses = HttpAddressLookup(client)
    synchronizer = SelectionSynchronizer(
        surface if surface is not None else InMemoryMapSurface(),
        close_up_zoom=settings.close_up_zoom,
        fit_padding=settings.fit_padding,
        default_center=settings.default_center,
        default_zoom=settings.default_zoom,
        precision=settings.coordinate_precision,
    )
    page = ContactsPage(
        store,
        LookupGateway(store, addresses),
        synchronizer,
        LookupController(settings.quiet_period),
        page_size=settings.page_size,
    )
    return page, client


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings.from_env()
    app.state.surface = InMemoryMapSurface()
    app.state.page, client = build_page(settings, app.state.surface)
    logger.info("Contacts session ready (backend=%s)", settings.backend)
    try:
        yield
    finally:
        await app.state.page.lookups.aclose()
        if client is not None:
            await client.aclose()


app = FastAPI(title="Geocontacts", lifespan=lifespan)


def _page(request: Request) -> ContactsPage:
    return request.app.state.page


async def _run(request: Request, command: PageCommand):
    try:
        return await _page(request).dispatch(command)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=e.message or "Not found") from e
    except IndexError as e:
        raise HTTPException(status_code=404, detail="No such suggestion") from e
    except (KeyError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


# --- views ---


class ContactView(BaseModel):
    id: str | None
    name: str
    national_id: str
    phone: str
    postal_code: str
    street: str
    number: str
    complement: str
    neighborhood: str
    city: str
    state: str
    latitude: float | None = None
    longitude: float | None = None
    highlighted: bool = False


class MarkerView(BaseModel):
    key: str
    latitude: float
    longitude: float
    tooltip: str
    count: int
    contact_ids: list[str]
    selected: bool
    color: str | None = None
    icon: str | None = None


class MenuEntryView(BaseModel):
    contact_id: str
    name: str
    address: str


class MenuView(BaseModel):
    open: bool
    anchor: tuple[float, float] | None = None
    entries: list[MenuEntryView] = []


class CameraView(BaseModel):
    center: tuple[float, float]
    zoom: int
    padding: int


class SuggestionView(BaseModel):
    street: str
    neighborhood: str
    postal_code: str


class FormView(BaseModel):
    contact_id: str | None
    values: dict[str, str]
    errors: dict[str, str]
    suggestions: list[SuggestionView]
    street_search_enabled: bool
    checking_national_id: bool
    lookup_notice: str | None = None
    form_error: str | None = None
    can_submit: bool


class PageView(BaseModel):
    contacts: list[ContactView]
    page: int
    total_pages: int
    search: str
    loading: bool
    error: str | None = None
    alert: str | None = None
    selected_id: str | None = None
    markers: list[MarkerView]
    menu: MenuView
    camera: CameraView
    form: FormView | None = None


def _form_view(page: ContactsPage) -> FormView | None:
    form = page.form
    if form is None:
        return None
    return FormView(
        contact_id=form.draft.contact_id,
        values=dict(form.draft.values),
        errors=form.errors,
        suggestions=[
            SuggestionView(street=s.street, neighborhood=s.neighborhood, postal_code=s.postal_code)
            for s in form.suggestions
        ],
        street_search_enabled=form.street_search_enabled,
        checking_national_id=form.checking_national_id,
        lookup_notice=form.lookup_notice,
        form_error=form.form_error,
        can_submit=form.can_submit,
    )


def _page_view(request: Request) -> PageView:
    page = _page(request)
    sync = page.synchronizer
    surface: InMemoryMapSurface = request.app.state.surface
    menu = page.menu
    if isinstance(menu, MenuOpen):
        menu_view = MenuView(
            open=True,
            anchor=menu.anchor,
            entries=[
                MenuEntryView(contact_id=e.contact_id, name=e.name, address=e.address)
                for e in menu.entries
            ],
        )
    else:
        menu_view = MenuView(open=False)
    return PageView(
        contacts=[
            ContactView(
                id=c.id,
                name=c.name,
                national_id=c.national_id,
                phone=c.phone,
                postal_code=c.postal_code,
                street=c.street,
                number=c.number,
                complement=c.complement,
                neighborhood=c.neighborhood,
                city=c.city,
                state=c.state,
                latitude=c.latitude,
                longitude=c.longitude,
                highlighted=sync.is_highlighted(c.id),
            )
            for c in page.contacts
        ],
        page=page.page,
        total_pages=page.total_pages,
        search=page.search,
        loading=page.loading,
        error=page.error,
        alert=page.alert,
        selected_id=page.selected_id,
        markers=[
            MarkerView(
                key=m.key,
                latitude=m.latitude,
                longitude=m.longitude,
                tooltip=m.tooltip,
                count=m.group.size,
                contact_ids=list(m.group.contact_ids),
                selected=m.selected,
                color=m.icon.color if m.icon else None,
                icon=m.icon.svg if m.icon else None,
            )
            for m in sync.markers
        ],
        menu=menu_view,
        camera=CameraView(center=surface.center, zoom=surface.zoom, padding=surface.padding),
        form=_form_view(page),
    )


# --- REST: health and state ---


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/state", response_model=PageView)
def get_state(request: Request):
    return _page_view(request)


# --- REST: list ---


class SearchBody(BaseModel):
    text: str = ""


class PageBody(BaseModel):
    page: int


@app.post("/contacts/reload", response_model=PageView)
async def reload_contacts(request: Request):
    await _run(request, LoadContacts())
    return _page_view(request)


@app.post("/contacts/search", response_model=PageView)
async def search_contacts(body: SearchBody, request: Request):
    await _run(request, SearchContacts(text=body.text))
    return _page_view(request)


@app.post("/contacts/page", response_model=PageView)
async def change_page(body: PageBody, request: Request):
    await _run(request, ChangePage(page=body.page))
    return _page_view(request)


@app.delete("/contacts/{contact_id}", response_model=PageView)
async def delete_contact(contact_id: str, request: Request):
    result = await _run(request, DeleteContact(contact_id=contact_id))
    if isinstance(result, DeleteFailed):
        raise HTTPException(status_code=502, detail=result.reason)
    return _page_view(request)


# --- REST: selection and map ---


class SelectBody(BaseModel):
    contact_id: str | None = None


class ClickBody(BaseModel):
    x: float = 0.0
    y: float = 0.0


class PickBody(BaseModel):
    contact_id: str


@app.post("/selection", response_model=PageView)
async def select_contact(body: SelectBody, request: Request):
    await _run(request, SelectContact(contact_id=body.contact_id))
    return _page_view(request)


@app.post("/selection/clear", response_model=PageView)
async def back_to_all(request: Request):
    await _run(request, BackToAll())
    return _page_view(request)


@app.post("/markers/{key}/click", response_model=PageView)
async def click_marker(key: str, body: ClickBody, request: Request):
    await _run(request, ClickMarker(key=key, anchor=(body.x, body.y)))
    return _page_view(request)


@app.post("/menu/pick", response_model=PageView)
async def pick_menu_entry(body: PickBody, request: Request):
    await _run(request, PickMenuEntry(contact_id=body.contact_id))
    return _page_view(request)


@app.post("/menu/dismiss", response_model=PageView)
async def dismiss_menu(request: Request):
    await _run(request, DismissMenu())
    return _page_view(request)


# --- REST: contact form ---


class OpenFormBody(BaseModel):
    contact_id: str | None = None


class FieldBody(BaseModel):
    field: str
    value: str = ""


@app.post("/form", response_model=PageView)
async def open_form(body: OpenFormBody, request: Request):
    await _run(request, OpenForm(contact_id=body.contact_id))
    return _page_view(request)


@app.patch("/form/fields", response_model=PageView)
async def edit_field(body: FieldBody, request: Request):
    await _run(request, EditField(field=body.field, value=body.value))
    return _page_view(request)


@app.post("/form/blur/{field}", response_model=PageView)
async def blur_field(field: str, request: Request):
    await _run(request, BlurField(field=field))
    return _page_view(request)


@app.post("/form/suggestions/{index}", response_model=PageView)
async def pick_suggestion(index: int, request: Request):
    await _run(request, PickSuggestion(index=index))
    return _page_view(request)


@app.post("/form/submit", response_model=PageView)
async def submit_form(request: Request):
    await _run(request, SubmitForm())
    return _page_view(request)


@app.delete("/form", response_model=PageView)
async def close_form(request: Request):
    await _run(request, CloseForm())
    return _page_view(request)
