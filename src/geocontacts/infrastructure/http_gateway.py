"""HTTP adapters for the remote contact service and address lookup (httpx).

The remote API speaks Portuguese field names (nome, cpf, cep, ...); they are
mapped to Contact attributes here and nowhere else.
"""

import logging
from collections.abc import Generator

import httpx

from geocontacts.application.dto import ContactPage, UniqueKind
from geocontacts.application.errors import Conflict, NotFound, Unavailable
from geocontacts.application.ports import AuthSession
from geocontacts.domain import AddressCandidate, AddressFields, Contact
from geocontacts.domain.national_id import digits_only

logger = logging.getLogger(__name__)

# Remote field name -> Contact attribute
_CONTACT_FIELDS = {
    "id": "id",
    "nome": "name",
    "cpf": "national_id",
    "telefone": "phone",
    "cep": "postal_code",
    "logradouro": "street",
    "numero": "number",
    "complemento": "complement",
    "bairro": "neighborhood",
    "cidade": "city",
    "estado": "state",
    "latitude": "latitude",
    "longitude": "longitude",
}

# Contact attribute -> remote field name, for sort keys
_REMOTE_FIELDS = {attr: remote for remote, attr in _CONTACT_FIELDS.items()}

_UNIQUE_ENDPOINTS = {
    UniqueKind.NATIONAL_ID: ("/contatos/verificar-cpf", "cpf"),
    UniqueKind.EMAIL: ("/auth/verificar-email", "email"),
}


class BearerAuth(httpx.Auth):
    """Attach the session's bearer token to every request, if there is one."""

    def __init__(self, session: AuthSession) -> None:
        self._session = session

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        token = self._session.bearer_token()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        yield request


def contact_from_json(data: dict) -> Contact:
    kwargs = {}
    for remote, attr in _CONTACT_FIELDS.items():
        value = data.get(remote)
        if value is None:
            continue
        if attr == "id":
            value = str(value)
        elif attr in ("latitude", "longitude"):
            value = float(value)
        else:
            value = str(value)
        kwargs[attr] = value
    return Contact(**kwargs)


def contact_to_json(contact: Contact) -> dict:
    body = {}
    for remote, attr in _CONTACT_FIELDS.items():
        if attr == "id":
            continue
        body[remote] = getattr(contact, attr)
    return body


def remote_sort(sort: str) -> str:
    """Translate "name,asc" into the remote column name, e.g. "nome,asc"."""
    field_name, sep, direction = (sort or "").partition(",")
    return _REMOTE_FIELDS.get(field_name, field_name) + sep + direction


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return ""
    if isinstance(data, dict):
        return str(data.get("message") or data.get("detail") or "")
    return ""


def _raise_for_status(response: httpx.Response) -> None:
    """Map HTTP failures onto the application error taxonomy."""
    if response.is_success:
        return
    detail = _error_message(response)
    status = response.status_code
    if status == 404:
        raise NotFound(detail)
    if status in (400, 409, 422):
        raise Conflict(detail)
    request = response.request
    logger.warning("%s %s returned %d: %s", request.method, request.url, status, detail)
    raise Unavailable("")


async def _send(client: httpx.AsyncClient, method: str, url: str, **kwargs) -> httpx.Response:
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.HTTPError as exc:
        logger.warning("%s %s failed: %s", method, url, exc)
        raise Unavailable("") from exc
    _raise_for_status(response)
    return response


class HttpContactStore:
    """ContactStore and AccountStore over the contacts REST API."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def list(
        self, search: str | None, page: int, size: int, sort: str
    ) -> ContactPage:
        params = {"page": page, "size": size, "sort": remote_sort(sort)}
        if search:
            params["search"] = search
        response = await _send(self._client, "GET", "/contatos", params=params)
        data = response.json()
        return ContactPage(
            items=[contact_from_json(item) for item in data.get("content") or []],
            total_pages=int(data.get("totalPages") or 0),
        )

    async def create(self, contact: Contact) -> Contact:
        response = await _send(self._client, "POST", "/contatos", json=contact_to_json(contact))
        return contact_from_json(response.json())

    async def update(self, contact_id: str, contact: Contact) -> Contact:
        response = await _send(
            self._client, "PUT", f"/contatos/{contact_id}", json=contact_to_json(contact)
        )
        return contact_from_json(response.json())

    async def delete(self, contact_id: str) -> None:
        await _send(self._client, "DELETE", f"/contatos/{contact_id}")

    async def check_unique(self, kind: UniqueKind, value: str) -> bool:
        path, param = _UNIQUE_ENDPOINTS[kind]
        response = await _send(self._client, "GET", path, params={param: value})
        return bool(response.json().get("exists"))

    async def register(self, name: str, email: str, password: str) -> None:
        await _send(
            self._client,
            "POST",
            "/auth/registro",
            json={"nome": name, "email": email, "senha": password},
        )


class HttpAddressLookup:
    """AddressLookup over the API's ViaCEP-backed address endpoints."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def by_postal_code(self, code: str) -> AddressFields:
        response = await _send(self._client, "GET", f"/enderecos/cep/{code}")
        data = response.json()
        if not isinstance(data, dict) or data.get("erro") or not data.get("cep"):
            raise NotFound(f"Postal code {code} not found")
        return AddressFields(
            postal_code=digits_only(data.get("cep")),
            street=data.get("logradouro") or "",
            neighborhood=data.get("bairro") or "",
            city=data.get("localidade") or "",
            state=data.get("uf") or "",
        )

    async def search(self, state: str, city: str, street: str) -> list[AddressCandidate]:
        response = await _send(
            self._client,
            "GET",
            "/enderecos/search",
            params={"uf": state, "cidade": city, "logradouro": street},
        )
        data = response.json()
        if not isinstance(data, list):
            return []
        return [
            AddressCandidate(
                street=item.get("logradouro") or "",
                neighborhood=item.get("bairro") or "",
                postal_code=item.get("cep") or "",
            )
            for item in data
            if isinstance(item, dict) and item.get("logradouro")
        ]


def build_client(base_url: str, session: AuthSession) -> httpx.AsyncClient:
    """AsyncClient with bearer auth. Timeouts are httpx defaults."""
    return httpx.AsyncClient(
        base_url=base_url,
        auth=BearerAuth(session),
        headers={"Content-Type": "application/json"},
    )
