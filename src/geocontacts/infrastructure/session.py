"""AuthSession implementations. The credential lifecycle lives elsewhere."""


class StaticAuthSession:
    """Returns a fixed token (e.g. CONTACTS_API_TOKEN); None means anonymous."""

    def __init__(self, token: str | None = None) -> None:
        self._token = (token or "").strip() or None

    def bearer_token(self) -> str | None:
        return self._token
