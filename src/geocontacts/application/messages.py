"""Load and validate the YAML message catalog."""

import os
from pathlib import Path

import yaml

REQUIRED_SECTIONS = ("fields", "national_id", "email", "password", "form", "page", "lookup")


def get_messages_path() -> Path:
    """Return MESSAGES_PATH if set, else the bundled flows/messages.yaml."""
    default = Path(__file__).resolve().parent.parent / "flows" / "messages.yaml"
    path = os.environ.get("MESSAGES_PATH", "").strip()
    if path:
        return Path(path).resolve()
    return default


def load_messages(path: Path | None = None) -> dict:
    if path is None:
        path = get_messages_path()
    raw = path.read_text(encoding="utf-8")
    catalog = yaml.safe_load(raw)
    if not isinstance(catalog, dict):
        raise ValueError("Messages YAML must be a dict")
    for section in REQUIRED_SECTIONS:
        if not isinstance(catalog.get(section), dict):
            raise ValueError(f"Messages must have a '{section}' section")
    return catalog


def message(catalog: dict, key: str, **template_vars) -> str:
    """Return catalog["section"]["key"] with {var} placeholders filled.

    Unknown keys return the key itself so a missing entry is visible, not fatal.
    """
    section, _, name = key.partition(".")
    text = (catalog.get(section) or {}).get(name)
    if text is None:
        return key
    for k, v in template_vars.items():
        text = text.replace("{" + k + "}", str(v) if v is not None else "")
    return text


# Module-level cache for the loaded catalog
_messages_cache: dict | None = None


def get_messages(cache: bool = True) -> dict:
    """Load the catalog (cached by default). Pass cache=False to reload."""
    global _messages_cache
    if cache and _messages_cache is not None:
        return _messages_cache
    _messages_cache = load_messages()
    return _messages_cache
