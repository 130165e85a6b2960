"""Group contacts by rounded position and turn groups into map markers."""

from collections.abc import Iterable
from urllib.parse import quote

from geocontacts.application.dto import Marker, MarkerIcon
from geocontacts.application.messages import get_messages, message
from geocontacts.domain import COORDINATE_PRECISION, Contact, LocationGroup

CLUSTER_COLOR = "#1976d2"
SELECTED_COLOR = "#d32f2f"

_CLUSTER_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="36" height="36" viewBox="0 0 36 36">'
    '<circle cx="18" cy="18" r="16" fill="{color}" stroke="#ffffff" stroke-width="2"/>'
    '<text x="18" y="23" font-family="Arial" font-size="14" font-weight="bold" '
    'fill="#ffffff" text-anchor="middle">{count}</text>'
    "</svg>"
)


def location_key(
    latitude: float, longitude: float, precision: int = COORDINATE_PRECISION
) -> tuple[float, float]:
    return round(float(latitude), precision), round(float(longitude), precision)


def group_by_location(
    contacts: Iterable[Contact], precision: int = COORDINATE_PRECISION
) -> list[LocationGroup]:
    """Partition geocoded contacts by rounded (lat, lng).

    Contacts without an id or a valid position are left out. Groups come out
    in order of first appearance, and members keep input order.
    """
    buckets: dict[tuple[float, float], list[str]] = {}
    for contact in contacts:
        if contact.id is None or not contact.has_location:
            continue
        key = location_key(contact.latitude, contact.longitude, precision)
        buckets.setdefault(key, []).append(contact.id)
    return [
        LocationGroup(latitude=lat, longitude=lng, contact_ids=tuple(ids))
        for (lat, lng), ids in buckets.items()
    ]


def cluster_icon(count: int, selected: bool) -> MarkerIcon:
    color = SELECTED_COLOR if selected else CLUSTER_COLOR
    svg = _CLUSTER_SVG.format(color=color, count=count)
    return MarkerIcon(
        badge=count,
        color=color,
        svg="data:image/svg+xml;charset=UTF-8," + quote(svg),
    )


def render_markers(
    groups: Iterable[LocationGroup],
    contacts_by_id: dict[str, Contact],
    selected_id: str | None,
) -> list[Marker]:
    """One marker per group. Single members get a plain pin named after the contact."""
    markers = []
    for group in groups:
        selected = selected_id is not None and selected_id in group.contact_ids
        if group.is_cluster:
            tooltip = message(get_messages(), "map.cluster_tooltip", count=group.size)
            icon = cluster_icon(group.size, selected)
        else:
            contact = contacts_by_id.get(group.contact_ids[0])
            tooltip = contact.name if contact else ""
            icon = None
        markers.append(
            Marker(
                key=group.key,
                latitude=group.latitude,
                longitude=group.longitude,
                tooltip=tooltip,
                group=group,
                icon=icon,
                selected=selected,
            )
        )
    return markers
