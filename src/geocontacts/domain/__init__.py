"""Domain layer: entities and pure utilities. No dependencies on outer layers."""

from geocontacts.domain.entities import (
    COORDINATE_PRECISION,
    REGION_CODES,
    AddressCandidate,
    AddressFields,
    Contact,
    LocationGroup,
    is_valid_coordinate,
)

__all__ = [
    "COORDINATE_PRECISION",
    "REGION_CODES",
    "AddressCandidate",
    "AddressFields",
    "Contact",
    "LocationGroup",
    "is_valid_coordinate",
]
