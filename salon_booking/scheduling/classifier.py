"""Chemical-service detection.

Colour, perm and straightening treatments need processing time before the
stylist can start the next service. Services are recognised by keyword
substrings in their name, title or category.
"""

from collections.abc import Mapping
from typing import Any, Optional

CHEMICAL_KEYWORDS: tuple[str, ...] = (
    "tint",
    "colour",
    "color",
    "bleach",
    "toner",
    "gloss",
    "highlights",
    "balayage",
    "foils",
    "perm",
    "relaxer",
    "keratin",
    "chemical",
    "straightening",
)

_TEXT_FIELDS = ("name", "title", "category")


def get_field(service: Any, name: str) -> Optional[Any]:
    """Read a field from a model, a mapping or a plain object."""
    if service is None:
        return None
    if isinstance(service, Mapping):
        return service.get(name)
    return getattr(service, name, None)


def service_text(service: Any) -> str:
    """Lower-cased name, title and category joined by spaces, blanks skipped."""
    parts = [get_field(service, f) for f in _TEXT_FIELDS]
    return " ".join(str(p) for p in parts if p).lower()


def is_chemical(service: Any) -> bool:
    """True if the service needs a processing gap after it.

    Plain substring containment: "Full Head Tint" and "tinting" match,
    "foiling" does not (only "foils" is listed).
    """
    text = service_text(service)
    return any(keyword in text for keyword in CHEMICAL_KEYWORDS)
