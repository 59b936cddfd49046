"""Product normalizer for heterogeneous catalog records.

Catalog responses do not agree on field names: an id may arrive as
``id``, ``productId`` or ``_id``, an image as ``image`` or nested under
``images.small``. ``FIELD_RULES`` lists, per canonical field, the
accessor paths to probe in order; ``normalize_product`` takes the first
present value. Paths are tuples of mapping keys or sequence indexes.

"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

Path = tuple[str | int, ...]

FIELD_RULES: dict[str, tuple[Path, ...]] = {
    "id": (("id",), ("productId",), ("_id",), ("uuid",), ("code",)),
    "name": (("name",), ("title",), ("productName",)),
    "series": (
        ("series",),
        ("set",),
        ("collection",),
        ("expansion",),
        ("episode", "name"),
        ("episode", "slug"),
    ),
    "image": (
        ("image",),
        ("imageUrl",),
        ("thumbnail",),
        ("images", "small"),
        ("images", "thumb"),
        ("images", 0),
    ),
    "cmLink": (("links", "cardmarket"),),
}

FIELD_DEFAULTS: dict[str, Any] = {
    "id": None,
    "name": "Unknown Product",
    "series": "",
    "image": None,
    "cmLink": None,
}

# Keys that may hold the product list in a search response
_LIST_KEYS = ("results", "data", "list", "items", "products", "cards")

# Keys that may wrap a single product in a detail response
_DETAIL_KEYS = ("data", "product")


@dataclass(frozen=True)
class NormalizedProduct:
    """Canonical view of a catalog record."""

    id: Any
    name: str
    series: str
    image: str | None
    cm_link: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "series": self.series,
            "image": self.image,
            "cmLink": self.cm_link,
        }


def resolve_path(record: Any, path: Path) -> Any:
    """Walk ``path`` into ``record``; None when any step is missing.

    String steps index mappings, integer steps index lists and tuples.
    An integer step on a mapping also matches its string form, so
    ``("images", 0)`` finds ``{"images": {"0": url}}``.
    """
    current = record
    for step in path:
        if isinstance(step, int):
            if isinstance(current, Sequence) and not isinstance(current, str):
                current = current[step] if -len(current) <= step < len(current) else None
            elif isinstance(current, Mapping):
                current = current.get(step, current.get(str(step)))
            else:
                return None
        elif isinstance(current, Mapping):
            current = current.get(step)
        else:
            return None
        if current is None:
            return None
    return current


def first_present(record: Any, paths: Sequence[Path], default: Any = None) -> Any:
    """Return the first truthy value found along ``paths``, else ``default``."""
    for path in paths:
        value = resolve_path(record, path)
        if value:
            return value
    return default


def normalize_product(record: Any) -> NormalizedProduct:
    """Map an arbitrary catalog record to a ``NormalizedProduct``.

    Never raises: a non-mapping or empty record yields the defaults.
    """
    values = {
        name: first_present(record, paths, FIELD_DEFAULTS[name])
        for name, paths in FIELD_RULES.items()
    }
    return NormalizedProduct(
        id=values["id"],
        name=values["name"],
        series=values["series"],
        image=values["image"],
        cm_link=values["cmLink"],
    )


def cardmarket_prices(record: Any) -> Mapping[str, Any] | None:
    """Return the Cardmarket price block of a record, if any."""
    block = resolve_path(record, ("prices", "cardmarket"))
    return block if isinstance(block, Mapping) and block else None


def extract_array(payload: Any) -> list[Any]:
    """Pull the product list out of a search response of unknown shape."""
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, Mapping):
        return []
    for key in _LIST_KEYS:
        if isinstance(payload.get(key), list):
            return list(payload[key])
    nested = resolve_path(payload, ("results", "data"))
    if isinstance(nested, list):
        return nested
    for value in payload.values():
        if isinstance(value, list):
            return value
    return []


def unwrap_detail(payload: Any) -> Any:
    """Return the product record inside a detail response.

    A list yields its first element; a mapping wrapping the product
    under ``data`` or ``product`` yields the wrapped record.
    """
    if isinstance(payload, list):
        payload = payload[0] if payload else None
    elif isinstance(payload, Mapping):
        for key in _DETAIL_KEYS:
            if payload.get(key):
                payload = payload[key]
                break
    return payload or None
