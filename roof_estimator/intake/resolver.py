"""
Loose field lookup over webhook payloads.

Upstream workflows rename and re-nest their fields from release to release, so a
logical field (``squares``) is looked up under every alias it has ever been sent
as. Keys are compared after stripping whitespace, ``_`` and ``-`` and
lower-casing, and an alias also matches the last segment of a dotted path
(``contact.address1`` matches ``address1``).

Suffix matching is imprecise: ``address`` also matches an unrelated
``billing.address``. Aliases are ordered so the intended keys win.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Iterable, Optional

_STRIP_RE = re.compile(r"[\s_\-]+")

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "job_type": (
        "jobType",
        "customData.jobType",
        "serviceType",
        "projectType",
        "leadType",
        "job",
    ),
    "roof_type": (
        "roofType",
        "customData.roofType",
        "roofMaterial",
        "roofingMaterial",
        "currentRoofType",
        "material",
    ),
    "stories": (
        "stories",
        "customData.stories",
        "numberOfStories",
        "storyCount",
        "howManyStories",
        "story",
        "floors",
        "levels",
    ),
    "squares": (
        "squares",
        "customData.squares",
        "roofSquares",
        "numberOfSquares",
        "squareCount",
        "roofSize",
    ),
    "address": (
        "address",
        "customData.address",
        "fullAddress",
        "propertyAddress",
        "roofAddress",
        "serviceAddress",
        "fullAddressLine",
    ),
    "street": ("address1", "streetAddress", "street", "addressLine1"),
    "city": ("city",),
    "state": ("state", "province"),
    "postal_code": ("postalCode", "zip", "zipCode", "postcode"),
    "contact_id": ("contactId", "contact.id", "customData.contactId"),
    "callback_id": ("callbackId", "customData.callbackId"),
}


def normalize_key(key: str) -> str:
    return _STRIP_RE.sub("", str(key)).lower()


def flatten_paths(payload: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Map every dotted path to its leaf value. Sequences are leaves."""
    paths: dict[str, Any] = {}
    for key, value in payload.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            paths.update(flatten_paths(value, path))
        else:
            paths[path] = value
    return paths


def _is_present(value: Any) -> bool:
    if value is None or isinstance(value, Mapping):
        return False
    if isinstance(value, str) and not value.strip():
        return False
    if isinstance(value, (list, tuple)) and not value:
        return False
    return True


def _candidates(paths: dict[str, Any], alias: str) -> list[str]:
    target = normalize_key(alias)
    exact: list[str] = []
    suffix: list[str] = []
    for path in paths:
        norm = normalize_key(path)
        if norm == target:
            exact.append(path)
        elif norm.endswith("." + target):
            suffix.append(path)
    suffix.sort(key=lambda p: p.count("."))
    return exact + suffix


def resolve(
    payload: Mapping[str, Any],
    logical_name: str,
    aliases: Optional[Iterable[str]] = None,
    paths: Optional[dict[str, Any]] = None,
) -> Any:
    """
    Return the first present value for ``logical_name``, or None.

    A top-level key equal to ``logical_name`` is checked first, then each alias in
    priority order. Null and blank-string values are skipped.
    """
    if _is_present(payload.get(logical_name)):
        return payload[logical_name]

    if aliases is None:
        aliases = FIELD_ALIASES.get(logical_name, (logical_name,))
    if paths is None:
        paths = flatten_paths(payload)

    for alias in aliases:
        for path in _candidates(paths, alias):
            value = paths[path]
            if _is_present(value):
                return value
    return None


@dataclass(frozen=True)
class ResolvedFields:
    job_type: Optional[str] = None
    roof_type: Optional[str] = None
    stories: Any = None
    squares: Any = None
    address: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    contact_id: Optional[str] = None
    callback_id: Optional[str] = None


def _as_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (Mapping, list)):
        return None
    text = str(value).strip()
    return text or None


def resolve_fields(payload: Mapping[str, Any]) -> ResolvedFields:
    paths = flatten_paths(payload)

    def text(name: str) -> Optional[str]:
        return _as_text(resolve(payload, name, paths=paths))

    return ResolvedFields(
        job_type=text("job_type"),
        roof_type=text("roof_type"),
        stories=resolve(payload, "stories", paths=paths),
        squares=resolve(payload, "squares", paths=paths),
        address=text("address"),
        street=text("street"),
        city=text("city"),
        state=text("state"),
        postal_code=text("postal_code"),
        contact_id=text("contact_id"),
        callback_id=text("callback_id"),
    )
