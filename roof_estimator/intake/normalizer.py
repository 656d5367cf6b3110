import math
import re
from dataclasses import dataclass
from typing import Any, Optional

from roof_estimator.errors import InvalidInputError
from roof_estimator.intake.resolver import ResolvedFields

DEFAULT_JOB_TYPE = "retail"
DEFAULT_ROOF_TYPE = "asphalt"
MIN_STORIES = 1
MAX_STORIES = 3

# Checked in order; "tile / clay / concrete" resolves to tile.
ROOF_TYPE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("metal", ("metal", "steel", "standing seam")),
    ("tile", ("tile", "concrete")),
    ("clay", ("clay", "terracotta")),
    ("asphalt", ("asphalt", "shingle", "composite")),
)

_INT_RE = re.compile(r"-?\d+")
_THOUSANDS_RE = re.compile(r"^\d{1,3}(,\d{3})+(\.\d+)?$")


@dataclass(frozen=True)
class NormalizedInputs:
    job_type: str
    stories: int
    squares: Optional[int] = None
    address: Optional[str] = None
    roof_type: Optional[str] = None
    roof_type_raw: Optional[str] = None
    contact_id: Optional[str] = None
    callback_id: Optional[str] = None

    @property
    def is_insurance(self) -> bool:
        return "insurance" in self.job_type

    @property
    def roof_type_unknown(self) -> bool:
        return bool(self.roof_type_raw) and "not sure" in self.roof_type_raw.lower()


def normalize_job_type(raw: Any) -> str:
    if raw is None:
        return DEFAULT_JOB_TYPE
    text = str(raw).strip().lower()
    return text or DEFAULT_JOB_TYPE


def normalize_stories(raw: Any) -> int:
    """Coerce ``2``, ``"2"``, ``"2 Stories"`` or ``2.0`` to a story count in [1, 3]."""
    if raw is None or isinstance(raw, bool):
        return MIN_STORIES

    value: Optional[float] = None
    if isinstance(raw, (int, float)):
        try:
            value = float(raw)
        except OverflowError:
            return MIN_STORIES
    else:
        text = str(raw).strip()
        try:
            value = float(text)
        except ValueError:
            match = _INT_RE.search(text)
            if match:
                value = float(match.group())

    if value is None or not math.isfinite(value):
        return MIN_STORIES
    return max(MIN_STORIES, min(MAX_STORIES, int(value)))


def normalize_squares(raw: Any) -> Optional[int]:
    """
    Manual square count, always rounded up.

    Absent input returns None. Anything present that is not a positive finite
    number raises InvalidInputError.
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    if isinstance(raw, bool):
        raise InvalidInputError("squares", "squares must be a positive number.")

    try:
        if isinstance(raw, (int, float)):
            value = float(raw)
        else:
            text = str(raw).strip()
            if "," in text:
                if not _THOUSANDS_RE.match(text):
                    raise ValueError(text)
                text = text.replace(",", "")
            value = float(text)
    except (TypeError, ValueError, OverflowError):
        raise InvalidInputError("squares", "squares must be a positive number.") from None

    if not math.isfinite(value) or value <= 0:
        raise InvalidInputError("squares", "squares must be a positive number.")
    return math.ceil(value)


def normalize_roof_type(raw: Any) -> str:
    if raw is None:
        return DEFAULT_ROOF_TYPE
    text = str(raw).strip().lower()
    for roof_type, keywords in ROOF_TYPE_KEYWORDS:
        if any(k in text for k in keywords):
            return roof_type
    return DEFAULT_ROOF_TYPE


def normalize_address(fields: ResolvedFields) -> Optional[str]:
    if fields.address:
        return fields.address

    # Only synthesize from parts when the street and at least two others are known.
    others = [p for p in (fields.city, fields.state, fields.postal_code) if p]
    if fields.street and len(others) >= 2:
        return ", ".join([fields.street, *others])
    return None


def normalize_contact_id(raw: Optional[str]) -> Optional[str]:
    """Reject ids that would not stay a single URL path segment."""
    if raw is None:
        return None
    if raw in {".", ".."} or any(c in raw for c in "/?#\\"):
        raise InvalidInputError("contact_id", "contact_id is not a valid CRM record id.")
    return raw


def normalize_inputs(fields: ResolvedFields) -> NormalizedInputs:
    return NormalizedInputs(
        job_type=normalize_job_type(fields.job_type),
        stories=normalize_stories(fields.stories),
        squares=normalize_squares(fields.squares),
        address=normalize_address(fields),
        roof_type=normalize_roof_type(fields.roof_type),
        roof_type_raw=fields.roof_type,
        contact_id=normalize_contact_id(fields.contact_id),
        callback_id=fields.callback_id,
    )
