import math

import pytest

from roof_estimator.errors import InvalidInputError
from roof_estimator.intake.normalizer import (
    normalize_address,
    normalize_inputs,
    normalize_job_type,
    normalize_roof_type,
    normalize_squares,
    normalize_stories,
)
from roof_estimator.intake.resolver import ResolvedFields


@pytest.mark.parametrize(
    "raw, expected",
    [
        (1, 1),
        (2, 2),
        (3, 3),
        ("2", 2),
        ("2 Stories", 2),
        ("3+ stories", 3),
        (2.0, 2),
        (0, 1),
        (7, 3),
        ("-4", 1),
        (None, 1),
        ("", 1),
        ("unknown", 1),
        (float("nan"), 1),
        (float("inf"), 1),
        (10**400, 1),
        ("9" * 400, 1),
    ],
)
def test_normalize_stories(raw, expected):
    value = normalize_stories(raw)
    assert value == expected
    assert normalize_stories(value) == value


@pytest.mark.parametrize("raw, expected", [(18, 18), (17.2, 18), ("12.01", 13), ("1,200", 1200), ("1,200.5", 1201), (0.5, 1)])
def test_normalize_squares_rounds_up(raw, expected):
    assert normalize_squares(raw) == expected
    if isinstance(raw, (int, float)):
        assert normalize_squares(raw) == math.ceil(raw)


@pytest.mark.parametrize("raw", [0, -3, "-1", "abc", float("nan"), float("inf"), True, [1], 10**400, "12,5", "1,20"])
def test_normalize_squares_rejects_non_positive_or_non_numeric(raw):
    with pytest.raises(InvalidInputError) as exc:
        normalize_squares(raw)
    assert exc.value.field == "squares"


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_normalize_squares_absent(raw):
    assert normalize_squares(raw) is None


def test_job_type_defaults_to_retail():
    assert normalize_job_type(None) == "retail"
    assert normalize_job_type("  ") == "retail"
    assert normalize_job_type(" Insurance Claim ") == "insurance claim"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Asphalt / Composite Shingle", "asphalt"),
        ("Metal", "metal"),
        ("Standing seam", "metal"),
        ("Tile / Clay / Concrete", "tile"),
        ("Clay", "clay"),
        ("Wood / Shake", "asphalt"),
        (None, "asphalt"),
    ],
)
def test_normalize_roof_type(raw, expected):
    assert normalize_roof_type(raw) == expected


def test_address_prefers_full_address():
    fields = ResolvedFields(address="9 Oak Ave, Dallas, TX", street="1 Elm St", city="Austin", state="TX")
    assert normalize_address(fields) == "9 Oak Ave, Dallas, TX"


def test_address_synthesized_from_street_and_two_parts():
    fields = ResolvedFields(street="1 Elm St", city="Austin", postal_code="78701")
    assert normalize_address(fields) == "1 Elm St, Austin, 78701"


def test_address_not_synthesized_without_enough_parts():
    assert normalize_address(ResolvedFields(street="1 Elm St", city="Austin")) is None
    assert normalize_address(ResolvedFields(city="Austin", state="TX", postal_code="78701")) is None


def test_normalize_inputs_flags_insurance_and_unknown_roof():
    inputs = normalize_inputs(ResolvedFields(job_type="Insurance Claim", roof_type="Not Sure"))
    assert inputs.is_insurance
    assert inputs.roof_type_unknown
    assert inputs.stories == 1
    assert inputs.squares is None


@pytest.mark.parametrize("raw", ["c-1/../../locations/loc9", "..", "c-1?x=1", "c-1#frag"])
def test_contact_id_must_be_single_path_segment(raw):
    with pytest.raises(InvalidInputError) as exc:
        normalize_inputs(ResolvedFields(contact_id=raw))
    assert exc.value.field == "contact_id"


def test_plain_contact_id_passes_through():
    assert normalize_inputs(ResolvedFields(contact_id="c8Qy1mZ3")).contact_id == "c8Qy1mZ3"
