import argparse
import json
import sys

from roof_estimator.clients.google_maps import GoogleMapsClient
from roof_estimator.config import settings
from roof_estimator.errors import InvalidInputError
from roof_estimator.intake.normalizer import (
    normalize_roof_type,
    normalize_squares,
    normalize_stories,
)
from roof_estimator.measurement.roof import RoofMeasurer, apply_buffer
from roof_estimator.pricing.factory import build_pricing


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Price a roof offline: measure -> buffer -> price"
    )
    parser.add_argument("address", nargs="?", help="Street address to measure")
    parser.add_argument(
        "--stories",
        default="1",
        help="Story count; free text such as '2 Stories' is accepted",
    )
    parser.add_argument(
        "--squares",
        default=None,
        help="Manual roofing squares; skips measurement and buffering",
    )
    parser.add_argument(
        "--roof-type",
        default=None,
        help="Roof material (used only with RFE_PRICING_STRATEGY=material)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    stories = normalize_stories(args.stories)
    try:
        squares = normalize_squares(args.squares)
    except InvalidInputError as e:
        print(e.message, file=sys.stderr)
        return 2

    pricing = build_pricing(settings)
    roof_type = normalize_roof_type(args.roof_type) if pricing.name == "material" else None

    report: dict = {"address": args.address, "stories": stories}
    if squares is None:
        if not args.address:
            print("address is required when --squares is not given", file=sys.stderr)
            return 2

        client = GoogleMapsClient()
        try:
            measurement = RoofMeasurer(client).measure(args.address)
        finally:
            client.close()

        if measurement is None:
            print("Unable to auto-measure roof; pass --squares", file=sys.stderr)
            return 1
        report["area_m2"] = round(measurement.area_m2, 2)
        report["raw_squares"] = measurement.raw_squares
        squares = apply_buffer(measurement.raw_squares)

    estimate = pricing.estimate(squares, stories, roof_type)
    report.update(
        {
            "roof_type": roof_type,
            "squares": estimate.final_squares,
            "price_per_square": estimate.price_per_unit,
            "total_estimate": estimate.total_estimate,
            "currency": settings.currency,
            "pricing_strategy": pricing.name,
        }
    )
    print(json.dumps(report, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
