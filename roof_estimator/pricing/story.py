from typing import Mapping

from roof_estimator.pricing.base import PricingStrategy


class StoryTieredPricing(PricingStrategy):
    """Flat price per square by story count."""

    name = "story"

    def __init__(self, table: Mapping[int, float]):
        self.table = {int(k): float(v) for k, v in table.items()}
        missing = {1, 2, 3} - set(self.table)
        if missing:
            raise ValueError(f"price table missing stories: {sorted(missing)}")

    def price_per_square(self, stories: int, roof_type: str | None = None) -> float:
        return self.table[stories]
