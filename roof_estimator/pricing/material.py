from typing import Mapping

from roof_estimator.pricing.base import PricingStrategy


class MaterialTieredPricing(PricingStrategy):
    """Material base price per square scaled by a story multiplier."""

    name = "material"

    def __init__(
        self,
        base_prices: Mapping[str, float],
        story_multipliers: Mapping[int, float],
        default_material: str = "asphalt",
    ):
        self.base_prices = {str(k).lower(): float(v) for k, v in base_prices.items()}
        self.story_multipliers = {int(k): float(v) for k, v in story_multipliers.items()}
        self.default_material = default_material
        if default_material not in self.base_prices:
            raise ValueError(f"no base price for default material {default_material!r}")
        missing = {1, 2, 3} - set(self.story_multipliers)
        if missing:
            raise ValueError(f"story multipliers missing stories: {sorted(missing)}")

    def price_per_square(self, stories: int, roof_type: str | None = None) -> float:
        material = (roof_type or self.default_material).lower()
        base = self.base_prices.get(material, self.base_prices[self.default_material])
        return round(base * self.story_multipliers[stories], 2)
