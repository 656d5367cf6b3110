from roof_estimator.config import Settings, settings as default_settings
from roof_estimator.pricing.base import PricingStrategy
from roof_estimator.pricing.material import MaterialTieredPricing
from roof_estimator.pricing.story import StoryTieredPricing


def build_pricing(cfg: Settings | None = None) -> PricingStrategy:
    cfg = cfg or default_settings
    if cfg.pricing_strategy == "material":
        return MaterialTieredPricing(
            base_prices=cfg.material_base_prices,
            story_multipliers=cfg.story_multipliers,
        )
    return StoryTieredPricing(cfg.price_per_square)
