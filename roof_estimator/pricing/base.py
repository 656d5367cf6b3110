from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class EstimateResult:
    final_squares: int
    price_per_unit: float
    total_estimate: float


class PricingStrategy(ABC):
    name: str = "base"

    @abstractmethod
    def price_per_square(self, stories: int, roof_type: str | None = None) -> float:
        raise NotImplementedError

    def estimate(self, final_squares: int, stories: int, roof_type: str | None = None) -> EstimateResult:
        if final_squares <= 0:
            raise ValueError("final_squares must be positive")
        price = self.price_per_square(stories, roof_type)
        return EstimateResult(
            final_squares=final_squares,
            price_per_unit=price,
            total_estimate=round(final_squares * price, 2),
        )
