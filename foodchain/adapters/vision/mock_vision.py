import random
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from foodchain.adapters.vision.base import VisionAdapter
from foodchain.orchestrator.contracts import ItemTemplate, Prediction, iso_now

TEMPLATES = (
    ItemTemplate("tomatoes", "produce", 5),
    ItemTemplate("milk (pasteurized)", "dairy", 7),
    ItemTemplate("baguette", "bakery", 2),
    ItemTemplate("chicken breast", "meat", 3),
)

CONFIDENCE = 0.82


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MockVision(VisionAdapter):
    """Pretends to recognize a food item: uniform draw from TEMPLATES.

    rng and clock are injectable so tests can pin the draw and the expiry.
    """

    def __init__(self, status_store, rng: Optional[random.Random] = None,
                 clock: Callable[[], datetime] = _utcnow):
        self.status = status_store
        self._rng = rng or random.Random()
        self._clock = clock

    def recognize_once(self) -> Prediction:
        pick = self._rng.choice(TEMPLATES)
        expiry = self._clock() + timedelta(days=pick.shelf_life_days)
        self.status.log(f"mock_vision: {pick.name} ({pick.category}, {pick.shelf_life_days}d)")
        return Prediction(
            name=pick.name,
            category=pick.category,
            shelf_life_days=pick.shelf_life_days,
            confidence=CONFIDENCE,
            estimated_expiry=iso_now(expiry),
        )
