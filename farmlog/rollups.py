# farmlog/rollups.py

from datetime import datetime
from typing import List, Optional

from . import catalog
from .farm_store import FarmStore
from .models import Animal, FarmEvent, ProductionRecord, ProductType, WeightChangeRecord, local_naive


def _limited(items: list, limit: Optional[int]) -> list:
    return items if limit is None else items[:limit]


class AnimalRollups:
    """
    Read-only per-animal figures for the animal detail screen.
    Everything is derived from the store on each call; nothing is cached or persisted.
    """

    def __init__(self, store: FarmStore):
        self.store = store

    def base_weight(self, animal: Animal) -> float:
        return catalog.base_weight(animal.species) * animal.count

    def weight_history(self, animal: Animal, limit: Optional[int] = None) -> List[WeightChangeRecord]:
        """Weighings for the animal, newest first. Ties keep table order."""
        records = [r for r in self.store.weight_records if r.animal_id == animal.id]
        return _limited(sorted(records, key=lambda r: r.date, reverse=True), limit)

    def current_weight(self, animal: Animal) -> float:
        records = sorted(
            (r for r in self.store.weight_records if r.animal_id == animal.id),
            key=lambda r: r.date,
        )
        return self.base_weight(animal) + sum((r.weight_change for r in records), 0.0)

    def production_history(self, animal: Animal, limit: Optional[int] = None) -> List[ProductionRecord]:
        records = [r for r in self.store.production_records if r.animal_id == animal.id]
        return _limited(sorted(records, key=lambda r: r.date, reverse=True), limit)

    def event_history(self, animal: Animal, limit: Optional[int] = None) -> List[FarmEvent]:
        events = [e for e in self.store.events if e.related_animal_id == animal.id]
        return _limited(sorted(events, key=lambda e: e.date, reverse=True), limit)

    def today_production(self, animal: Animal, now: Optional[datetime] = None) -> float:
        """
        The headline production figure for the animal's species product.

        Milk and wool show what was recorded today. Milk falls back to the
        latest earlier record when nothing was recorded today. Eggs and meat
        show the cumulative total up to now.
        """
        now = local_naive(now if now is not None else self.store.clock())
        product = catalog.product_for_species(animal.species)
        records = [
            r for r in self.store.production_records
            if r.animal_id == animal.id and r.product_type == product and r.date <= now
        ]

        if product in (ProductType.EGGS, ProductType.MEAT):
            return sum((r.amount for r in records), 0.0)

        today = now.date()
        todays = [r for r in records if r.date.date() == today]
        if todays:
            return sum((r.amount for r in todays), 0.0)

        if product == ProductType.MILK:
            earlier = [r for r in records if r.date.date() < today]
            if earlier:
                return max(earlier, key=lambda r: r.date).amount
        return 0.0
