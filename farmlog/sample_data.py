# farmlog/sample_data.py

from datetime import datetime
from typing import Optional

from dateutil.relativedelta import relativedelta

from .farm_store import FarmStore
from .models import (
    Animal,
    AnimalSpecies,
    FarmTask,
    HealthStatus,
    ProductionRecord,
    ProductType,
    TaskCategory,
    TaskPriority,
)


def seed_sample_data(store: FarmStore, now: Optional[datetime] = None):
    """
    Fills empty tables with a few example records on first run.
    Each table is checked on its own, so a store that already has data in
    a table never gets sample rows added to it.
    """
    now = now if now is not None else store.clock()

    if len(store.tasks) == 0:
        print("---SAMPLE DATA: Seeding tasks---")
        store.add_task(FarmTask(
            title="Water Tomatoes",
            description="Check and water tomato plants in greenhouse",
            due_date=now,
            priority=TaskPriority.MEDIUM,
            category=TaskCategory.WATERING,
            created_date=now,
        ))
        store.add_task(FarmTask(
            title="Feed Chickens",
            description="Morning feeding for laying hens",
            due_date=now,
            priority=TaskPriority.HIGH,
            category=TaskCategory.FEEDING,
            created_date=now,
        ))
        store.add_task(FarmTask(
            title="Clean Pig Pen",
            description="Weekly cleaning of pig enclosure",
            due_date=now + relativedelta(days=1),
            priority=TaskPriority.MEDIUM,
            category=TaskCategory.CLEANING,
            created_date=now,
        ))

    if len(store.animals) == 0:
        print("---SAMPLE DATA: Seeding animals---")
        store.add_animal(Animal(
            species=AnimalSpecies.CHICKEN,
            breed="Rhode Island Red",
            count=15,
            age="1 year",
            health_status=HealthStatus.EXCELLENT,
            last_vaccination=now - relativedelta(months=3),
            next_vaccination=now + relativedelta(months=3),
            notes="High egg production",
            is_high_producer=True,
        ))
        store.add_animal(Animal(
            species=AnimalSpecies.COW,
            breed="Holstein",
            name="Bessie",
            count=1,
            age="3 years",
            health_status=HealthStatus.GOOD,
            last_vaccination=now - relativedelta(months=6),
            next_vaccination=now + relativedelta(months=6),
            notes="Good milk producer",
            is_high_producer=True,
        ))

    if len(store.production_records) == 0:
        print("---SAMPLE DATA: Seeding production records---")
        animals = store.animals.items
        store.add_production_record(ProductionRecord(
            date=now,
            product_type=ProductType.EGGS,
            amount=12,
            unit="pieces",
            animal_id=animals[0].id if animals else None,
            notes="Morning collection",
        ))
        store.add_production_record(ProductionRecord(
            date=now,
            product_type=ProductType.MILK,
            amount=15.5,
            unit="liters",
            animal_id=animals[-1].id if animals else None,
            notes="Evening milking",
        ))
