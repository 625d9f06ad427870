import math
from datetime import datetime, time, timezone
from uuid import uuid4

from dateutil.relativedelta import relativedelta

from farmlog.farm_store import (
    ANIMALS_KEY,
    EVENTS_KEY,
    PRODUCTION_KEY,
    SETTINGS_KEY,
    TASKS_KEY,
    WEIGHT_KEY,
    FarmStore,
)
from farmlog.models import (
    Animal,
    AnimalSpecies,
    AppSettings,
    AreaUnit,
    Crop,
    CropStage,
    CropType,
    EventType,
    FarmboardItem,
    FarmboardItemType,
    FarmEvent,
    FarmTask,
    ProductionRecord,
    ProductType,
    StorageCategory,
    StorageItem,
    TaskPriority,
    WeightChangeRecord,
    WeightUnit,
)
from farmlog.rollups import AnimalRollups
from tests.conftest import NOW, CountingBackend, FailingBackend


def make_task(title="Water Tomatoes", **kwargs):
    return FarmTask(title=title, due_date=NOW, **kwargs)


def test_add_assigns_unique_ids_to_identical_entities(store):
    first = store.add_task(make_task())
    second = store.add_task(make_task())
    assert first.id != second.id
    assert len(store.tasks) == 2


def test_add_replaces_colliding_id(store):
    task = make_task()
    store.add_task(task)
    again = store.add_task(task)
    assert again.id != task.id
    assert len({t.id for t in store.tasks}) == 2


def test_add_persists_before_returning(store, backend):
    store.add_task(make_task())
    assert backend.writes == [TASKS_KEY]
    reloaded = FarmStore(backend)
    assert [t.title for t in reloaded.tasks] == ["Water Tomatoes"]


def test_update_replaces_in_place(store):
    a = store.add_task(make_task("A"))
    b = store.add_task(make_task("B"))
    store.add_task(make_task("C"))

    assert store.update_task(b.model_copy(update={"title": "B2", "priority": TaskPriority.URGENT}))
    assert [t.title for t in store.tasks] == ["A", "B2", "C"]
    assert store.get_task(b.id).priority == TaskPriority.URGENT
    assert store.get_task(a.id).title == "A"


def test_update_unknown_id_is_a_no_op(store, backend, changes):
    store.add_task(make_task())
    before = store.tasks.items
    writes = list(backend.writes)
    changes.clear()

    assert store.update_task(make_task("Ghost")) is False
    assert store.tasks.items == before
    assert backend.writes == writes
    assert changes == []


def test_caller_mutation_does_not_leak_into_store(store):
    task = make_task()
    stored = store.add_task(task)
    task.title = "Changed outside"
    assert store.get_task(stored.id).title == "Water Tomatoes"


def test_delete_by_item_and_by_id(store):
    a = store.add_task(make_task("A"))
    b = store.add_task(make_task("B"))
    assert store.delete_task(a)
    assert store.delete_task(b.id)
    assert len(store.tasks) == 0
    assert store.delete_task(uuid4()) is False


def test_delete_at_persists_once(store, backend, changes):
    for title in "ABCDE":
        store.add_task(make_task(title))
    backend.writes.clear()
    changes.clear()

    removed = store.delete_tasks_at([4, 0, 2, 99])

    assert [t.title for t in removed] == ["A", "C", "E"]
    assert [t.title for t in store.tasks] == ["B", "D"]
    assert backend.writes == [TASKS_KEY]
    assert len(changes) == 1
    assert changes[0].action == "delete"
    assert len(changes[0].item_ids) == 3


def test_delete_at_with_nothing_valid_writes_nothing(store, backend):
    store.add_task(make_task())
    backend.writes.clear()
    assert store.delete_tasks_at([5]) == []
    assert backend.writes == []


def test_one_notification_per_write(store, changes):
    task = store.add_task(make_task())
    store.update_task(task.model_copy(update={"title": "Feed Chickens"}))
    store.toggle_task_completion(task)
    store.delete_task(task)
    assert [c.action for c in changes] == ["add", "update", "update", "delete"]
    assert all(c.tables == (TASKS_KEY,) for c in changes)


def test_unsubscribe_stops_notifications(store):
    received = []
    unsubscribe = store.subscribe(received.append)
    store.add_task(make_task())
    unsubscribe()
    store.add_task(make_task())
    assert len(received) == 1


def test_listener_can_reenter_store(store):
    seen = []

    def on_change(change):
        seen.append(change.action)
        if change.tables == (TASKS_KEY,) and change.action == "add":
            store.update_task(make_task("stale reference"))
            store.add_farmboard_item(FarmboardItem(name="Task added", item_type=FarmboardItemType.TASK))

    store.subscribe(on_change)
    store.add_task(make_task())
    assert seen == ["add", "add"]
    assert len(store.farmboard_items) == 1


def test_toggle_task_completion(store):
    task = store.add_task(make_task())
    store.toggle_task_completion(task)
    assert store.get_task(task.id).is_completed
    store.toggle_task_completion(task.id)
    assert not store.get_task(task.id).is_completed
    assert store.toggle_task_completion(uuid4()) is False


def test_toggle_event_completion(store):
    event = store.add_event(FarmEvent(title="Vet", date=NOW, event_type=EventType.VETERINARY_VISIT))
    assert store.toggle_event_completion(event)
    assert store.get_event(event.id).is_completed


def seed_animal_with_history(store):
    hens = store.add_animal(Animal(species=AnimalSpecies.CHICKEN, breed="Leghorn", count=10))
    other = store.add_animal(Animal(species=AnimalSpecies.COW, breed="Jersey"))
    store.add_production_record(ProductionRecord(product_type=ProductType.EGGS, amount=8, unit="pieces", animal_id=hens.id, date=NOW))
    store.add_production_record(ProductionRecord(product_type=ProductType.MILK, amount=9, unit="liters", animal_id=other.id, date=NOW))
    store.add_weight_record(WeightChangeRecord(animal_id=hens.id, weight_change=1.0, date=NOW))
    store.add_event(FarmEvent(title="Vaccinate hens", date=NOW, related_animal_id=hens.id))
    return hens, other


def test_delete_animal_keeps_history_by_default(store):
    hens, _ = seed_animal_with_history(store)
    assert store.delete_animal(hens)
    assert store.get_animal(hens.id) is None
    assert len(store.production_records) == 2
    assert len(store.weight_records) == 1
    assert len(store.events) == 1


def test_delete_animal_cascade(store, backend, changes):
    hens, other = seed_animal_with_history(store)
    backend.writes.clear()
    changes.clear()

    assert store.delete_animal(hens.id, cascade=True)

    assert [r.animal_id for r in store.production_records] == [other.id]
    assert len(store.weight_records) == 0
    assert len(store.events) == 0
    assert sorted(backend.writes) == sorted([ANIMALS_KEY, PRODUCTION_KEY, WEIGHT_KEY, EVENTS_KEY])
    assert len(changes) == 1
    assert set(changes[0].tables) == {ANIMALS_KEY, PRODUCTION_KEY, WEIGHT_KEY, EVENTS_KEY}


def test_delete_unknown_animal_is_a_no_op(store, changes):
    assert store.delete_animal(uuid4(), cascade=True) is False
    assert changes == []


def test_update_settings_replaces_wholesale(store, backend, changes):
    new_settings = AppSettings(weight_unit=WeightUnit.POUNDS, area_unit=AreaUnit.ACRES, enable_notifications=False)
    store.update_settings(new_settings)

    assert store.settings == new_settings
    assert backend.writes[-1] == SETTINGS_KEY
    assert changes[-1].action == "settings"
    assert FarmStore(backend).settings == new_settings


def test_clear_all_data_keeps_settings(store, backend, changes):
    seed_animal_with_history(store)
    store.update_settings(AppSettings(weight_unit=WeightUnit.GRAMS))
    changes.clear()

    store.clear_all_data()

    assert all(len(table) == 0 for table in store.tables)
    assert len(changes) == 1
    reloaded = FarmStore(backend)
    assert all(len(table) == 0 for table in reloaded.tables)
    assert reloaded.settings.weight_unit == WeightUnit.GRAMS


def test_round_trip_every_table():
    backend = CountingBackend()
    store = FarmStore(backend)
    cow = store.add_animal(Animal(species=AnimalSpecies.COW, breed="Holstein", name="Bessie",
                                  last_vaccination=datetime(2026, 4, 1, 8, 30, 15, 123456)))
    store.add_animal(Animal(species=AnimalSpecies.SHEEP))
    store.add_task(make_task(description="greenhouse"))
    store.add_crop(Crop(name="Tomato", variety="Roma", planting_date=NOW, expected_harvest_date=NOW,
                        current_stage=CropStage.FLOWERING, crop_type=CropType.TOMATO, harvest_amount=2.5))
    store.add_production_record(ProductionRecord(product_type=ProductType.MILK, amount=15.5, unit="liters", animal_id=cow.id))
    store.add_production_record(ProductionRecord(product_type=ProductType.HONEY, amount=1, unit="kg"))
    store.add_weight_record(WeightChangeRecord(animal_id=cow.id, weight_change=-2.25))
    store.add_storage_item(StorageItem(name="Layer feed", category=StorageCategory.FEED, current_stock=40,
                                       minimum_stock=10, unit="kg", expiration_date=NOW))
    store.add_event(FarmEvent(title="Vet", date=NOW, reminder_date=NOW, related_animal_id=cow.id))
    store.add_farmboard_item(FarmboardItem(name="Carrots", item_type=FarmboardItemType.CROP, quantity=3, unit="rows"))
    store.update_settings(AppSettings(reminder_time=time(6, 45)))

    reloaded = FarmStore(backend)

    for original, loaded in zip(store.tables, reloaded.tables):
        assert loaded.items == original.items, original.key
    assert reloaded.settings == store.settings


def test_old_records_missing_optional_fields_get_defaults():
    raw = b'[{"id": "8a3c2a53-7e0c-4a43-9a8e-0a4f1b5fa111", "title": "Old task", "due_date": "2026-10-01T09:00:00"}]'
    store = FarmStore(CountingBackend({TASKS_KEY: raw}))
    task = store.tasks.items[0]
    assert task.title == "Old task"
    assert task.priority == TaskPriority.MEDIUM
    assert task.description == ""
    assert task.is_completed is False


def test_corrupt_table_falls_back_to_empty_without_affecting_others():
    backend = CountingBackend()
    seeded = FarmStore(backend)
    seeded.add_crop(Crop(name="Wheat", planting_date=NOW, expected_harvest_date=NOW))
    seeded.add_task(make_task())
    backend.slots[TASKS_KEY] = b"{not json"
    backend.slots[ANIMALS_KEY] = b'[{"species": "dragon"}]'
    backend.slots[SETTINGS_KEY] = b"garbage"

    store = FarmStore(backend)

    assert len(store.tasks) == 0
    assert len(store.animals) == 0
    assert [c.name for c in store.crops] == ["Wheat"]
    assert store.settings == AppSettings()


def test_save_failure_keeps_memory_state():
    store = FarmStore(FailingBackend(), clock=lambda: NOW)
    received = []
    store.subscribe(received.append)

    task = store.add_task(make_task())
    store.update_settings(AppSettings(enable_notifications=False))

    assert store.get_task(task.id) is not None
    assert store.settings.enable_notifications is False
    assert [c.action for c in received] == ["add", "settings"]


def test_stored_dates_with_utc_offset_load_as_local_time():
    raw = (b'[{"id": "1f0e7c5e-2b7a-4a43-9a8e-0a4f1b5fa222", "date": "2026-10-18T09:00:00Z",'
           b' "product_type": "eggs", "amount": 12, "unit": "pieces"}]')
    store = FarmStore(CountingBackend({PRODUCTION_KEY: raw}), clock=lambda: NOW)

    record = store.production_records.items[0]
    assert record.date.tzinfo is None
    assert record.date == datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    assert store.weekly_eggs(NOW) == 12
    assert store.weekly_production_by_type() == [(ProductType.EGGS, 12.0)]


def test_aware_dates_from_callers_are_made_local(store):
    aware_now = NOW.astimezone(timezone.utc)
    store.add_event(FarmEvent(title="Vet", date=aware_now + relativedelta(days=2)))
    store.add_event(FarmEvent(title="Shearing", date=NOW + relativedelta(days=1)))
    store.add_farmboard_item(FarmboardItem(name="Old", item_type=FarmboardItemType.TASK,
                                           scheduled_date=aware_now - relativedelta(hours=1)))
    hens = store.add_animal(Animal(species=AnimalSpecies.CHICKEN))
    store.add_weight_record(WeightChangeRecord(animal_id=hens.id, weight_change=0.5, date=NOW))
    late = store.add_weight_record(WeightChangeRecord(animal_id=hens.id, weight_change=0.25, date=NOW))
    store.update_weight_record(late.model_copy(update={"date": aware_now + relativedelta(hours=1)}))

    assert [e.title for e in store.upcoming_events(aware_now)] == ["Shearing", "Vet"]
    assert store.farmboard(aware_now) == []
    assert all(r.date.tzinfo is None for r in store.weight_records)
    assert [r.weight_change for r in AnimalRollups(store).weight_history(hens)] == [0.25, 0.5]


def test_non_finite_floats_survive_reload():
    backend = CountingBackend()
    store = FarmStore(backend)
    hens = store.add_animal(Animal(species=AnimalSpecies.CHICKEN))
    store.add_weight_record(WeightChangeRecord(animal_id=hens.id, weight_change=1.0, date=NOW))
    store.add_weight_record(WeightChangeRecord(animal_id=hens.id, weight_change=float("inf"), date=NOW))
    store.add_storage_item(StorageItem(name="Hay", category=StorageCategory.FEED, current_stock=float("nan"),
                                       minimum_stock=1, unit="bales"))

    reloaded = FarmStore(backend)

    assert [r.weight_change for r in reloaded.weight_records] == [1.0, float("inf")]
    assert math.isnan(reloaded.storage_items.items[0].current_stock)
