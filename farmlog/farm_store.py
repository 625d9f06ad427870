# farmlog/farm_store.py

from collections import OrderedDict
from datetime import datetime
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple, Union
from uuid import UUID

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError

from .models import (
    Animal,
    AnimalSpecies,
    AppSettings,
    Crop,
    CropStage,
    EventType,
    FarmboardItem,
    FarmEvent,
    FarmStatistics,
    FarmTask,
    ProductionRecord,
    ProductType,
    StorageCategory,
    StorageItem,
    WeightChangeRecord,
    local_naive,
)
from .storage import KeyValueBackend, StorageError
from .tables import EntityTable

TASKS_KEY = "farm_tasks"
CROPS_KEY = "farm_crops"
ANIMALS_KEY = "farm_animals"
PRODUCTION_KEY = "production_records"
WEIGHT_KEY = "weight_change_records"
STORAGE_KEY = "storage_items"
EVENTS_KEY = "farm_events"
FARMBOARD_KEY = "farmboard_items"
SETTINGS_KEY = "app_settings"

WINDOW = relativedelta(days=7)
HARVEST_PRODUCTS = (ProductType.EGGS, ProductType.MILK)


class StoreChange(NamedTuple):
    """One completed write: what happened, which tables were persisted, and the records touched."""
    action: str  # "add", "update", "delete", "clear", "sweep", "settings"
    tables: Tuple[str, ...]
    item_ids: Tuple[UUID, ...] = ()


Listener = Callable[[StoreChange], None]
ItemRef = Union[UUID, BaseModel]


def _item_id(item_or_id: ItemRef) -> UUID:
    return item_or_id if isinstance(item_or_id, UUID) else item_or_id.id


class FarmStore:
    """
    Owns every farm table and the settings record.
    All mutation goes through this object: each write is persisted to the
    backend before the call returns, then subscribers get exactly one
    StoreChange. Reads never touch the backend.
    """

    def __init__(self, backend: KeyValueBackend, clock: Callable[[], datetime] = datetime.now):
        self.backend = backend
        self.clock = clock
        self.tasks: EntityTable[FarmTask] = EntityTable(TASKS_KEY, FarmTask)
        self.crops: EntityTable[Crop] = EntityTable(CROPS_KEY, Crop)
        self.animals: EntityTable[Animal] = EntityTable(ANIMALS_KEY, Animal)
        self.production_records: EntityTable[ProductionRecord] = EntityTable(PRODUCTION_KEY, ProductionRecord)
        self.weight_records: EntityTable[WeightChangeRecord] = EntityTable(WEIGHT_KEY, WeightChangeRecord)
        self.storage_items: EntityTable[StorageItem] = EntityTable(STORAGE_KEY, StorageItem)
        self.events: EntityTable[FarmEvent] = EntityTable(EVENTS_KEY, FarmEvent)
        self.farmboard_items: EntityTable[FarmboardItem] = EntityTable(FARMBOARD_KEY, FarmboardItem)
        self.settings = AppSettings()
        self._listeners: List[Listener] = []
        self.load()

    @property
    def tables(self) -> Tuple[EntityTable, ...]:
        return (
            self.tasks,
            self.crops,
            self.animals,
            self.production_records,
            self.weight_records,
            self.storage_items,
            self.events,
            self.farmboard_items,
        )

    def _now(self, now: Optional[datetime]) -> datetime:
        return local_naive(now if now is not None else self.clock())

    # --- Persistence ---

    def load(self):
        """Loads every table independently. A slot that fails to decode comes back empty."""
        for table in self.tables:
            self._load_table(table)
        self._load_settings()

    def _read_slot(self, key: str) -> Optional[bytes]:
        try:
            return self.backend.get(key)
        except StorageError as e:
            print(f"---FARM STORE: Could not read '{key}': {e}---")
            return None

    def _load_table(self, table: EntityTable):
        raw = self._read_slot(table.key)
        if raw is None:
            table.clear()
            return
        try:
            table.decode(raw)
        except ValidationError as e:
            print(f"---FARM STORE: Could not decode '{table.key}', starting empty: {e.error_count()} errors---")
            table.clear()
            return
        print(f"---FARM STORE: Loaded {len(table)} records from '{table.key}'---")

    def _load_settings(self):
        raw = self._read_slot(SETTINGS_KEY)
        if raw is None:
            self.settings = AppSettings()
            return
        try:
            self.settings = AppSettings.model_validate_json(raw)
        except ValidationError:
            print(f"---FARM STORE: Could not decode '{SETTINGS_KEY}', using defaults---")
            self.settings = AppSettings()

    def _save_table(self, table: EntityTable):
        try:
            self.backend.set(table.key, table.encode())
        except (PydanticSerializationError, StorageError) as e:
            print(f"---FARM STORE: Failed to save '{table.key}': {e}---")

    def _save_settings(self):
        try:
            self.backend.set(SETTINGS_KEY, self.settings.model_dump_json().encode("utf-8"))
        except (PydanticSerializationError, StorageError) as e:
            print(f"---FARM STORE: Failed to save '{SETTINGS_KEY}': {e}---")

    def save(self):
        """Flushes every table and the settings record."""
        for table in self.tables:
            self._save_table(table)
        self._save_settings()

    # --- Change notification ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Registers a listener for store changes. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, action: str, tables: Tuple[str, ...], item_ids: Tuple[UUID, ...] = ()):
        change = StoreChange(action, tables, item_ids)
        for listener in list(self._listeners):
            listener(change)

    # --- Generic table operations ---

    def _add(self, table: EntityTable, item):
        stored = table.append(item)
        self._save_table(table)
        self._notify("add", (table.key,), (stored.id,))
        return stored

    def _update(self, table: EntityTable, item) -> bool:
        if not table.replace(item):
            return False
        self._save_table(table)
        self._notify("update", (table.key,), (item.id,))
        return True

    def _delete(self, table: EntityTable, item_or_id: ItemRef) -> bool:
        removed = table.remove(_item_id(item_or_id))
        if removed is None:
            return False
        self._save_table(table)
        self._notify("delete", (table.key,), (removed.id,))
        return True

    def _delete_at(self, table: EntityTable, indices) -> list:
        removed = table.remove_at(indices)
        if removed:
            self._save_table(table)
            self._notify("delete", (table.key,), tuple(item.id for item in removed))
        return removed

    # --- Tasks ---

    def add_task(self, task: FarmTask) -> FarmTask:
        return self._add(self.tasks, task)

    def update_task(self, task: FarmTask) -> bool:
        return self._update(self.tasks, task)

    def delete_task(self, task: ItemRef) -> bool:
        return self._delete(self.tasks, task)

    def delete_tasks_at(self, indices) -> List[FarmTask]:
        return self._delete_at(self.tasks, indices)

    def get_task(self, task_id: UUID) -> Optional[FarmTask]:
        return self.tasks.get(task_id)

    def toggle_task_completion(self, task: ItemRef) -> bool:
        current = self.tasks.get(_item_id(task))
        if current is None:
            return False
        return self._update(self.tasks, current.model_copy(update={"is_completed": not current.is_completed}))

    # --- Crops ---

    def add_crop(self, crop: Crop) -> Crop:
        return self._add(self.crops, crop)

    def update_crop(self, crop: Crop) -> bool:
        return self._update(self.crops, crop)

    def delete_crop(self, crop: ItemRef) -> bool:
        return self._delete(self.crops, crop)

    def delete_crops_at(self, indices) -> List[Crop]:
        return self._delete_at(self.crops, indices)

    def get_crop(self, crop_id: UUID) -> Optional[Crop]:
        return self.crops.get(crop_id)

    # --- Animals ---

    def add_animal(self, animal: Animal) -> Animal:
        return self._add(self.animals, animal)

    def update_animal(self, animal: Animal) -> bool:
        return self._update(self.animals, animal)

    def delete_animal(self, animal: ItemRef, cascade: bool = False) -> bool:
        """
        Removes an animal. By default its production records, weight records
        and related events are kept as history (they keep the dangling id).
        With cascade=True those rows are removed in the same operation.
        """
        animal_id = _item_id(animal)
        removed = self.animals.remove(animal_id)
        if removed is None:
            return False

        touched = [self.animals]
        removed_ids = [removed.id]
        if cascade:
            dependents = (
                (self.production_records, lambda r: r.animal_id == animal_id),
                (self.weight_records, lambda r: r.animal_id == animal_id),
                (self.events, lambda e: e.related_animal_id == animal_id),
            )
            for table, predicate in dependents:
                dropped = table.remove_where(predicate)
                if dropped:
                    touched.append(table)
                    removed_ids.extend(item.id for item in dropped)

        for table in touched:
            self._save_table(table)
        self._notify("delete", tuple(t.key for t in touched), tuple(removed_ids))
        return True

    def delete_animals_at(self, indices) -> List[Animal]:
        return self._delete_at(self.animals, indices)

    def get_animal(self, animal_id: UUID) -> Optional[Animal]:
        return self.animals.get(animal_id)

    # --- Production records ---

    def add_production_record(self, record: ProductionRecord) -> ProductionRecord:
        return self._add(self.production_records, record)

    def update_production_record(self, record: ProductionRecord) -> bool:
        return self._update(self.production_records, record)

    def delete_production_record(self, record: ItemRef) -> bool:
        return self._delete(self.production_records, record)

    def delete_production_records_at(self, indices) -> List[ProductionRecord]:
        return self._delete_at(self.production_records, indices)

    def get_production_record(self, record_id: UUID) -> Optional[ProductionRecord]:
        return self.production_records.get(record_id)

    # --- Weight change records ---

    def add_weight_record(self, record: WeightChangeRecord) -> WeightChangeRecord:
        return self._add(self.weight_records, record)

    def update_weight_record(self, record: WeightChangeRecord) -> bool:
        return self._update(self.weight_records, record)

    def delete_weight_record(self, record: ItemRef) -> bool:
        return self._delete(self.weight_records, record)

    def delete_weight_records_at(self, indices) -> List[WeightChangeRecord]:
        return self._delete_at(self.weight_records, indices)

    def get_weight_record(self, record_id: UUID) -> Optional[WeightChangeRecord]:
        return self.weight_records.get(record_id)

    # --- Storage items ---

    def add_storage_item(self, item: StorageItem) -> StorageItem:
        return self._add(self.storage_items, item)

    def update_storage_item(self, item: StorageItem) -> bool:
        return self._update(self.storage_items, item)

    def delete_storage_item(self, item: ItemRef) -> bool:
        return self._delete(self.storage_items, item)

    def delete_storage_items_at(self, indices) -> List[StorageItem]:
        return self._delete_at(self.storage_items, indices)

    def get_storage_item(self, item_id: UUID) -> Optional[StorageItem]:
        return self.storage_items.get(item_id)

    # --- Events ---

    def add_event(self, event: FarmEvent) -> FarmEvent:
        return self._add(self.events, event)

    def update_event(self, event: FarmEvent) -> bool:
        return self._update(self.events, event)

    def delete_event(self, event: ItemRef) -> bool:
        return self._delete(self.events, event)

    def delete_events_at(self, indices) -> List[FarmEvent]:
        return self._delete_at(self.events, indices)

    def get_event(self, event_id: UUID) -> Optional[FarmEvent]:
        return self.events.get(event_id)

    def toggle_event_completion(self, event: ItemRef) -> bool:
        current = self.events.get(_item_id(event))
        if current is None:
            return False
        return self._update(self.events, current.model_copy(update={"is_completed": not current.is_completed}))

    # --- Farmboard ---

    def add_farmboard_item(self, item: FarmboardItem) -> FarmboardItem:
        return self._add(self.farmboard_items, item)

    def update_farmboard_item(self, item: FarmboardItem) -> bool:
        return self._update(self.farmboard_items, item)

    def delete_farmboard_item(self, item: ItemRef) -> bool:
        return self._delete(self.farmboard_items, item)

    def delete_farmboard_items_at(self, indices) -> List[FarmboardItem]:
        return self._delete_at(self.farmboard_items, indices)

    def get_farmboard_item(self, item_id: UUID) -> Optional[FarmboardItem]:
        return self.farmboard_items.get(item_id)

    def sweep_expired_farmboard(self, now: Optional[datetime] = None) -> List[FarmboardItem]:
        """Deletes farmboard items whose scheduled date has passed. Returns what was removed."""
        now = self._now(now)
        removed = self.farmboard_items.remove_where(lambda item: item.is_expired(now))
        if removed:
            self._save_table(self.farmboard_items)
            self._notify("sweep", (FARMBOARD_KEY,), tuple(item.id for item in removed))
            print(f"---FARM STORE: Swept {len(removed)} expired farmboard items---")
        return removed

    def farmboard(self, now: Optional[datetime] = None) -> List[FarmboardItem]:
        """The farmboard read path: sweeps expired entries, then returns what is left."""
        self.sweep_expired_farmboard(now)
        return self.farmboard_items.items

    # --- Settings & bulk ---

    def update_settings(self, new_settings: AppSettings):
        self.settings = AppSettings.model_validate(new_settings.model_dump())
        self._save_settings()
        self._notify("settings", (SETTINGS_KEY,))

    def clear_all_data(self):
        """Empties every table. Settings are kept."""
        for table in self.tables:
            table.clear()
            self._save_table(table)
        self._notify("clear", tuple(table.key for table in self.tables))

    # --- Weekly aggregates ---

    def _records_in_week(self, now: Optional[datetime]) -> List[ProductionRecord]:
        now = self._now(now)
        week_ago = now - WINDOW
        return [r for r in self.production_records if week_ago <= r.date <= now]

    def weekly_harvest(self, now: Optional[datetime] = None) -> float:
        return sum((r.amount for r in self._records_in_week(now) if r.product_type in HARVEST_PRODUCTS), 0.0)

    def weekly_eggs(self, now: Optional[datetime] = None) -> int:
        return int(sum(r.amount for r in self._records_in_week(now) if r.product_type == ProductType.EGGS))

    def weekly_milk(self, now: Optional[datetime] = None) -> float:
        return sum((r.amount for r in self._records_in_week(now) if r.product_type == ProductType.MILK), 0.0)

    def weekly_production_by_type(self, now: Optional[datetime] = None) -> List[Tuple[ProductType, float]]:
        totals: Dict[ProductType, float] = {}
        for record in self._records_in_week(now):
            totals[record.product_type] = totals.get(record.product_type, 0.0) + record.amount
        return sorted(totals.items(), key=lambda pair: pair[1], reverse=True)

    # --- Status & filter queries ---

    def pending_tasks(self) -> List[FarmTask]:
        return [t for t in self.tasks if not t.is_completed]

    def todays_tasks(self, now: Optional[datetime] = None) -> List[FarmTask]:
        """Incomplete tasks due on the current calendar day."""
        start = self._now(now).replace(hour=0, minute=0, second=0, microsecond=0)
        end = start + relativedelta(days=1)
        return [t for t in self.tasks if not t.is_completed and start <= t.due_date < end]

    def upcoming_events(self, now: Optional[datetime] = None) -> List[FarmEvent]:
        now = self._now(now)
        next_week = now + WINDOW
        upcoming = [e for e in self.events if not e.is_completed and now <= e.date <= next_week]
        return sorted(upcoming, key=lambda e: e.date)

    def low_stock_items(self) -> List[StorageItem]:
        return [item for item in self.storage_items if item.is_low_stock]

    def total_animal_count(self) -> int:
        return sum(a.count for a in self.animals)

    def filter_animals(self, search: str = "", species: Optional[AnimalSpecies] = None) -> List[Animal]:
        needle = search.strip().lower()
        animals = self.animals.items
        if needle:
            animals = [
                a for a in animals
                if needle in a.breed.lower() or needle in a.species.value or needle in (a.name or "").lower()
            ]
        if species is not None:
            animals = [a for a in animals if a.species == species]
        return sorted(animals, key=lambda a: a.species.value)

    def filter_crops(self, search: str = "", stage: Optional[CropStage] = None) -> List[Crop]:
        needle = search.strip().lower()
        crops = self.crops.items
        if needle:
            crops = [
                c for c in crops
                if needle in c.name.lower() or needle in c.variety.lower() or needle in c.planting_area.lower()
            ]
        if stage is not None:
            crops = [c for c in crops if c.current_stage == stage]
        return sorted(crops, key=lambda c: c.planting_date, reverse=True)

    def filter_storage_items(
        self,
        search: str = "",
        category: Optional[StorageCategory] = None,
        low_stock_only: bool = False,
    ) -> List[StorageItem]:
        needle = search.strip().lower()
        items = self.storage_items.items
        if needle:
            items = [i for i in items if needle in i.name.lower() or needle in i.supplier.lower()]
        if category is not None:
            items = [i for i in items if i.category == category]
        if low_stock_only:
            items = [i for i in items if i.is_low_stock]
        return sorted(items, key=lambda i: i.category.value)

    def production_history(self, product_type: Optional[ProductType] = None) -> List[ProductionRecord]:
        records = self.production_records.items
        if product_type is not None:
            records = [r for r in records if r.product_type == product_type]
        return sorted(records, key=lambda r: r.date, reverse=True)

    def planning_events(self, event_type: Optional[EventType] = None) -> List[FarmEvent]:
        events = [e for e in self.events if not e.is_completed]
        if event_type is not None:
            events = [e for e in events if e.event_type == event_type]
        return sorted(events, key=lambda e: e.date)

    def planning_events_by_month(self, event_type: Optional[EventType] = None) -> List[Tuple[str, List[FarmEvent]]]:
        """Incomplete events grouped under 'Month YYYY' headings, earliest month first."""
        grouped: "OrderedDict[str, List[FarmEvent]]" = OrderedDict()
        for event in self.planning_events(event_type):
            grouped.setdefault(event.date.strftime("%B %Y"), []).append(event)
        return list(grouped.items())

    def statistics(self, now: Optional[datetime] = None) -> FarmStatistics:
        return FarmStatistics(
            total_tasks=len(self.tasks),
            pending_tasks=len(self.pending_tasks()),
            total_crops=len(self.crops),
            total_animals=self.total_animal_count(),
            storage_items=len(self.storage_items),
            low_stock_items=len(self.low_stock_items()),
            production_records=len(self.production_records),
            upcoming_events=len(self.upcoming_events(now)),
        )
