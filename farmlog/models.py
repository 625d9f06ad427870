# farmlog/models.py

from datetime import datetime, time, timedelta
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


def local_naive(value: datetime) -> datetime:
    """Converts an aware datetime to naive local time. Naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def _calendar_days(start: datetime, end: datetime) -> int:
    """Whole days from start to end, truncated toward zero like a day-component difference."""
    return int((end - start) / timedelta(days=1))


# --- Enumerations ---

class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskCategory(str, Enum):
    WATERING = "watering"
    FEEDING = "feeding"
    HARVESTING = "harvesting"
    CLEANING = "cleaning"
    MAINTENANCE = "maintenance"
    VETERINARY = "veterinary"
    PLANTING = "planting"
    OTHER = "other"


class CropStage(str, Enum):
    PLANTED = "planted"
    GERMINATING = "germinating"
    GROWING = "growing"
    FLOWERING = "flowering"
    FRUITING = "fruiting"
    READY_TO_HARVEST = "ready_to_harvest"
    HARVESTED = "harvested"


class CropStatus(str, Enum):
    HEALTHY = "healthy"
    NEEDS_ATTENTION = "needs_attention"
    DISEASED = "diseased"
    PEST = "pest"
    DROUGHT = "drought"


class CropType(str, Enum):
    TOMATO = "tomato"
    POTATO = "potato"
    CARROT = "carrot"
    CORN = "corn"
    WHEAT = "wheat"
    LETTUCE = "lettuce"
    CUCUMBER = "cucumber"
    PEPPER = "pepper"
    ONION = "onion"
    STRAWBERRY = "strawberry"
    APPLE = "apple"
    OTHER = "other"


class AnimalSpecies(str, Enum):
    CHICKEN = "chicken"
    COW = "cow"
    PIG = "pig"
    SHEEP = "sheep"
    GOAT = "goat"
    DUCK = "duck"
    TURKEY = "turkey"
    RABBIT = "rabbit"


class HealthStatus(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    SICK = "sick"


class ProductType(str, Enum):
    EGGS = "eggs"
    MILK = "milk"
    MEAT = "meat"
    WOOL = "wool"
    HONEY = "honey"


class StorageCategory(str, Enum):
    FEED = "feed"
    FERTILIZER = "fertilizer"
    SEEDS = "seeds"
    MEDICINE = "medicine"
    TOOLS = "tools"
    SUPPLIES = "supplies"


class EventType(str, Enum):
    VETERINARY_VISIT = "veterinary_visit"
    VACCINATION = "vaccination"
    HARVEST = "harvest"
    PLANTING = "planting"
    MAINTENANCE = "maintenance"
    INSPECTION = "inspection"
    TREATMENT = "treatment"
    OTHER = "other"


class FarmboardItemType(str, Enum):
    CROP = "crop"
    ANIMAL = "animal"
    TASK = "task"
    EVENT = "event"


class FarmboardStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    PENDING = "pending"
    ARCHIVED = "archived"


class WeightUnit(str, Enum):
    KILOGRAMS = "kg"
    POUNDS = "lbs"
    GRAMS = "g"


class VolumeUnit(str, Enum):
    LITERS = "L"
    GALLONS = "gal"
    MILLILITERS = "mL"


class AreaUnit(str, Enum):
    SQUARE_METERS = "m²"
    SQUARE_FEET = "ft²"
    ACRES = "acres"
    HECTARES = "ha"


class PrimaryUnit(str, Enum):
    KILOGRAMS = "kilograms"
    LITERS = "liters"
    PIECES = "pieces"


# --- Entities ---

class FarmRecord(BaseModel):
    """
    Base for everything the store persists.

    Dates are kept as naive local time, so an aware datetime (an offset in
    stored JSON, or a caller passing a tz-aware value) is converted to local
    time and stripped on validation. Non-finite floats are written as
    Infinity/NaN so they load back instead of turning into null.
    """
    model_config = ConfigDict(ser_json_inf_nan="constants")

    @field_validator("*")
    @classmethod
    def _local_naive(cls, value):
        return local_naive(value) if isinstance(value, datetime) else value


class FarmTask(FarmRecord):
    """A to-do item on the farm."""
    id: UUID = Field(default_factory=uuid4)
    title: str
    description: str = ""
    is_completed: bool = False
    due_date: datetime
    priority: TaskPriority = TaskPriority.MEDIUM
    category: TaskCategory = TaskCategory.OTHER
    created_date: datetime = Field(default_factory=datetime.now)


class Crop(FarmRecord):
    """Represents a planting tracked through its growth stages."""
    id: UUID = Field(default_factory=uuid4)
    name: str
    variety: str = ""
    planting_area: str = ""
    planting_date: datetime
    expected_harvest_date: datetime
    current_stage: CropStage = CropStage.PLANTED
    status: CropStatus = CropStatus.HEALTHY
    notes: str = ""
    harvest_amount: float = 0.0
    unit_of_measure: str = "kg"
    crop_type: CropType = CropType.OTHER

    def days_until_harvest(self, now: Optional[datetime] = None) -> int:
        return _calendar_days(now or datetime.now(), self.expected_harvest_date)

    def days_since_planting(self, now: Optional[datetime] = None) -> int:
        return _calendar_days(self.planting_date, now or datetime.now())


class Animal(FarmRecord):
    """A group (or single head) of livestock of one species and breed."""
    id: UUID = Field(default_factory=uuid4)
    species: AnimalSpecies
    breed: str = ""
    name: Optional[str] = None
    count: int = 1
    age: str = ""
    health_status: HealthStatus = HealthStatus.GOOD
    last_vaccination: Optional[datetime] = None
    next_vaccination: Optional[datetime] = None
    notes: str = ""
    is_high_producer: bool = False

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        return f"{self.breed} {self.species.value.title()}".strip()


class ProductionRecord(FarmRecord):
    """A quantity of product collected on a given day."""
    id: UUID = Field(default_factory=uuid4)
    date: datetime = Field(default_factory=datetime.now)
    product_type: ProductType
    amount: float = Field(ge=0)
    unit: str
    animal_id: Optional[UUID] = None
    notes: str = ""

    @property
    def formatted_amount(self) -> str:
        if self.amount == int(self.amount):
            return f"{int(self.amount)} {self.unit}"
        return f"{self.amount:.1f} {self.unit}"


class WeightChangeRecord(FarmRecord):
    """A weighing result expressed as a signed change for one animal group."""
    id: UUID = Field(default_factory=uuid4)
    animal_id: UUID
    date: datetime = Field(default_factory=datetime.now)
    weight_change: float
    unit: str = "kg"
    notes: str = ""

    @property
    def is_positive_change(self) -> bool:
        return self.weight_change >= 0

    @property
    def formatted_change(self) -> str:
        sign = "+" if self.is_positive_change else "-"
        return f"{sign}{abs(self.weight_change):.1f} {self.unit}"


class StorageItem(FarmRecord):
    """An inventory line in the farm store room."""
    id: UUID = Field(default_factory=uuid4)
    name: str
    category: StorageCategory
    current_stock: float
    minimum_stock: float
    unit: str
    expiration_date: Optional[datetime] = None
    last_updated: datetime = Field(default_factory=datetime.now)
    cost: float = 0.0
    supplier: str = ""

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock <= self.minimum_stock

    @property
    def stock_ratio(self) -> float:
        """Fill level relative to twice the minimum, clamped to [0, 1] for progress bars."""
        if self.minimum_stock <= 0:
            return 1.0
        return max(0.0, min(1.0, self.current_stock / (self.minimum_stock * 2)))


class FarmEvent(FarmRecord):
    """A scheduled farm activity, optionally tied to an animal or crop."""
    id: UUID = Field(default_factory=uuid4)
    title: str
    description: str = ""
    date: datetime
    event_type: EventType = EventType.OTHER
    is_completed: bool = False
    reminder_date: Optional[datetime] = None
    related_animal_id: Optional[UUID] = None
    related_crop_id: Optional[UUID] = None

    def days_until(self, now: Optional[datetime] = None) -> int:
        return _calendar_days(now or datetime.now(), self.date)


class FarmboardItem(FarmRecord):
    """A quick-add entry on the farmboard activity ledger."""
    id: UUID = Field(default_factory=uuid4)
    name: str
    item_type: FarmboardItemType
    quantity: float = 1.0
    unit: str = ""
    created_at: datetime = Field(default_factory=datetime.now)
    status: FarmboardStatus = FarmboardStatus.ACTIVE
    notes: str = ""
    scheduled_date: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.scheduled_date is None:
            return False
        return self.scheduled_date <= (now or datetime.now())

    @property
    def formatted_quantity(self) -> str:
        amount = int(self.quantity) if self.quantity == int(self.quantity) else self.quantity
        return f"{amount} {self.unit}".strip()


class AppSettings(FarmRecord):
    """User preferences. Stored as a single record, replaced wholesale."""
    weight_unit: WeightUnit = WeightUnit.KILOGRAMS
    volume_unit: VolumeUnit = VolumeUnit.LITERS
    area_unit: AreaUnit = AreaUnit.SQUARE_METERS
    primary_unit: PrimaryUnit = PrimaryUnit.KILOGRAMS
    enable_notifications: bool = True
    enable_task_reminders: bool = True
    enable_watering_reminders: bool = True
    enable_vaccination_reminders: bool = True
    reminder_time: time = time(9, 0)


class FarmStatistics(BaseModel):
    """Headline counts shown on the settings and dashboard screens."""
    total_tasks: int
    pending_tasks: int
    total_crops: int
    total_animals: int
    storage_items: int
    low_stock_items: int
    production_records: int
    upcoming_events: int
