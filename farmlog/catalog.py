# farmlog/catalog.py
"""
Display and domain attributes for the closed enumerations in models.py.

The enums only carry their stored value; everything attached to a variant
(icons, colours, base weights, default units) lives in the tables below.
"""

from typing import NamedTuple

from .models import (
    AnimalSpecies,
    CropStage,
    CropStatus,
    CropType,
    EventType,
    HealthStatus,
    PrimaryUnit,
    ProductType,
    StorageCategory,
    TaskCategory,
    TaskPriority,
)


class SpeciesInfo(NamedTuple):
    label: str
    icon: str
    base_weight: float  # kg per head
    product_type: ProductType


class ProductInfo(NamedTuple):
    label: str
    icon: str
    color: str
    default_unit: str


class CropInfo(NamedTuple):
    common_name: str
    emoji: str


class EventTypeInfo(NamedTuple):
    label: str
    icon: str
    color: str


SPECIES = {
    AnimalSpecies.CHICKEN: SpeciesInfo("Chicken", "🐔", 2.0, ProductType.EGGS),
    AnimalSpecies.COW: SpeciesInfo("Cow", "🐄", 600.0, ProductType.MILK),
    AnimalSpecies.PIG: SpeciesInfo("Pig", "🐷", 100.0, ProductType.MEAT),
    AnimalSpecies.SHEEP: SpeciesInfo("Sheep", "🐑", 70.0, ProductType.WOOL),
    AnimalSpecies.GOAT: SpeciesInfo("Goat", "🐐", 50.0, ProductType.MILK),
    AnimalSpecies.DUCK: SpeciesInfo("Duck", "🦆", 3.0, ProductType.EGGS),
    AnimalSpecies.TURKEY: SpeciesInfo("Turkey", "🦃", 9.0, ProductType.EGGS),
    AnimalSpecies.RABBIT: SpeciesInfo("Rabbit", "🐰", 2.5, ProductType.MEAT),
}

PRODUCTS = {
    ProductType.EGGS: ProductInfo("Eggs", "circle.fill", "yellow", "pieces"),
    ProductType.MILK: ProductInfo("Milk", "drop.fill", "white", "liters"),
    ProductType.MEAT: ProductInfo("Meat", "flame.fill", "red", "kg"),
    ProductType.WOOL: ProductInfo("Wool", "circle.dotted", "gray", "kg"),
    ProductType.HONEY: ProductInfo("Honey", "hexagon.fill", "orange", "kg"),
}

CROPS = {
    CropType.TOMATO: CropInfo("Tomato", "🍅"),
    CropType.POTATO: CropInfo("Potato", "🥔"),
    CropType.CARROT: CropInfo("Carrot", "🥕"),
    CropType.CORN: CropInfo("Corn", "🌽"),
    CropType.WHEAT: CropInfo("Wheat", "🌾"),
    CropType.LETTUCE: CropInfo("Lettuce", "🥬"),
    CropType.CUCUMBER: CropInfo("Cucumber", "🥒"),
    CropType.PEPPER: CropInfo("Pepper", "🌶️"),
    CropType.ONION: CropInfo("Onion", "🧅"),
    CropType.STRAWBERRY: CropInfo("Strawberry", "🍓"),
    CropType.APPLE: CropInfo("Apple", "🍎"),
    CropType.OTHER: CropInfo("Other", "🌱"),
}

EVENT_TYPES = {
    EventType.VETERINARY_VISIT: EventTypeInfo("Veterinary Visit", "stethoscope", "blue"),
    EventType.VACCINATION: EventTypeInfo("Vaccination", "syringe", "green"),
    EventType.HARVEST: EventTypeInfo("Harvest", "scissors", "orange"),
    EventType.PLANTING: EventTypeInfo("Planting", "seedling", "mint"),
    EventType.MAINTENANCE: EventTypeInfo("Maintenance", "wrench.fill", "gray"),
    EventType.INSPECTION: EventTypeInfo("Inspection", "magnifyingglass", "purple"),
    EventType.TREATMENT: EventTypeInfo("Treatment", "cross.fill", "red"),
    EventType.OTHER: EventTypeInfo("Other", "calendar", "secondary"),
}

TASK_PRIORITY_COLORS = {
    TaskPriority.LOW: "green",
    TaskPriority.MEDIUM: "yellow",
    TaskPriority.HIGH: "orange",
    TaskPriority.URGENT: "red",
}

TASK_CATEGORY_ICONS = {
    TaskCategory.WATERING: "drop.fill",
    TaskCategory.FEEDING: "leaf.fill",
    TaskCategory.HARVESTING: "scissors",
    TaskCategory.CLEANING: "sparkles",
    TaskCategory.MAINTENANCE: "wrench.fill",
    TaskCategory.VETERINARY: "heart.fill",
    TaskCategory.PLANTING: "seedling",
    TaskCategory.OTHER: "circle.fill",
}

CROP_STAGE_LABELS = {
    CropStage.PLANTED: "Planted",
    CropStage.GERMINATING: "Germinating",
    CropStage.GROWING: "Growing",
    CropStage.FLOWERING: "Flowering",
    CropStage.FRUITING: "Fruiting",
    CropStage.READY_TO_HARVEST: "Ready to Harvest",
    CropStage.HARVESTED: "Harvested",
}

CROP_STATUS_LABELS = {
    CropStatus.HEALTHY: "Healthy",
    CropStatus.NEEDS_ATTENTION: "Needs Attention",
    CropStatus.DISEASED: "Diseased",
    CropStatus.PEST: "Pest Problem",
    CropStatus.DROUGHT: "Drought Stress",
}

HEALTH_STATUS_COLORS = {
    HealthStatus.EXCELLENT: "green",
    HealthStatus.GOOD: "mint",
    HealthStatus.FAIR: "yellow",
    HealthStatus.POOR: "orange",
    HealthStatus.SICK: "red",
}

STORAGE_CATEGORY_ICONS = {
    StorageCategory.FEED: "leaf.fill",
    StorageCategory.FERTILIZER: "flask.fill",
    StorageCategory.SEEDS: "seedling",
    StorageCategory.MEDICINE: "cross.fill",
    StorageCategory.TOOLS: "wrench.fill",
    StorageCategory.SUPPLIES: "box.fill",
}

PRIMARY_UNIT_SHORT_NAMES = {
    PrimaryUnit.KILOGRAMS: "kg",
    PrimaryUnit.LITERS: "L",
    PrimaryUnit.PIECES: "pcs",
}


def species_info(species: AnimalSpecies) -> SpeciesInfo:
    return SPECIES[species]


def base_weight(species: AnimalSpecies) -> float:
    return SPECIES[species].base_weight


def product_for_species(species: AnimalSpecies) -> ProductType:
    """The product a species is tracked for on its detail screen."""
    return SPECIES[species].product_type


def product_info(product_type: ProductType) -> ProductInfo:
    return PRODUCTS[product_type]


def crop_info(crop_type: CropType) -> CropInfo:
    return CROPS[crop_type]


def event_type_info(event_type: EventType) -> EventTypeInfo:
    return EVENT_TYPES[event_type]


def primary_unit_short_name(unit: PrimaryUnit) -> str:
    return PRIMARY_UNIT_SHORT_NAMES[unit]
