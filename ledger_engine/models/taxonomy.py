"""
Category Taxonomy

Static reference data: categories, their subcategories, and the lookup that
maps a subcategory to its parent category.

DESIGN DECISION: Categories are identified by a stable enum, resolved ONCE
when the taxonomy is built. Aggregation code never matches display names.
Anything that cannot be resolved lands in FALLBACK_CATEGORY, and that
fallback is applied here at the boundary and nowhere else.
"""

from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field


class CategoryId(str, Enum):
    """Stable category identifiers."""
    FOOD = "food"
    HOUSING = "housing"
    TRANSPORTATION = "transportation"
    HEALTH = "health"
    ENTERTAINMENT = "entertainment"
    EDUCATION = "education"
    SHOPPING = "shopping"
    PETS = "pets"
    WORK = "work"
    TAX = "tax"
    OTHERS = "others"


FALLBACK_CATEGORY = CategoryId.OTHERS


class Category(BaseModel):
    """A top-level spending category."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: CategoryId
    name: str = Field(..., min_length=1, max_length=100)
    icon: str = Field(default="category")
    color: str = Field(
        default="#3F51B5",
        pattern="^#[0-9A-Fa-f]{6}$",
        description="Hex color used by the presentation layer"
    )
    is_active: bool = True
    sort_order: int = Field(default=0, ge=0)
    budget_allocation_percentage: float = Field(
        default=0.0,
        ge=0.0,
        le=100.0,
        description="Share of the budget suggested for this category"
    )
    is_default: bool = False


class SubCategory(BaseModel):
    """A subcategory. Always belongs to exactly one category."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=100)
    category_id: CategoryId
    is_default: bool = False


class Taxonomy:
    """
    Immutable lookup over categories and subcategories.

    Subcategories can be resolved either by id or by name; both indexes are
    built at construction time so resolution is a dict lookup.
    """

    def __init__(
        self,
        categories: Iterable[Category],
        subcategories: Iterable[SubCategory],
    ):
        self._categories = {c.id: c for c in categories}
        self._subcategories: dict[str, SubCategory] = {}
        self._by_name: dict[str, SubCategory] = {}

        for sub in subcategories:
            if sub.category_id not in self._categories:
                raise ValueError(
                    f"Subcategory '{sub.id}' references unknown category "
                    f"'{sub.category_id.value}'"
                )
            self._subcategories[sub.id] = sub
            self._by_name[sub.name.casefold()] = sub

    @property
    def categories(self) -> list[Category]:
        """Categories ordered by sort order."""
        return sorted(self._categories.values(), key=lambda c: (c.sort_order, c.id.value))

    @property
    def active_categories(self) -> list[Category]:
        return [c for c in self.categories if c.is_active]

    def category(self, category_id: CategoryId) -> Optional[Category]:
        return self._categories.get(category_id)

    def subcategories_of(self, category_id: CategoryId) -> list[SubCategory]:
        return [s for s in self._subcategories.values() if s.category_id == category_id]

    def subcategory(self, key: str) -> Optional[SubCategory]:
        """Find a subcategory by id, then by case-insensitive name."""
        sub = self._subcategories.get(key)
        if sub is None:
            sub = self._by_name.get(key.strip().casefold())
        return sub

    def resolve_category(self, subcategory_key: Optional[str]) -> CategoryId:
        """
        Resolve a subcategory id or name to its parent category.

        Unknown or empty keys resolve to FALLBACK_CATEGORY.
        """
        if not subcategory_key:
            return FALLBACK_CATEGORY
        sub = self.subcategory(subcategory_key)
        if sub is None:
            return FALLBACK_CATEGORY
        return sub.category_id

    def budget_allocations(self) -> dict[CategoryId, float]:
        """Budget allocation percentage per active category."""
        return {
            c.id: c.budget_allocation_percentage
            for c in self.active_categories
        }


# =============================================================================
# DEFAULT REFERENCE DATA
# =============================================================================

_DEFAULT_CATEGORY_SPECS = [
    # id, icon, color
    (CategoryId.FOOD, "restaurant", "#FF9500"),
    (CategoryId.HOUSING, "home", "#007AFF"),
    (CategoryId.TRANSPORTATION, "directions_car", "#34C759"),
    (CategoryId.HEALTH, "local_hospital", "#FF2D92"),
    (CategoryId.ENTERTAINMENT, "movie", "#9D73E3"),
    (CategoryId.EDUCATION, "school", "#5856D6"),
    (CategoryId.SHOPPING, "shopping_cart", "#FF3B30"),
    (CategoryId.PETS, "pets", "#64D2FF"),
    (CategoryId.WORK, "work", "#5AC8FA"),
    (CategoryId.TAX, "account_balance", "#FFD60A"),
    (CategoryId.OTHERS, "category", "#3F51B5"),
]

_DEFAULT_SUBCATEGORIES = {
    CategoryId.FOOD: ["restaurant", "kitchen_shopping"],
    CategoryId.HOUSING: [
        "rent", "dues", "mortgage", "electricity", "water", "heating",
        "internet_phone", "other_bills", "general_shopping",
    ],
    CategoryId.TRANSPORTATION: [
        "fuel", "public_transport", "car_maintenance", "car_rental",
        "taxi_uber", "car_insurance", "vehicle_tax", "parking_fees",
    ],
    CategoryId.HEALTH: [
        "doctor_appointment", "medicines", "gym_membership", "cosmetics",
    ],
    CategoryId.ENTERTAINMENT: [
        "cinema_theater", "concerts_events", "subscriptions",
        "books_magazines", "travel_vacation", "games_apps",
    ],
    CategoryId.EDUCATION: [
        "course_fees", "education_materials", "seminars", "online_courses",
    ],
    CategoryId.SHOPPING: [
        "electronics", "clothing", "home_goods", "gifts", "perfume",
    ],
    CategoryId.PETS: ["pet_food_toys", "vet_services", "pet_insurance"],
    CategoryId.WORK: [
        "work_meals", "office_supplies", "business_travel",
        "work_education", "freelance_payments",
    ],
    CategoryId.TAX: ["tax_payments"],
    CategoryId.OTHERS: ["other_expenses"],
}


def default_categories() -> list[Category]:
    return [
        Category(
            id=category_id,
            name=category_id.value.replace("_", " ").title(),
            icon=icon,
            color=color,
            sort_order=index,
            is_default=True,
        )
        for index, (category_id, icon, color) in enumerate(_DEFAULT_CATEGORY_SPECS)
    ]


def default_subcategories() -> list[SubCategory]:
    return [
        SubCategory(
            id=key,
            name=key.replace("_", " ").capitalize(),
            category_id=category_id,
            is_default=True,
        )
        for category_id, keys in _DEFAULT_SUBCATEGORIES.items()
        for key in keys
    ]


def default_taxonomy() -> Taxonomy:
    """Build the taxonomy shipped with the application."""
    return Taxonomy(default_categories(), default_subcategories())
