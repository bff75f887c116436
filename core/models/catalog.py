# =============================================================================
# core/models/catalog.py - Category Catalog Schemas
# =============================================================================
# The category catalog drives the home page and the category pages:
# - CategoryTeaserItem: One item shown on a category page
# - SubCategory / Category: The two-level category tree
# - CategoryCatalog: All categories, with slug lookup
#
# The catalog is read from data/categories.json or built from the Supabase
# `categories` and `items` tables. Both spell fields in snake_case
# (image_url, teaser_price); API responses use camelCase.
#
# Matching is slug-based and case-insensitive: "Tech Giants", "tech-giants"
# and "TECH-GIANTS" all find the same sub-category.
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field

from lib.utils import slugify


class CategoryTeaserItem(BaseModel):
    """
    An item as shown on a category page.

    `trend` is the percentage price change over the last 24 hours.
    """

    slug: str = Field(..., min_length=1)
    name: str
    image_url: str = Field(default="", alias="imageUrl")
    teaser_price: float = Field(default=0.0, alias="teaserPrice")
    trend: float = Field(
        default=0.0,
        description="Percentage change over the last 24 hours"
    )

    model_config = ConfigDict(populate_by_name=True)


class SubCategory(BaseModel):
    """A child category (one level deep)."""

    slug: str
    label: str = ""
    icon: str = ""
    description: str = ""
    items: list[CategoryTeaserItem] = Field(default_factory=list)

    def matches(self, name: str) -> bool:
        return slugify(name) == slugify(self.slug)


class Category(SubCategory):
    """A top-level category with optional sub-categories."""

    sub_categories: list[SubCategory] = Field(
        default_factory=list,
        alias="subCategories"
    )

    model_config = ConfigDict(populate_by_name=True)

    def find_sub(self, name: str) -> SubCategory | None:
        """Find a sub-category by slug or display name (case-insensitive)."""
        return next((sub for sub in self.sub_categories if sub.matches(name)), None)


class CategorySummary(BaseModel):
    """Category listing entry for the home page."""

    slug: str
    label: str
    icon: str = ""
    item_count: int = Field(default=0, alias="itemCount")
    sub_categories: list[str] = Field(default_factory=list, alias="subCategories")

    model_config = ConfigDict(populate_by_name=True)


class CategoryCatalog(BaseModel):
    """All categories known to the app."""

    categories: list[Category] = Field(default_factory=list)

    def find(self, name: str) -> Category | None:
        """Find a top-level category by slug or display name (case-insensitive)."""
        return next((cat for cat in self.categories if cat.matches(name)), None)

    def slugs(self) -> list[str]:
        return [cat.slug for cat in self.categories]

    def summaries(self) -> list[CategorySummary]:
        return [
            CategorySummary(
                slug=cat.slug,
                label=cat.label or cat.slug,
                icon=cat.icon,
                item_count=len(cat.items),
                sub_categories=[sub.slug for sub in cat.sub_categories],
            )
            for cat in self.categories
        ]
