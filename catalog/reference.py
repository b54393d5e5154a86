"""
catalog/reference.py -- Read-only category and attribute reference data.

The admin UI calls these to fill the category dropdown and to render the
attribute inputs for the chosen category. Products store their attribute
values in an open dict; nothing here validates those values.

The data never changes after construction, so no locking is needed. Lookups
return fresh lists so callers cannot mutate the catalog's copies.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from catalog.models import AttributeOption, Category

DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category(id="bulb", name="Лампочки"),
    Category(id="cable", name="Кабели"),
    Category(id="equipment", name="Оборудование"),
)

DEFAULT_ATTRIBUTE_OPTIONS: dict[str, tuple[AttributeOption, ...]] = {
    "bulb": (
        AttributeOption(key="power", label="Мощность (Вт)", type="number"),
        AttributeOption(key="color", label="Цвет", type="text"),
        AttributeOption(key="temperature", label="Температура (K)", type="number"),
        AttributeOption(key="socketType", label="Тип цоколя", type="text"),
    ),
    "cable": (
        AttributeOption(key="length", label="Длина (м)", type="number"),
        AttributeOption(key="material", label="Материал", type="text"),
        AttributeOption(key="color", label="Цвет", type="text"),
    ),
    "equipment": (
        AttributeOption(key="manufacturer", label="Производитель", type="text"),
        AttributeOption(key="model", label="Модель", type="text"),
        AttributeOption(key="warranty", label="Гарантия (мес.)", type="number"),
    ),
}


class AttributesNotFound(LookupError):
    """No attribute options are registered for this category id."""

    def __init__(self, category_id: str) -> None:
        super().__init__(f"attributes not found for category {category_id!r}")
        self.category_id = category_id


class CategoryCatalog:
    def __init__(
        self,
        categories: Iterable[Category] = DEFAULT_CATEGORIES,
        attribute_options: Mapping[str, Iterable[AttributeOption]] = DEFAULT_ATTRIBUTE_OPTIONS,
    ) -> None:
        self._categories = tuple(categories)
        self._options = {cid: tuple(opts) for cid, opts in attribute_options.items()}

    def list_categories(self) -> list[Category]:
        return list(self._categories)

    def get_attribute_options(self, category_id: str) -> list[AttributeOption]:
        """Return the attribute options for a category. Raises AttributesNotFound."""
        try:
            return list(self._options[category_id])
        except KeyError:
            raise AttributesNotFound(category_id) from None
