from src.item_supply.catalog import (
    CatalogError,
    ItemFilter,
    PlayerCatalog,
    SupplyDraw,
    to_offered_item,
)
from src.item_supply.pricing import dynamic_value, form_for

__all__ = [
    "CatalogError",
    "ItemFilter",
    "PlayerCatalog",
    "SupplyDraw",
    "dynamic_value",
    "form_for",
    "to_offered_item",
]
