"""아이템 시스템 Core — 순수 Python, DB 무관"""

from .errors import ErrorKind, InventoryError
from .models import (
    Container,
    ContainerKind,
    ItemDefinition,
    ItemKind,
    ItemStack,
    Slot,
)
from .recipes import CraftingRecipe, RecipeBook
from .registry import ItemCatalog

__all__ = [
    "ErrorKind",
    "InventoryError",
    "Container",
    "ContainerKind",
    "ItemDefinition",
    "ItemKind",
    "ItemStack",
    "Slot",
    "CraftingRecipe",
    "RecipeBook",
    "ItemCatalog",
]
