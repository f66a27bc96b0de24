"""조합 레시피 — 재료 multiset 정확 일치 판정"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CraftingRecipe:
    """레시피 — 불변. inputs는 정렬된 tuple로 보관 (순서 무관)."""

    inputs: tuple[str, ...]
    result: str
    label: str = ""

    def __post_init__(self) -> None:
        if not self.inputs:
            raise ValueError(f"Recipe for {self.result} has no inputs")
        object.__setattr__(self, "inputs", tuple(sorted(self.inputs)))

    @property
    def arity(self) -> int:
        return len(self.inputs)

    def matches(self, item_ids: Iterable[str]) -> bool:
        """multiset 동일성. 부분집합 X, 개수까지 정확히 일치."""
        candidate = sorted(item_ids)
        return len(candidate) == self.arity and tuple(candidate) == self.inputs


class RecipeBook:
    """레시피 저장소. recipes.json 로드."""

    def __init__(self) -> None:
        self._recipes: list[CraftingRecipe] = []

    def load_from_json(self, path: str | Path) -> int:
        """recipes.json 로드. 반환: 로드된 수량."""
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            raw_list: list[dict] = json.load(f)

        count = 0
        for raw in raw_list:
            try:
                self.register(
                    CraftingRecipe(
                        inputs=tuple(raw["inputs"]),
                        result=raw["result"],
                        label=raw.get("label", ""),
                    )
                )
                count += 1
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(
                    "Failed to load recipe: %s — %s", raw.get("result", "?"), e
                )

        logger.info("Loaded %d recipes from %s", count, path)
        return count

    def register(self, recipe: CraftingRecipe) -> None:
        """같은 재료 조합이 이미 있으면 덮어쓴다 (조합당 결과 하나)."""
        for i, existing in enumerate(self._recipes):
            if existing.inputs == recipe.inputs:
                logger.warning(
                    "Overwriting recipe %s: %s → %s",
                    recipe.inputs,
                    existing.result,
                    recipe.result,
                )
                self._recipes[i] = recipe
                return
        self._recipes.append(recipe)

    def match(self, item_ids: Iterable[str]) -> Optional[CraftingRecipe]:
        """일치하는 레시피. 없으면 None."""
        candidate = list(item_ids)
        for recipe in self._recipes:
            if recipe.matches(candidate):
                return recipe
        return None

    def get_all(self) -> list[CraftingRecipe]:
        return list(self._recipes)

    def count(self) -> int:
        return len(self._recipes)
