"""아이템 카탈로그 — JSON 로드 + 동적 등록"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Mapping, Optional

from .effects import Effect, GrantTrait, iter_effects, parse_effect
from .errors import ItemNotFoundError
from .models import ItemDefinition, ItemKind, Slot

logger = logging.getLogger(__name__)


class ItemCatalog:
    """
    아이템 정의 저장소 (읽기 전용 참조 데이터).
    엔진은 item_id로 조회만 한다.
    """

    def __init__(self) -> None:
        self._items: dict[str, ItemDefinition] = {}

    def load_from_json(
        self,
        path: str | Path,
        known_traits: Optional[Mapping[str, int]] = None,
    ) -> int:
        """items.json 로드. 반환: 로드된 수량.

        kind/equip_slot 문자열 → enum 변환, effect 객체 → Effect 변환.
        known_traits(trait_id → max_rank)가 주어지면 효과가 부여하는 trait을 검증하고
        모르는 trait이나 max_rank를 넘는 rank를 부여하는 아이템은 건너뛴다.
        """
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            raw_list: list[dict] = json.load(f)

        count = 0
        for raw in raw_list:
            try:
                definition = self._parse(raw)
                if known_traits is not None and definition.effect is not None:
                    _check_grants(definition.effect, known_traits)
                self._items[definition.item_id] = definition
                count += 1
            except (KeyError, ValueError) as e:
                logger.warning(
                    "Failed to load item: %s — %s", raw.get("item_id", "?"), e
                )

        logger.info("Loaded %d items from %s", count, path)
        return count

    @staticmethod
    def _parse(raw: dict) -> ItemDefinition:
        slot = raw.get("equip_slot")
        effect = raw.get("effect")
        return ItemDefinition(
            item_id=raw["item_id"],
            kind=ItemKind(raw["kind"]),
            name=raw.get("name", raw["item_id"]),
            base_value=int(raw.get("base_value", 0)),
            stackable=bool(raw.get("stackable", True)),
            equip_slot=Slot(slot) if slot else None,
            effect=parse_effect(effect) if effect else None,
            unique=bool(raw.get("unique", False)),
            description=raw.get("description", ""),
        )

    def register(self, definition: ItemDefinition) -> None:
        """동적 정의 등록. 이미 존재하는 item_id면 경고 로그 후 덮어쓴다."""
        if definition.item_id in self._items:
            logger.warning("Overwriting existing item: %s", definition.item_id)
        self._items[definition.item_id] = definition

    def get(self, item_id: str) -> Optional[ItemDefinition]:
        """O(1) 조회. 없으면 None."""
        return self._items.get(item_id)

    def require(self, item_id: str) -> ItemDefinition:
        """조회. 없으면 ItemNotFoundError."""
        definition = self._items.get(item_id)
        if definition is None:
            raise ItemNotFoundError(f"Unknown item: {item_id}")
        return definition

    def get_all(self) -> list[ItemDefinition]:
        return list(self._items.values())

    def by_kind(self, kind: ItemKind) -> list[ItemDefinition]:
        return [d for d in self._items.values() if d.kind == kind]

    def count(self) -> int:
        """등록된 정의 수."""
        return len(self._items)


def _check_grants(effect: Effect, max_ranks: Mapping[str, int]) -> None:
    for part in iter_effects(effect):
        if not isinstance(part, GrantTrait):
            continue
        if part.trait_id not in max_ranks:
            raise ValueError(f"unknown trait {part.trait_id}")
        if part.rank > max_ranks[part.trait_id]:
            raise ValueError(
                f"{part.trait_id} rank {part.rank} > max {max_ranks[part.trait_id]}"
            )
