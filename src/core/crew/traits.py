"""Trait 저장소 + 부여 규칙"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from .models import CrewMember, TraitEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TraitDefinition:
    """trait 정의 — 불변. traits.json에서 로드."""

    trait_id: str
    label: str
    kind: str = "buff"  # "buff" | "debuff" | "perk" | "flaw"
    max_rank: int = 1
    heat_relief: int = 0  # 처음 적용 시 줄어드는 heat
    reapply_heat_relief: Optional[int] = None  # 이미 가진 상태에서 재적용 시 (None → heat_relief)
    description: str = ""

    def relief_for(self, already_held: bool) -> int:
        if already_held and self.reapply_heat_relief is not None:
            return self.reapply_heat_relief
        return self.heat_relief


class TraitCatalog:
    """trait 정의 저장소. JSON 로드 + 동적 등록."""

    def __init__(self) -> None:
        self._traits: dict[str, TraitDefinition] = {}

    def load_from_json(self, path: str | Path) -> int:
        """traits.json 로드. 반환: 로드된 수량."""
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            raw_list: list[dict] = json.load(f)

        count = 0
        for raw in raw_list:
            try:
                trait = TraitDefinition(
                    trait_id=raw["trait_id"],
                    label=raw["label"],
                    kind=raw.get("kind", "buff"),
                    max_rank=int(raw.get("max_rank", 1)),
                    heat_relief=int(raw.get("heat_relief", 0)),
                    reapply_heat_relief=(
                        int(raw["reapply_heat_relief"])
                        if raw.get("reapply_heat_relief") is not None
                        else None
                    ),
                    description=raw.get("description", ""),
                )
                self._traits[trait.trait_id] = trait
                count += 1
            except (KeyError, ValueError) as e:
                logger.warning(
                    "Failed to load trait: %s — %s", raw.get("trait_id", "?"), e
                )

        logger.info("Loaded %d traits from %s", count, path)
        return count

    def register(self, trait: TraitDefinition) -> None:
        if trait.trait_id in self._traits:
            logger.warning("Overwriting existing trait: %s", trait.trait_id)
        self._traits[trait.trait_id] = trait

    def get(self, trait_id: str) -> Optional[TraitDefinition]:
        return self._traits.get(trait_id)

    def max_ranks(self) -> dict[str, int]:
        """trait_id → max_rank (아이템 카탈로그 검증용)"""
        return {t.trait_id: t.max_rank for t in self._traits.values()}

    def __contains__(self, trait_id: object) -> bool:
        return trait_id in self._traits

    def count(self) -> int:
        return len(self._traits)


def grant_trait(member: CrewMember, trait_id: str, rank: int = 1) -> CrewMember:
    """trait 부여/갱신.

    같은 id가 있으면 제거 후 지정 rank로 다시 추가 (중복 X, 누적 X).
    캐릭터 생성 시의 rank 상승 규칙과는 별개.
    """
    traits = [t for t in member.traits if t.trait_id != trait_id]
    traits.append(TraitEntry(trait_id=trait_id, rank=rank))
    return replace(member, traits=tuple(traits))
