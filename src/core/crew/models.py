"""조직원 도메인 모델 (DB 무관)"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from src.core.item.models import Slot


@dataclass(frozen=True)
class TraitEntry:
    trait_id: str
    rank: int = 1

    def __post_init__(self) -> None:
        if self.rank < 1:
            raise ValueError(f"Trait {self.trait_id} rank must be >= 1")


@dataclass(frozen=True)
class CrewMember:
    """조직원 한 명. 장비 맵과 trait 목록을 소유."""

    member_id: str
    name: str

    # 자원
    hp: int
    max_hp: int
    stress: int = 0
    counters: Mapping[str, int] = field(default_factory=dict)  # {"drug_usage": 2}

    traits: tuple[TraitEntry, ...] = ()
    equipment: Mapping[Slot, str] = field(default_factory=dict)  # slot → item_id

    def __post_init__(self) -> None:
        object.__setattr__(self, "counters", MappingProxyType(dict(self.counters)))
        object.__setattr__(self, "equipment", MappingProxyType(dict(self.equipment)))
        object.__setattr__(self, "traits", tuple(self.traits))

    def equipped(self, slot: Slot) -> Optional[str]:
        return self.equipment.get(slot)

    def trait(self, trait_id: str) -> Optional[TraitEntry]:
        for entry in self.traits:
            if entry.trait_id == trait_id:
                return entry
        return None


@dataclass(frozen=True)
class PartyResources:
    """파티 단위 스칼라 자원"""

    energy: int
    max_energy: int
    heat: int = 0
