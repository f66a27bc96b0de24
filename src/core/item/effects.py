"""소비 효과 서술자 — 닫힌 variant 집합

아이템 추가 = 데이터 추가. 새 코드 분기가 필요 없다.
해석은 applicator.apply_effect 하나가 담당.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Heal:
    amount: int


@dataclass(frozen=True)
class RestoreEnergy:
    amount: int  # 파티 단위 자원


@dataclass(frozen=True)
class GrantTrait:
    trait_id: str
    rank: int = 1


@dataclass(frozen=True)
class ReduceStress:
    amount: int


@dataclass(frozen=True)
class IncrementCounter:
    counter: str  # "drug_usage"
    amount: int = 1


@dataclass(frozen=True)
class ReduceHeat:
    amount: int  # 파티 단위 자원


@dataclass(frozen=True)
class Composite:
    """여러 효과 묶음. 전부 적용되거나 전부 적용되지 않는다."""

    effects: tuple[Effect, ...]


Effect = Union[
    Heal, RestoreEnergy, GrantTrait, ReduceStress, IncrementCounter, ReduceHeat, Composite
]

_AMOUNT_EFFECTS: dict[str, type] = {
    "heal": Heal,
    "restore_energy": RestoreEnergy,
    "reduce_stress": ReduceStress,
    "reduce_heat": ReduceHeat,
}


def parse_effect(raw: dict[str, Any]) -> Effect:
    """JSON 객체 → Effect. 형식 오류는 ValueError.

    {"type": "heal", "amount": 50}
    {"type": "grant_trait", "trait_id": "drunk", "rank": 1}
    {"type": "increment_counter", "counter": "drug_usage"}
    {"type": "composite", "effects": [...]}
    """
    effect_type = raw.get("type")
    if effect_type in _AMOUNT_EFFECTS:
        amount = int(raw["amount"])
        if amount < 0:
            raise ValueError(f"{effect_type}: amount must be >= 0, got {amount}")
        return _AMOUNT_EFFECTS[effect_type](amount)
    if effect_type == "grant_trait":
        rank = int(raw.get("rank", 1))
        if rank < 1:
            raise ValueError(f"grant_trait: rank must be >= 1, got {rank}")
        return GrantTrait(trait_id=str(raw["trait_id"]), rank=rank)
    if effect_type == "increment_counter":
        return IncrementCounter(
            counter=str(raw["counter"]), amount=int(raw.get("amount", 1))
        )
    if effect_type == "composite":
        parts = raw.get("effects") or []
        if not parts:
            raise ValueError("composite: needs at least one effect")
        return Composite(effects=tuple(parse_effect(p) for p in parts))
    raise ValueError(f"Unknown effect type: {effect_type!r}")


def iter_effects(effect: Effect):
    """Composite를 펼쳐 단일 효과들을 순서대로 반환."""
    if isinstance(effect, Composite):
        for part in effect.effects:
            yield from iter_effects(part)
    else:
        yield effect

