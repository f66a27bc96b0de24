"""효과 적용기 — (조직원, 파티 자원, 효과) → (조직원', 파티 자원')

순수 함수. 입력을 변경하지 않는다.
상한/하한 클램핑: hp [0, max_hp], energy [0, max_energy], stress/heat >= 0.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from src.core.crew.models import CrewMember, PartyResources
from src.core.crew.traits import grant_trait

from .effects import (
    Composite,
    Effect,
    GrantTrait,
    Heal,
    IncrementCounter,
    ReduceHeat,
    ReduceStress,
    RestoreEnergy,
)

logger = logging.getLogger(__name__)


def apply_effect(
    member: CrewMember,
    resources: PartyResources,
    effect: Effect,
) -> tuple[CrewMember, PartyResources]:
    """효과 하나(또는 Composite)를 적용한 새 값을 반환.

    Composite는 앞에서부터 순서대로 접는다. 중간에 예외가 나면
    호출자는 원본 값을 그대로 가지고 있으므로 부분 적용은 관찰되지 않는다.
    """
    if isinstance(effect, Heal):
        hp = min(member.max_hp, member.hp + effect.amount)
        return replace(member, hp=max(member.hp, hp)), resources

    if isinstance(effect, RestoreEnergy):
        energy = min(resources.max_energy, resources.energy + effect.amount)
        return member, replace(resources, energy=max(resources.energy, energy))

    if isinstance(effect, GrantTrait):
        return grant_trait(member, effect.trait_id, effect.rank), resources

    if isinstance(effect, ReduceStress):
        stress = max(0, member.stress - effect.amount)
        return replace(member, stress=stress), resources

    if isinstance(effect, IncrementCounter):
        counters = dict(member.counters)
        counters[effect.counter] = counters.get(effect.counter, 0) + effect.amount
        return replace(member, counters=counters), resources

    if isinstance(effect, ReduceHeat):
        heat = max(0, resources.heat - effect.amount)
        return member, replace(resources, heat=heat)

    if isinstance(effect, Composite):
        for part in effect.effects:
            member, resources = apply_effect(member, resources, part)
        return member, resources

    raise TypeError(f"Unsupported effect: {effect!r}")
