"""게임 상태 스냅샷 — 불변 값, 트랜잭션마다 새로 생성

트랜잭션은 (현재 스냅샷, 파라미터) → 다음 스냅샷 | 에러.
반쪽짜리 상태는 외부에 노출되지 않는다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Iterable, Mapping

from src.core.crew.models import CrewMember, PartyResources
from src.core.item.container import total_quantity
from src.core.item.errors import InvariantViolation, ItemNotFoundError
from src.core.item.models import Container, ContainerKind, is_mergeable
from src.core.item.registry import ItemCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameState:
    containers: Mapping[ContainerKind, Container] = field(default_factory=dict)
    crew: tuple[CrewMember, ...] = ()
    resources: PartyResources = field(
        default_factory=lambda: PartyResources(energy=0, max_energy=0)
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "containers", MappingProxyType(dict(self.containers)))
        object.__setattr__(self, "crew", tuple(self.crew))

    def container(self, kind: ContainerKind) -> Container:
        try:
            return self.containers[kind]
        except KeyError:
            raise ItemNotFoundError(f"No container: {kind.value}") from None

    def member(self, member_id: str) -> CrewMember:
        for m in self.crew:
            if m.member_id == member_id:
                return m
        raise ItemNotFoundError(f"No crew member: {member_id}")

    def with_container(self, container: Container) -> GameState:
        containers = dict(self.containers)
        containers[container.kind] = container
        return replace(self, containers=containers)

    def with_member(self, member: CrewMember) -> GameState:
        crew = tuple(
            member if m.member_id == member.member_id else m for m in self.crew
        )
        return replace(self, crew=crew)


def new_game_state(
    crew: Iterable[CrewMember],
    capacities: Mapping[ContainerKind, int],
    max_energy: int,
    energy: int | None = None,
    heat: int = 0,
) -> GameState:
    """캐릭터/거처 생성 시점의 상태. 용기는 모두 비어 있다."""
    containers = {
        kind: Container(kind=kind, capacity=capacity)
        for kind, capacity in capacities.items()
    }
    resources = PartyResources(
        energy=max_energy if energy is None else energy,
        max_energy=max_energy,
        heat=heat,
    )
    return GameState(containers=containers, crew=tuple(crew), resources=resources)


def count_item(state: GameState, item_id: str) -> int:
    """용기 + 장비 슬롯 전체의 item_id 수량 합 (보존 검사용)."""
    total = sum(total_quantity(c, item_id) for c in state.containers.values())
    for member in state.crew:
        total += sum(1 for worn in member.equipment.values() if worn == item_id)
    return total


def validate_state(state: GameState, catalog: ItemCatalog) -> None:
    """스냅샷 불변식 검사. 위반 시 InvariantViolation.

    - 용기별 스택 수 <= capacity
    - 용기 간 instance_id 중복 없음
    - 병합 가능 아이템은 용기당 item_id 하나의 스택
    - 멤버당 trait_id 중복 없음
    - 장착 아이템은 정의된 슬롯에만
    """
    seen_instances: set[str] = set()
    for kind, container in state.containers.items():
        if kind != container.kind:
            raise InvariantViolation(
                f"Container keyed {kind.value} reports {container.kind.value}"
            )
        if len(container.stacks) > container.capacity:
            raise InvariantViolation(
                f"{kind.value}: {len(container.stacks)} stacks > {container.capacity}"
            )
        merge_keys: set[str] = set()
        for stack in container.stacks:
            if stack.instance_id in seen_instances:
                raise InvariantViolation(f"Duplicated instance {stack.instance_id}")
            seen_instances.add(stack.instance_id)

            definition = catalog.get(stack.item_id)
            if definition is None or not is_mergeable(definition, stack):
                continue
            if stack.item_id in merge_keys:
                raise InvariantViolation(
                    f"{kind.value}: split stacks of {stack.item_id}"
                )
            merge_keys.add(stack.item_id)

    for member in state.crew:
        trait_ids = [t.trait_id for t in member.traits]
        if len(trait_ids) != len(set(trait_ids)):
            raise InvariantViolation(f"{member.member_id}: duplicated traits")
        for slot, item_id in member.equipment.items():
            definition = catalog.get(item_id)
            if definition is not None and definition.equip_slot != slot:
                raise InvariantViolation(
                    f"{member.member_id}: {item_id} worn in {slot.value}"
                )
