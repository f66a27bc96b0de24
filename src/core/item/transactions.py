"""인벤토리 트랜잭션 — equip, unequip, consume, move, craft (+ trash, grant, buff)

각 연산은 순수 함수: (현재 스냅샷, 파라미터) → 다음 스냅샷.
다음 스냅샷을 전부 계산하고 불변식 검사를 통과한 뒤에만 반환한다.
실패 시 InventoryError를 던지고, 입력 스냅샷은 그대로다.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Mapping, Optional, Sequence

from src.core.crew.traits import TraitCatalog, grant_trait
from src.core.state import GameState, validate_state

from .applicator import apply_effect
from .container import (
    add_stack,
    insert_stack,
    remove_one,
    remove_stack,
    require_stack,
)
from .equipment import take_off, wear
from .errors import (
    ItemNotFoundError,
    NoEffectError,
    NoRecipeError,
    NotConsumableError,
    NotEquippableError,
    SameContainerError,
)
from .models import ContainerKind, Slot
from .recipes import CraftingRecipe, RecipeBook
from .registry import ItemCatalog

logger = logging.getLogger(__name__)

CRAFT_SLOTS = 3


def equip(
    state: GameState,
    catalog: ItemCatalog,
    member_id: str,
    container_kind: ContainerKind,
    instance_id: str,
) -> GameState:
    """용기의 아이템 하나를 장착.

    슬롯이 차 있으면 기존 아이템을 먼저 같은 용기로 돌려보낸다 (암묵적 unequip).
    돌려보낼 자리가 없으면 CapacityExceededError로 전체 중단.
    """
    member = state.member(member_id)
    container = state.container(container_kind)
    stack = require_stack(container, instance_id)
    definition = catalog.require(stack.item_id)
    if not definition.equippable:
        raise NotEquippableError(f"{definition.name} cannot be equipped")
    if stack.custom_name is not None or stack.payload is not None:
        # 장비 슬롯은 item_id만 기억한다
        raise NotEquippableError(f"{definition.name} carries per-instance data")

    slot = definition.equip_slot
    if member.equipped(slot) is not None:
        member, returned_id = take_off(member, slot)
        container = add_stack(container, catalog.require(returned_id), 1)

    container = remove_one(container, instance_id)
    member = wear(member, slot, definition.item_id)

    next_state = state.with_container(container).with_member(member)
    validate_state(next_state, catalog)
    logger.debug(
        "Equipped %s on %s (%s) from %s",
        definition.item_id,
        member_id,
        slot.value,
        container_kind.value,
    )
    return next_state


def unequip(
    state: GameState,
    catalog: ItemCatalog,
    member_id: str,
    slot: Slot,
    container_kind: ContainerKind,
) -> GameState:
    """장착 해제 → 용기로 1개 반환. 자리가 없으면 슬롯은 그대로 유지."""
    member = state.member(member_id)
    container = state.container(container_kind)

    member, item_id = take_off(member, slot)
    container = add_stack(container, catalog.require(item_id), 1)

    next_state = state.with_container(container).with_member(member)
    validate_state(next_state, catalog)
    logger.debug(
        "Unequipped %s from %s (%s) into %s",
        item_id,
        member_id,
        slot.value,
        container_kind.value,
    )
    return next_state


def consume(
    state: GameState,
    catalog: ItemCatalog,
    member_id: str,
    container_kind: ContainerKind,
    instance_id: str,
    *,
    consume_when_capped: bool = True,
) -> GameState:
    """소비 아이템 사용 → 효과 적용 후 1개 차감.

    효과가 상한에 걸려 아무 변화가 없어도 기본적으로 아이템은 소모된다.
    consume_when_capped=False면 변화 없는 사용은 NoEffectError로 거부.
    """
    member = state.member(member_id)
    container = state.container(container_kind)
    stack = require_stack(container, instance_id)
    definition = catalog.require(stack.item_id)
    if not definition.consumable:
        raise NotConsumableError(f"{definition.name} can't be used right now")

    new_member, new_resources = apply_effect(member, state.resources, definition.effect)
    if (
        not consume_when_capped
        and new_member == member
        and new_resources == state.resources
    ):
        raise NoEffectError(f"{definition.name} would have no effect on {member.name}")

    container = remove_one(container, instance_id)

    next_state = replace(
        state.with_container(container).with_member(new_member),
        resources=new_resources,
    )
    validate_state(next_state, catalog)
    logger.debug("%s consumed %s", member_id, definition.item_id)
    return next_state


def move(
    state: GameState,
    catalog: ItemCatalog,
    source_kind: ContainerKind,
    dest_kind: ContainerKind,
    instance_id: str,
) -> GameState:
    """스택 전체를 다른 용기로 이동 (드래그 & 드롭).

    대상에 같은 item_id 병합 스택이 있으면 합치고 슬롯을 쓰지 않는다.
    대상 수용 검사를 통과하기 전에는 원본을 건드리지 않는다.
    """
    if source_kind == dest_kind:
        raise SameContainerError(f"Item is already in {source_kind.value}")

    source = state.container(source_kind)
    dest = state.container(dest_kind)
    stack = require_stack(source, instance_id)
    definition = catalog.require(stack.item_id)

    dest = insert_stack(dest, definition, stack)
    source = remove_stack(source, instance_id)

    next_state = state.with_container(source).with_container(dest)
    validate_state(next_state, catalog)
    logger.debug(
        "Moved %s x%d: %s → %s",
        stack.item_id,
        stack.quantity,
        source_kind.value,
        dest_kind.value,
    )
    return next_state


def try_craft(
    state: GameState,
    catalog: ItemCatalog,
    recipes: RecipeBook,
    container_kind: ContainerKind,
    instance_ids: Sequence[Optional[str]],
    *,
    max_slots: int = CRAFT_SLOTS,
) -> tuple[GameState, CraftingRecipe]:
    """조합 슬롯(최대 max_slots)의 재료로 제작.

    빈 슬롯(None/"")은 무시. 레시피 arity와 채워진 슬롯 수가 정확히 같아야 한다.
    재료는 instance_id마다 1개씩 차감 (item_id 기준 X).
    결과물을 넣을 자리가 없으면 재료도 소모되지 않는다.
    Returns: (다음 스냅샷, 사용된 레시피)
    """
    if len(instance_ids) > max_slots:
        raise ValueError(
            f"Crafting takes at most {max_slots} slots, got {len(instance_ids)}"
        )

    container = state.container(container_kind)
    filled = [i for i in instance_ids if i]
    item_ids = [require_stack(container, i).item_id for i in filled]

    recipe = recipes.match(item_ids)
    if recipe is None:
        raise NoRecipeError("That combination produces nothing but garbage.")

    for instance_id in filled:
        container = remove_one(container, instance_id)
    container = add_stack(container, catalog.require(recipe.result), 1)

    next_state = state.with_container(container)
    validate_state(next_state, catalog)
    logger.debug("Crafted %s from %s", recipe.result, item_ids)
    return next_state, recipe


def trash(
    state: GameState,
    container_kind: ContainerKind,
    instance_id: str,
) -> GameState:
    """스택 전체 폐기 (삭제 모드)."""
    container = remove_stack(state.container(container_kind), instance_id)
    logger.debug("Trashed %s from %s", instance_id, container_kind.value)
    return state.with_container(container)


def grant_item(
    state: GameState,
    catalog: ItemCatalog,
    container_kind: ContainerKind,
    item_id: str,
    quantity: int = 1,
    *,
    custom_name: Optional[str] = None,
    payload: Optional[Mapping[str, Any]] = None,
) -> GameState:
    """구매/전리품/메모 저장 등으로 아이템 획득. 용량 규칙은 add_stack과 동일."""
    definition = catalog.require(item_id)
    container = add_stack(
        state.container(container_kind),
        definition,
        quantity,
        custom_name=custom_name,
        payload=payload,
    )
    next_state = state.with_container(container)
    validate_state(next_state, catalog)
    logger.debug("Granted %s x%d into %s", item_id, quantity, container_kind.value)
    return next_state


def apply_buff(
    state: GameState,
    traits: TraitCatalog,
    member_id: str,
    trait_id: str,
) -> GameState:
    """아이템 없이 버프 부여 (교회 축복 등).

    이미 가진 trait이면 rank 1로 갱신. heat는 적용할 때마다 줄어든다
    (재적용이면 reapply_heat_relief).
    """
    definition = traits.get(trait_id)
    if definition is None:
        raise ItemNotFoundError(f"Unknown trait: {trait_id}")

    current = state.member(member_id)
    relief = definition.relief_for(current.trait(trait_id) is not None)
    member = grant_trait(current, trait_id, 1)
    resources = state.resources
    if relief:
        resources = replace(resources, heat=max(0, resources.heat - relief))

    logger.debug("Buff %s applied to %s", trait_id, member_id)
    return replace(state.with_member(member), resources=resources)
