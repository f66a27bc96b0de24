"""용기(Container) 연산 — 순수 함수, 입력 불변

용량은 서로 다른 스택 수 기준. 병합 가능한 아이템은 용기당 item_id 하나의 스택만.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Any, Mapping, Optional

from .errors import CapacityExceededError, ItemNotFoundError
from .models import Container, ItemDefinition, ItemStack, is_mergeable

logger = logging.getLogger(__name__)


def new_instance_id() -> str:
    return uuid.uuid4().hex


def find_stack(container: Container, instance_id: str) -> Optional[ItemStack]:
    for stack in container.stacks:
        if stack.instance_id == instance_id:
            return stack
    return None


def require_stack(container: Container, instance_id: str) -> ItemStack:
    stack = find_stack(container, instance_id)
    if stack is None:
        raise ItemNotFoundError(
            f"No stack {instance_id} in {container.kind.value}"
        )
    return stack


def find_mergeable(
    container: Container, definition: ItemDefinition
) -> Optional[ItemStack]:
    """같은 item_id의 병합 가능 스택. 없거나 병합 불가 아이템이면 None."""
    if not is_mergeable(definition):
        return None
    for stack in container.stacks:
        if stack.item_id == definition.item_id and is_mergeable(definition, stack):
            return stack
    return None


def free_slots(container: Container) -> int:
    return container.capacity - len(container.stacks)


def slots_needed(
    container: Container,
    definition: ItemDefinition,
    stack: ItemStack,
) -> int:
    """stack을 넣는 데 필요한 새 슬롯 수.

    병합 가능 + 기존 스택 있음 → 0
    비스택 아이템 → 단위마다 1
    그 외 → 1
    """
    if is_mergeable(definition, stack) and find_mergeable(container, definition):
        return 0
    if not definition.stackable:
        return stack.quantity
    return 1


def add_stack(
    container: Container,
    definition: ItemDefinition,
    quantity: int = 1,
    *,
    custom_name: Optional[str] = None,
    payload: Optional[Mapping[str, Any]] = None,
) -> Container:
    """아이템 추가.

    병합 가능한 기존 스택이 있으면 수량 증가, 없으면 새 스택을 끝에 추가.
    비스택 아이템은 단위마다 별도 스택. unique/payload 아이템은 항상 새 스택.
    새 슬롯이 모자라면 CapacityExceededError.
    """
    if quantity < 1:
        raise ValueError(f"quantity must be >= 1, got {quantity}")

    incoming = ItemStack(
        instance_id=new_instance_id(),
        item_id=definition.item_id,
        quantity=quantity,
        custom_name=custom_name,
        payload=payload,
    )
    needed = slots_needed(container, definition, incoming)
    if needed == 0:
        existing = find_mergeable(container, definition)
        return _replace_stack(
            container, existing.with_quantity(existing.quantity + quantity)
        )
    if needed > free_slots(container):
        raise CapacityExceededError(
            f"{container.kind.value} is full (max {container.capacity})"
        )

    if definition.stackable:
        new_stacks = (incoming,)
    else:
        # payload는 스택마다 별도 사본
        new_stacks = tuple(
            replace(incoming, instance_id=new_instance_id(), quantity=1)
            for _ in range(quantity)
        )
    return replace(container, stacks=container.stacks + new_stacks)


def insert_stack(
    container: Container, definition: ItemDefinition, stack: ItemStack
) -> Container:
    """기존 스택을 그대로 옮겨 넣기 (instance_id 유지).

    병합 가능하면 대상 스택에 수량을 합치고 원래 instance_id는 사라진다.
    """
    needed = slots_needed(container, definition, stack)
    if needed == 0:
        existing = find_mergeable(container, definition)
        return _replace_stack(
            container, existing.with_quantity(existing.quantity + stack.quantity)
        )
    if needed > free_slots(container):
        raise CapacityExceededError(
            f"{container.kind.value} is full (max {container.capacity})"
        )
    return replace(container, stacks=container.stacks + (stack,))


def remove_one(container: Container, instance_id: str) -> Container:
    """수량 1 감소. 0이 되면 스택 제거 (슬롯 해제)."""
    stack = require_stack(container, instance_id)
    if stack.quantity > 1:
        return _replace_stack(container, stack.with_quantity(stack.quantity - 1))
    return remove_stack(container, instance_id)


def remove_stack(container: Container, instance_id: str) -> Container:
    """수량과 무관하게 스택 전체 제거."""
    require_stack(container, instance_id)
    stacks = tuple(s for s in container.stacks if s.instance_id != instance_id)
    return replace(container, stacks=stacks)


def total_quantity(container: Container, item_id: str) -> int:
    return sum(s.quantity for s in container.stacks if s.item_id == item_id)


def _replace_stack(container: Container, updated: ItemStack) -> Container:
    stacks = tuple(
        updated if s.instance_id == updated.instance_id else s
        for s in container.stacks
    )
    return replace(container, stacks=stacks)
