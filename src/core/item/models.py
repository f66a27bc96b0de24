"""아이템 도메인 모델 (DB 무관)"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .effects import Effect


class ItemKind(str, Enum):
    GEAR = "gear"
    WEAPON = "weapon"
    CONSUMABLE = "consumable"
    INTEL = "intel"
    MATERIAL = "material"


class Slot(str, Enum):
    HEAD = "head"
    MAIN_HAND = "main_hand"
    OFF_HAND = "off_hand"
    BODY = "body"
    ACCESSORY = "accessory"
    GADGET = "gadget"
    FEET = "feet"


class ContainerKind(str, Enum):
    PLAYER = "player"
    SAFE = "safe"
    STORAGE = "storage"


@dataclass(frozen=True)
class ItemDefinition:
    """아이템 정의 — 불변. items.json에서 로드."""

    item_id: str  # "medkit"
    kind: ItemKind
    name: str
    base_value: int

    stackable: bool = True
    equip_slot: Optional[Slot] = None
    effect: Optional[Effect] = None

    # reportData 등 개체별 데이터를 가진 아이템. 절대 병합하지 않는다.
    unique: bool = False

    description: str = ""

    def __post_init__(self) -> None:
        if self.kind in (ItemKind.GEAR, ItemKind.WEAPON):
            if self.equip_slot is None:
                raise ValueError(f"{self.item_id}: {self.kind.value} needs equip_slot")
            if self.effect is not None:
                raise ValueError(f"{self.item_id}: equipment cannot carry an effect")
        elif self.equip_slot is not None:
            raise ValueError(
                f"{self.item_id}: {self.kind.value} cannot have equip_slot"
            )
        if self.kind == ItemKind.CONSUMABLE and self.effect is None:
            raise ValueError(f"{self.item_id}: consumable needs an effect")

    @property
    def equippable(self) -> bool:
        return self.equip_slot is not None

    @property
    def consumable(self) -> bool:
        return self.effect is not None


@dataclass(frozen=True)
class ItemStack:
    """용기 슬롯 하나를 차지하는 수량 단위."""

    instance_id: str  # 이동해도 유지
    item_id: str  # ItemDefinition.item_id 참조
    quantity: int = 1

    # 개체별 데이터 (intel report 등). payload가 있으면 병합 대상 아님.
    custom_name: Optional[str] = None
    payload: Optional[Mapping[str, Any]] = None

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError(
                f"Stack {self.instance_id} quantity must be >= 1, got {self.quantity}"
            )
        if self.payload is not None:
            # 스택마다 읽기 전용 사본
            object.__setattr__(
                self, "payload", MappingProxyType(copy.deepcopy(dict(self.payload)))
            )

    def with_quantity(self, quantity: int) -> ItemStack:
        return ItemStack(
            instance_id=self.instance_id,
            item_id=self.item_id,
            quantity=quantity,
            custom_name=self.custom_name,
            payload=self.payload,
        )


@dataclass(frozen=True)
class Container:
    """용량 제한이 있는 스택 묶음. 용량은 수량이 아니라 스택 수 기준."""

    kind: ContainerKind
    capacity: int
    stacks: tuple[ItemStack, ...] = ()

    def __post_init__(self) -> None:
        if self.capacity < 0:
            raise ValueError(f"{self.kind.value}: capacity must be >= 0")


def is_mergeable(definition: ItemDefinition, stack: Optional[ItemStack] = None) -> bool:
    """같은 item_id 스택과 합칠 수 있는지."""
    if not definition.stackable or definition.unique:
        return False
    if stack is not None and (stack.payload is not None or stack.custom_name):
        return False
    return True
