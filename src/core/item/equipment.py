"""장비 맵 — 슬롯당 최대 한 개"""

from __future__ import annotations

from dataclasses import replace

from src.core.crew.models import CrewMember

from .errors import EmptySlotError
from .models import Slot


def wear(member: CrewMember, slot: Slot, item_id: str) -> CrewMember:
    """slot에 item_id 장착. 기존 항목은 덮어쓴다 (반환은 호출자 책임)."""
    equipment = dict(member.equipment)
    equipment[slot] = item_id
    return replace(member, equipment=equipment)


def take_off(member: CrewMember, slot: Slot) -> tuple[CrewMember, str]:
    """slot 해제. Returns: (새 멤버, 해제된 item_id)"""
    item_id = member.equipment.get(slot)
    if item_id is None:
        raise EmptySlotError(f"{member.name} has nothing in {slot.value}")
    equipment = {s: i for s, i in member.equipment.items() if s != slot}
    return replace(member, equipment=equipment), item_id
