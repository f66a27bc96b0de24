"""용기 연산 테스트 — add/insert/remove, 병합, 용량"""

from __future__ import annotations

import pytest

from src.core.item.container import (
    add_stack,
    free_slots,
    insert_stack,
    remove_one,
    remove_stack,
    slots_needed,
    total_quantity,
)
from src.core.item.errors import CapacityExceededError, ItemNotFoundError
from src.core.item.models import Container, ContainerKind, ItemStack
from src.core.item.registry import ItemCatalog


def _safe(capacity: int = 5) -> Container:
    return Container(kind=ContainerKind.SAFE, capacity=capacity)


class TestAddStack:
    def test_new_stack(self, catalog: ItemCatalog) -> None:
        c = add_stack(_safe(), catalog.require("medkit"), 2)
        assert len(c.stacks) == 1
        assert c.stacks[0].quantity == 2

    def test_merges_into_existing(self, catalog: ItemCatalog) -> None:
        medkit = catalog.require("medkit")
        c = add_stack(_safe(), medkit)
        first_id = c.stacks[0].instance_id
        c = add_stack(c, medkit, 3)
        assert len(c.stacks) == 1
        assert c.stacks[0].instance_id == first_id
        assert c.stacks[0].quantity == 4

    def test_merge_succeeds_when_full(self, catalog: ItemCatalog) -> None:
        c = add_stack(_safe(1), catalog.require("medkit"))
        c = add_stack(c, catalog.require("medkit"))
        assert c.stacks[0].quantity == 2

    def test_non_stackable_one_slot_per_unit(self, catalog: ItemCatalog) -> None:
        c = add_stack(_safe(), catalog.require("bat"), 2)
        assert len(c.stacks) == 2
        assert all(s.quantity == 1 for s in c.stacks)
        assert c.stacks[0].instance_id != c.stacks[1].instance_id

    def test_non_stackable_needs_all_slots(self, catalog: ItemCatalog) -> None:
        c = add_stack(_safe(2), catalog.require("scrap_metal"))
        with pytest.raises(CapacityExceededError):
            add_stack(c, catalog.require("bat"), 2)

    def test_full_container_rejects_new_stack(self, catalog: ItemCatalog) -> None:
        c = add_stack(_safe(1), catalog.require("medkit"))
        with pytest.raises(CapacityExceededError):
            add_stack(c, catalog.require("bandages"))

    def test_unique_never_merges(self, catalog: ItemCatalog) -> None:
        intel = catalog.require("intel_report")
        c = add_stack(_safe(), intel, payload={"text": "Docks at midnight"})
        c = add_stack(c, intel, payload={"text": "Mayor takes bribes"})
        assert len(c.stacks) == 2

    def test_custom_name_gets_own_stack(self, catalog: ItemCatalog) -> None:
        scrap = catalog.require("scrap_metal")
        c = add_stack(_safe(), scrap)
        c = add_stack(c, scrap, custom_name="Lucky scrap")
        c = add_stack(c, scrap)
        assert len(c.stacks) == 2
        assert total_quantity(c, "scrap_metal") == 3

    def test_zero_quantity_rejected(self, catalog: ItemCatalog) -> None:
        with pytest.raises(ValueError):
            add_stack(_safe(), catalog.require("medkit"), 0)

    def test_input_unchanged(self, catalog: ItemCatalog) -> None:
        c = _safe()
        add_stack(c, catalog.require("medkit"))
        assert c.stacks == ()


class TestInsertStack:
    def test_keeps_instance_id(self, catalog: ItemCatalog) -> None:
        stack = ItemStack(instance_id="keep-me", item_id="bat")
        c = insert_stack(_safe(), catalog.require("bat"), stack)
        assert c.stacks == (stack,)

    def test_merges_quantity(self, catalog: ItemCatalog) -> None:
        medkit = catalog.require("medkit")
        c = add_stack(_safe(), medkit, 2)
        c = insert_stack(c, medkit, ItemStack(instance_id="other", item_id="medkit", quantity=3))
        assert len(c.stacks) == 1
        assert c.stacks[0].quantity == 5

    def test_full(self, catalog: ItemCatalog) -> None:
        c = add_stack(_safe(1), catalog.require("medkit"))
        with pytest.raises(CapacityExceededError):
            insert_stack(c, catalog.require("bat"), ItemStack(instance_id="b", item_id="bat"))


class TestRemove:
    def test_remove_one_decrements(self, catalog: ItemCatalog) -> None:
        c = add_stack(_safe(), catalog.require("medkit"), 2)
        c = remove_one(c, c.stacks[0].instance_id)
        assert c.stacks[0].quantity == 1

    def test_remove_last_frees_slot(self, catalog: ItemCatalog) -> None:
        c = add_stack(_safe(), catalog.require("medkit"))
        c = remove_one(c, c.stacks[0].instance_id)
        assert c.stacks == ()
        assert free_slots(c) == 5

    def test_remove_stack_whole(self, catalog: ItemCatalog) -> None:
        c = add_stack(_safe(), catalog.require("medkit"), 7)
        c = remove_stack(c, c.stacks[0].instance_id)
        assert c.stacks == ()

    def test_missing(self) -> None:
        with pytest.raises(ItemNotFoundError):
            remove_one(_safe(), "ghost")
        with pytest.raises(ItemNotFoundError):
            remove_stack(_safe(), "ghost")


class TestSlotsNeeded:
    def test_mergeable_into_full(self, catalog: ItemCatalog) -> None:
        c = add_stack(_safe(1), catalog.require("medkit"))
        medkit = ItemStack(instance_id="m", item_id="medkit", quantity=2)
        bandages = ItemStack(instance_id="b", item_id="bandages")
        assert slots_needed(c, catalog.require("medkit"), medkit) == 0
        assert slots_needed(c, catalog.require("bandages"), bandages) == 1

    def test_payload_stack_needs_own_slot(self, catalog: ItemCatalog) -> None:
        c = add_stack(_safe(), catalog.require("scrap_metal"))
        named = ItemStack(instance_id="n", item_id="scrap_metal", custom_name="Lucky scrap")
        assert slots_needed(c, catalog.require("scrap_metal"), named) == 1

    def test_non_stackable_per_unit(self, catalog: ItemCatalog) -> None:
        bats = ItemStack(instance_id="b", item_id="bat", quantity=3)
        assert slots_needed(_safe(), catalog.require("bat"), bats) == 3

    def test_zero_capacity(self, catalog: ItemCatalog) -> None:
        with pytest.raises(CapacityExceededError):
            add_stack(_safe(0), catalog.require("medkit"))

    def test_negative_capacity_rejected(self) -> None:
        with pytest.raises(ValueError):
            _safe(-1)


class TestPayloadIsolation:
    def test_caller_dict_change_does_not_leak(self, catalog: ItemCatalog) -> None:
        note = {"text": "Docks at midnight"}
        c = add_stack(_safe(), catalog.require("intel_report"), payload=note)
        note["text"] = "tampered"
        assert c.stacks[0].payload["text"] == "Docks at midnight"

    def test_payload_read_only(self, catalog: ItemCatalog) -> None:
        c = add_stack(_safe(), catalog.require("intel_report"), payload={"text": "x"})
        with pytest.raises(TypeError):
            c.stacks[0].payload["text"] = "y"

    def test_non_stackable_units_get_own_copies(self, catalog: ItemCatalog) -> None:
        c = add_stack(_safe(), catalog.require("bat"), 2, payload={"owner": "Sal"})
        first, second = c.stacks
        assert first.payload == second.payload
        assert first.payload is not second.payload

    def test_nested_values_are_copied(self, catalog: ItemCatalog) -> None:
        contacts = {"names": ["Lou"]}
        c = add_stack(_safe(), catalog.require("bat"), 2, payload=contacts)
        contacts["names"].append("Tony")
        c.stacks[0].payload["names"].append("Mickey")
        assert c.stacks[1].payload["names"] == ["Lou"]
