"""게임 상태 스냅샷 — 불변식 검사 + 무작위 트랜잭션 시퀀스"""

from __future__ import annotations

import random
from dataclasses import replace

import pytest

from src.core.crew.models import CrewMember, TraitEntry
from src.core.item.errors import InventoryError, InvariantViolation, ItemNotFoundError
from src.core.item.models import Container, ContainerKind, ItemStack, Slot
from src.core.item.registry import ItemCatalog
from src.core.item.transactions import equip, grant_item, move, unequip
from src.core.state import GameState, count_item, new_game_state, validate_state

PLAYER = ContainerKind.PLAYER
SAFE = ContainerKind.SAFE
STORAGE = ContainerKind.STORAGE


class TestNewGameState:
    def test_empty_containers(self, state: GameState) -> None:
        assert set(state.containers) == {PLAYER, SAFE, STORAGE}
        assert all(c.stacks == () for c in state.containers.values())
        assert state.container(SAFE).capacity == 5

    def test_energy_defaults_to_max(self, vinnie: CrewMember) -> None:
        state = new_game_state([vinnie], {PLAYER: 3}, max_energy=50)
        assert state.resources.energy == 50

    def test_unknown_container(self, vinnie: CrewMember) -> None:
        state = new_game_state([vinnie], {PLAYER: 3}, max_energy=50)
        with pytest.raises(ItemNotFoundError):
            state.container(SAFE)


class TestCountItem:
    def test_counts_containers_and_equipment(
        self, state: GameState, catalog: ItemCatalog
    ) -> None:
        state = grant_item(state, catalog, PLAYER, "fedora", 2)
        state = grant_item(state, catalog, SAFE, "fedora", 3)
        fedora = state.container(PLAYER).stacks[0].instance_id
        state = equip(state, catalog, "vinnie", PLAYER, fedora)
        assert count_item(state, "fedora") == 5
        assert count_item(state, "bat") == 0


class TestValidateState:
    def test_valid(self, state: GameState, catalog: ItemCatalog) -> None:
        validate_state(state, catalog)

    def test_over_capacity(self, state: GameState, catalog: ItemCatalog) -> None:
        safe = Container(
            kind=SAFE,
            capacity=1,
            stacks=(
                ItemStack(instance_id="a", item_id="bat"),
                ItemStack(instance_id="b", item_id="knife"),
            ),
        )
        with pytest.raises(InvariantViolation):
            validate_state(state.with_container(safe), catalog)

    def test_duplicated_instance_across_containers(
        self, state: GameState, catalog: ItemCatalog
    ) -> None:
        stack = ItemStack(instance_id="same", item_id="bat")
        state = state.with_container(replace(state.container(PLAYER), stacks=(stack,)))
        state = state.with_container(replace(state.container(SAFE), stacks=(stack,)))
        with pytest.raises(InvariantViolation):
            validate_state(state, catalog)

    def test_split_mergeable_stacks(self, state: GameState, catalog: ItemCatalog) -> None:
        stacks = (
            ItemStack(instance_id="a", item_id="medkit"),
            ItemStack(instance_id="b", item_id="medkit"),
        )
        state = state.with_container(replace(state.container(PLAYER), stacks=stacks))
        with pytest.raises(InvariantViolation):
            validate_state(state, catalog)

    def test_unique_items_may_repeat(self, state: GameState, catalog: ItemCatalog) -> None:
        stacks = (
            ItemStack(instance_id="a", item_id="intel_report", payload={"text": "1"}),
            ItemStack(instance_id="b", item_id="intel_report", payload={"text": "2"}),
        )
        validate_state(
            state.with_container(replace(state.container(PLAYER), stacks=stacks)), catalog
        )

    def test_duplicated_traits(self, state: GameState, catalog: ItemCatalog) -> None:
        member = replace(
            state.member("vinnie"),
            traits=(TraitEntry("drunk"), TraitEntry("drunk", 2)),
        )
        with pytest.raises(InvariantViolation):
            validate_state(state.with_member(member), catalog)

    def test_item_in_wrong_slot(self, state: GameState, catalog: ItemCatalog) -> None:
        member = replace(state.member("vinnie"), equipment={Slot.HEAD: "bat"})
        with pytest.raises(InvariantViolation):
            validate_state(state.with_member(member), catalog)



class TestSnapshotIsReadOnly:
    def test_containers_map(self, state: GameState) -> None:
        with pytest.raises(TypeError):
            state.containers[PLAYER] = state.container(SAFE)  # type: ignore[index]
        assert state.container(PLAYER).kind == PLAYER

    def test_member_maps(self, state: GameState, catalog: ItemCatalog) -> None:
        state = grant_item(state, catalog, PLAYER, "bat")
        state = equip(state, catalog, "vinnie", PLAYER, state.container(PLAYER).stacks[0].instance_id)
        vinnie = state.member("vinnie")
        with pytest.raises(TypeError):
            vinnie.equipment[Slot.HEAD] = "bat"  # type: ignore[index]
        with pytest.raises(TypeError):
            vinnie.counters["drug_usage"] = 9  # type: ignore[index]

    def test_source_dicts_are_copied(self, vinnie: CrewMember) -> None:
        equipment = {Slot.HEAD: "fedora"}
        member = replace(vinnie, equipment=equipment)
        equipment[Slot.HEAD] = "bat"
        assert member.equipped(Slot.HEAD) == "fedora"

        containers = {PLAYER: Container(kind=PLAYER, capacity=3)}
        snapshot = GameState(containers=containers, crew=[member])
        containers[SAFE] = Container(kind=SAFE, capacity=1)
        assert set(snapshot.containers) == {PLAYER}
        assert snapshot.crew == (member,)


# ── 무작위 시퀀스: 보존 + 용량 ────────────────────────────────


_STOCK = {
    "bat": 2,
    "knife": 1,
    "pistol": 1,
    "fedora": 3,
    "leather_jacket": 1,
    "gold_chain": 2,
    "medkit": 4,
    "scrap_metal": 6,
}


def _stocked(state: GameState, catalog: ItemCatalog) -> GameState:
    for item_id, qty in _STOCK.items():
        state = grant_item(state, catalog, PLAYER, item_id, qty)
    return state


def _random_step(rng: random.Random, state: GameState, catalog: ItemCatalog) -> GameState:
    kinds = list(state.containers)
    member = rng.choice(state.crew)
    action = rng.choice(["equip", "unequip", "move"])
    if action == "unequip":
        return unequip(state, catalog, member.member_id, rng.choice(list(Slot)), rng.choice(kinds))

    source = rng.choice(kinds)
    stacks = state.container(source).stacks
    instance_id = rng.choice(stacks).instance_id if stacks else "ghost"
    if action == "equip":
        return equip(state, catalog, member.member_id, source, instance_id)
    return move(state, catalog, source, rng.choice(kinds), instance_id)


@pytest.mark.parametrize("seed", range(8))
def test_random_sequences_conserve_items(
    seed: int, state: GameState, catalog: ItemCatalog
) -> None:
    rng = random.Random(seed)
    state = _stocked(state, catalog)

    for _ in range(150):
        before = state
        try:
            state = _random_step(rng, state, catalog)
        except InventoryError:
            assert state is before
            continue

        validate_state(state, catalog)
        for kind, container in state.containers.items():
            assert len(container.stacks) <= container.capacity, kind
        for item_id, qty in _STOCK.items():
            assert count_item(state, item_id) == qty, (seed, item_id)
