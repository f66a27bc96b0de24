"""인벤토리 Service — 현재 스냅샷 보관(스토어), DB 저장, EventBus 통신

Service → Core, Service → DB 허용.
Core 트랜잭션이 다음 스냅샷을 돌려주면 그때만 참조를 교체한다 (copy-on-write).
실패한 트랜잭션은 스냅샷을 건드리지 않고 에러 dict를 반환한다.
"""

import threading
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Sequence

from sqlalchemy.orm import Session

from src.core.crew.models import CrewMember, PartyResources, TraitEntry
from src.core.crew.traits import TraitCatalog
from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.item import transactions
from src.core.item.container import find_stack
from src.core.item.errors import InventoryError, NoRecipeError
from src.core.item.models import Container, ContainerKind, ItemStack, Slot
from src.core.item.recipes import RecipeBook
from src.core.item.registry import ItemCatalog
from src.core.logging import get_logger
from src.core.state import GameState, new_game_state, validate_state
from src.db.models import SaveModel

logger = get_logger(__name__)

SOURCE = "inventory_service"

DEFAULT_CAPACITIES: dict[ContainerKind, int] = {
    ContainerKind.PLAYER: 20,
    ContainerKind.SAFE: 5,
    ContainerKind.STORAGE: 10,
}

# (다음 스냅샷, 메시지, 이벤트 유형, 이벤트 데이터)
_Outcome = tuple[GameState, str, str, dict[str, Any]]


class InventoryService:
    """세이브별 현재 스냅샷 + 트랜잭션 디스패치"""

    def __init__(
        self,
        db: Session,
        event_bus: EventBus,
        catalog: ItemCatalog,
        traits: TraitCatalog,
        recipes: RecipeBook,
        capacities: Optional[Mapping[ContainerKind, int]] = None,
        max_energy: int = 50,
        craft_slots: int = transactions.CRAFT_SLOTS,
        consume_when_capped: bool = True,
        autosave: bool = True,
    ):
        self._db = db
        self._bus = event_bus
        self._catalog = catalog
        self._traits = traits
        self._recipes = recipes
        self._capacities = dict(capacities or DEFAULT_CAPACITIES)
        self._max_energy = max_energy
        self._craft_slots = craft_slots
        self._consume_when_capped = consume_when_capped
        self._autosave = autosave
        self._states: dict[str, GameState] = {}
        # 스냅샷 교체와 공유 Session 사용을 직렬화 (get_state → load → save 중첩)
        self._lock = threading.RLock()

    @property
    def catalog(self) -> ItemCatalog:
        return self._catalog

    @property
    def recipes(self) -> RecipeBook:
        return self._recipes

    # === 세이브 수명주기 ===

    def create_game(
        self,
        save_id: str,
        crew: Sequence[CrewMember],
        energy: Optional[int] = None,
        heat: int = 0,
    ) -> GameState:
        """빈 용기들로 새 게임 상태 생성. 이미 있는 save_id면 ValueError."""
        with self._lock:
            if self.get_state(save_id) is not None:
                raise ValueError(f"Save already exists: {save_id}")
            if not crew:
                raise ValueError("A game needs at least one crew member")

            state = new_game_state(
                crew,
                self._capacities,
                max_energy=self._max_energy,
                energy=energy,
                heat=heat,
            )
            validate_state(state, self._catalog)
            self._states[save_id] = state
            if self._autosave:
                self.save(save_id)

            self._emit(
                EventTypes.GAME_CREATED,
                {"save_id": save_id, "crew": [m.member_id for m in crew]},
            )
            logger.info("Created game %s (%d crew)", save_id, len(crew))
            return state

    def get_state(self, save_id: str) -> Optional[GameState]:
        """메모리 → DB 순으로 조회. 없으면 None."""
        with self._lock:
            state = self._states.get(save_id)
            if state is None:
                state = self.load(save_id)
            return state

    def require_state(self, save_id: str) -> GameState:
        state = self.get_state(save_id)
        if state is None:
            raise ValueError(f"Save not found: {save_id}")
        return state

    def save(self, save_id: str) -> None:
        """현재 스냅샷을 DB에 upsert."""
        with self._lock:
            state = self._states.get(save_id)
            if state is None:
                raise ValueError(f"Save not found: {save_id}")

            row = self._db.get(SaveModel, save_id)
            snapshot = self._state_to_dict(state)
            now = datetime.now(timezone.utc).replace(tzinfo=None)
            if row is None:
                row = SaveModel(save_id=save_id, snapshot=snapshot, revision=0, updated_at=now)
                self._db.add(row)
            else:
                row.snapshot = snapshot
                row.revision = (row.revision or 0) + 1
                row.updated_at = now
            self._db.commit()
            logger.debug("Saved %s (revision %d)", save_id, row.revision)
            self._emit(EventTypes.GAME_SAVED, {"save_id": save_id, "revision": row.revision})

    def load(self, save_id: str) -> Optional[GameState]:
        """DB에서 스냅샷 복원. 없으면 None."""
        with self._lock:
            row = self._db.get(SaveModel, save_id)
            if row is None:
                return None
            state = self._state_to_core(row.snapshot)
            validate_state(state, self._catalog)
            self._states[save_id] = state
            self._emit(EventTypes.GAME_LOADED, {"save_id": save_id})
            logger.info("Loaded game %s (revision %d)", save_id, row.revision)
            return state

    # === 트랜잭션 ===

    def equip(
        self,
        save_id: str,
        member_id: str,
        container: ContainerKind,
        instance_id: str,
    ) -> dict:
        def op(state: GameState) -> _Outcome:
            item_id = self._stack_item_id(state, container, instance_id)
            next_state = transactions.equip(
                state, self._catalog, member_id, container, instance_id
            )
            member = next_state.member(member_id)
            return (
                next_state,
                f"{member.name} equipped {self._item_name(item_id)}.",
                EventTypes.ITEM_EQUIPPED,
                {"member_id": member_id, "item_id": item_id, "container": container.value},
            )

        return self._transact(save_id, "equip", op)

    def unequip(
        self,
        save_id: str,
        member_id: str,
        slot: Slot,
        container: ContainerKind,
    ) -> dict:
        def op(state: GameState) -> _Outcome:
            item_id = state.member(member_id).equipped(slot)
            next_state = transactions.unequip(
                state, self._catalog, member_id, slot, container
            )
            return (
                next_state,
                f"Unequipped {self._item_name(item_id)}.",
                EventTypes.ITEM_UNEQUIPPED,
                {
                    "member_id": member_id,
                    "item_id": item_id,
                    "slot": slot.value,
                    "container": container.value,
                },
            )

        return self._transact(save_id, "unequip", op)

    def consume(
        self,
        save_id: str,
        member_id: str,
        container: ContainerKind,
        instance_id: str,
    ) -> dict:
        def op(state: GameState) -> _Outcome:
            item_id = self._stack_item_id(state, container, instance_id)
            next_state = transactions.consume(
                state,
                self._catalog,
                member_id,
                container,
                instance_id,
                consume_when_capped=self._consume_when_capped,
            )
            member = next_state.member(member_id)
            return (
                next_state,
                f"{member.name} used {self._item_name(item_id)}.",
                EventTypes.ITEM_CONSUMED,
                {"member_id": member_id, "item_id": item_id, "container": container.value},
            )

        return self._transact(save_id, "consume", op)

    def move(
        self,
        save_id: str,
        source: ContainerKind,
        destination: ContainerKind,
        instance_id: str,
    ) -> dict:
        def op(state: GameState) -> _Outcome:
            item_id = self._stack_item_id(state, source, instance_id)
            next_state = transactions.move(
                state, self._catalog, source, destination, instance_id
            )
            return (
                next_state,
                f"Moved {self._item_name(item_id)}",
                EventTypes.ITEM_MOVED,
                {
                    "instance_id": instance_id,
                    "item_id": item_id,
                    "source": source.value,
                    "destination": destination.value,
                },
            )

        return self._transact(save_id, "move", op)

    def craft(
        self,
        save_id: str,
        container: ContainerKind,
        instance_ids: Sequence[Optional[str]],
    ) -> dict:
        def op(state: GameState) -> _Outcome:
            next_state, recipe = transactions.try_craft(
                state,
                self._catalog,
                self._recipes,
                container,
                instance_ids,
                max_slots=self._craft_slots,
            )
            return (
                next_state,
                f"Crafted {recipe.label or self._item_name(recipe.result)}!",
                EventTypes.ITEM_CRAFTED,
                {
                    "result": recipe.result,
                    "inputs": list(recipe.inputs),
                    "container": container.value,
                },
            )

        return self._transact(save_id, "craft", op)

    def trash(self, save_id: str, container: ContainerKind, instance_id: str) -> dict:
        def op(state: GameState) -> _Outcome:
            item_id = self._stack_item_id(state, container, instance_id)
            next_state = transactions.trash(state, container, instance_id)
            return (
                next_state,
                f"Trashed {self._item_name(item_id)}",
                EventTypes.ITEM_TRASHED,
                {"instance_id": instance_id, "item_id": item_id, "container": container.value},
            )

        return self._transact(save_id, "trash", op)

    def grant_item(
        self,
        save_id: str,
        container: ContainerKind,
        item_id: str,
        quantity: int = 1,
        custom_name: Optional[str] = None,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> dict:
        def op(state: GameState) -> _Outcome:
            next_state = transactions.grant_item(
                state,
                self._catalog,
                container,
                item_id,
                quantity,
                custom_name=custom_name,
                payload=payload,
            )
            return (
                next_state,
                f"Received {custom_name or self._item_name(item_id)} x{quantity}",
                EventTypes.ITEM_GRANTED,
                {"item_id": item_id, "quantity": quantity, "container": container.value},
            )

        return self._transact(save_id, "grant", op)

    def apply_buff(self, save_id: str, member_id: str, trait_id: str) -> dict:
        def op(state: GameState) -> _Outcome:
            next_state = transactions.apply_buff(
                state, self._traits, member_id, trait_id
            )
            member = next_state.member(member_id)
            label = self._traits.get(trait_id).label
            return (
                next_state,
                f"{member.name} gained {label}.",
                EventTypes.BUFF_APPLIED,
                {"member_id": member_id, "trait_id": trait_id},
            )

        return self._transact(save_id, "buff", op)

    # === 내부 ===

    def _transact(
        self,
        save_id: str,
        action: str,
        op: Callable[[GameState], _Outcome],
    ) -> dict:
        """트랜잭션 실행 → 성공 시에만 스냅샷 교체 + 저장 + 이벤트.

        Returns:
            {"success": bool, "action": str, "message": str,
             "error": str | None, "state": GameState}
        """
        with self._lock:
            current = self.require_state(save_id)
            try:
                next_state, message, event_type, data = op(current)
            except NoRecipeError as e:
                logger.debug("[%s] %s: nothing happens (%s)", save_id, action, e.message)
                return self._failure(action, e, current)
            except InventoryError as e:
                logger.info("[%s] %s rejected: %s (%s)", save_id, action, e.kind.value, e.message)
                return self._failure(action, e, current)

            validate_state(next_state, self._catalog)
            self._states[save_id] = next_state
            if self._autosave:
                self.save(save_id)

            self._emit(event_type, {"save_id": save_id, **data})
            logger.debug("[%s] %s committed: %s", save_id, action, message)
            return {
                "success": True,
                "action": action,
                "message": message,
                "error": None,
                "state": next_state,
            }

    @staticmethod
    def _failure(action: str, error: InventoryError, state: GameState) -> dict:
        return {
            "success": False,
            "action": action,
            "message": error.message,
            "error": error.kind.value,
            "state": state,
        }

    def _emit(self, event_type: str, data: dict[str, Any]) -> None:
        self._bus.emit(GameEvent(event_type=event_type, data=data, source=SOURCE))
        self._bus.reset_chain()

    def _stack_item_id(
        self, state: GameState, container: ContainerKind, instance_id: str
    ) -> Optional[str]:
        """메시지용 조회. 없으면 None (트랜잭션이 NotFound를 던진다)."""
        stack = find_stack(state.container(container), instance_id)
        return stack.item_id if stack else None

    def _item_name(self, item_id: Optional[str]) -> str:
        definition = self._catalog.get(item_id) if item_id else None
        return definition.name if definition else "Item"

    # === Snapshot ↔ dict 변환 ===

    def _state_to_dict(self, state: GameState) -> dict:
        """Core → JSON 호환 dict"""
        return {
            "containers": {
                kind.value: {
                    "capacity": c.capacity,
                    "stacks": [
                        {
                            "instance_id": s.instance_id,
                            "item_id": s.item_id,
                            "quantity": s.quantity,
                            "custom_name": s.custom_name,
                            "payload": dict(s.payload) if s.payload is not None else None,
                        }
                        for s in c.stacks
                    ],
                }
                for kind, c in state.containers.items()
            },
            "crew": [
                {
                    "member_id": m.member_id,
                    "name": m.name,
                    "hp": m.hp,
                    "max_hp": m.max_hp,
                    "stress": m.stress,
                    "counters": dict(m.counters),
                    "traits": [{"trait_id": t.trait_id, "rank": t.rank} for t in m.traits],
                    "equipment": {slot.value: item_id for slot, item_id in m.equipment.items()},
                }
                for m in state.crew
            ],
            "resources": {
                "energy": state.resources.energy,
                "max_energy": state.resources.max_energy,
                "heat": state.resources.heat,
            },
        }

    def _state_to_core(self, raw: dict) -> GameState:
        """JSON dict → Core"""
        containers = {}
        for kind_value, raw_container in raw.get("containers", {}).items():
            kind = ContainerKind(kind_value)
            containers[kind] = Container(
                kind=kind,
                capacity=int(raw_container["capacity"]),
                stacks=tuple(
                    ItemStack(
                        instance_id=s["instance_id"],
                        item_id=s["item_id"],
                        quantity=int(s["quantity"]),
                        custom_name=s.get("custom_name"),
                        payload=s.get("payload"),
                    )
                    for s in raw_container.get("stacks", [])
                ),
            )
        crew = tuple(
            CrewMember(
                member_id=m["member_id"],
                name=m["name"],
                hp=int(m["hp"]),
                max_hp=int(m["max_hp"]),
                stress=int(m.get("stress", 0)),
                counters=dict(m.get("counters", {})),
                traits=tuple(
                    TraitEntry(trait_id=t["trait_id"], rank=int(t["rank"]))
                    for t in m.get("traits", [])
                ),
                equipment={Slot(k): v for k, v in m.get("equipment", {}).items()},
            )
            for m in raw.get("crew", [])
        )
        res = raw.get("resources", {})
        resources = PartyResources(
            energy=int(res.get("energy", 0)),
            max_energy=int(res.get("max_energy", self._max_energy)),
            heat=int(res.get("heat", 0)),
        )
        return GameState(containers=containers, crew=crew, resources=resources)


__all__ = ["InventoryService", "DEFAULT_CAPACITIES"]
