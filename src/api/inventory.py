"""Inventory API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.schemas import (
    BuffRequest,
    ConsumeRequest,
    ContainerInfo,
    CraftRequest,
    CreateGameRequest,
    CrewInfo,
    EquipRequest,
    GameStateResponse,
    GrantRequest,
    MoveRequest,
    ResourcesInfo,
    StackInfo,
    TraitInfo,
    TransactionResponse,
    TrashRequest,
    UnequipRequest,
)
from src.core.crew.models import CrewMember
from src.core.item.errors import ErrorKind
from src.core.logging import get_logger
from src.core.state import GameState
from src.services.inventory_service import InventoryService

logger = get_logger(__name__)

router = APIRouter(prefix="/inventory", tags=["inventory"])

# 실패한 트랜잭션의 HTTP 상태. NoRecipe는 "아무 일도 없음"이라 200.
_STATUS_BY_KIND: dict[str, int] = {
    ErrorKind.NOT_FOUND.value: 404,
    ErrorKind.CAPACITY_EXCEEDED.value: 409,
    ErrorKind.NO_RECIPE.value: 200,
}


def get_inventory_service(request: Request) -> InventoryService:
    """InventoryService 인스턴스 반환 (의존성 주입)"""
    service: InventoryService = request.app.state.inventory_service
    return service


def _build_state_response(
    save_id: str, state: GameState, service: InventoryService
) -> GameStateResponse:
    """GameState를 GameStateResponse로 변환"""
    containers = []
    for kind, container in state.containers.items():
        stacks = []
        for s in container.stacks:
            definition = service.catalog.get(s.item_id)
            stacks.append(
                StackInfo(
                    instance_id=s.instance_id,
                    item_id=s.item_id,
                    name=definition.name if definition else s.item_id,
                    quantity=s.quantity,
                    custom_name=s.custom_name,
                    payload=dict(s.payload) if s.payload is not None else None,
                )
            )
        containers.append(
            ContainerInfo(
                kind=kind,
                capacity=container.capacity,
                used=len(container.stacks),
                stacks=stacks,
            )
        )

    crew = [
        CrewInfo(
            member_id=m.member_id,
            name=m.name,
            hp=m.hp,
            max_hp=m.max_hp,
            stress=m.stress,
            counters=dict(m.counters),
            traits=[TraitInfo(trait_id=t.trait_id, rank=t.rank) for t in m.traits],
            equipment={slot.value: item_id for slot, item_id in m.equipment.items()},
        )
        for m in state.crew
    ]

    return GameStateResponse(
        save_id=save_id,
        containers=containers,
        crew=crew,
        resources=ResourcesInfo(
            energy=state.resources.energy,
            max_energy=state.resources.max_energy,
            heat=state.resources.heat,
        ),
    )


def _respond(
    save_id: str, result: dict, service: InventoryService
) -> TransactionResponse:
    """서비스 결과 dict → 응답. 실패는 에러 종류별 HTTPException."""
    if not result["success"]:
        status = _STATUS_BY_KIND.get(result["error"], 400)
        if status != 200:
            raise HTTPException(
                status_code=status,
                detail={"error": result["error"], "message": result["message"]},
            )

    return TransactionResponse(
        success=result["success"],
        action=result["action"],
        message=result["message"],
        error=result["error"],
        state=_build_state_response(save_id, result["state"], service),
    )


def _require_save(save_id: str, service: InventoryService) -> None:
    if service.get_state(save_id) is None:
        raise HTTPException(status_code=404, detail=f"Save not found: {save_id}")


@router.post("/games", response_model=GameStateResponse, status_code=201)
def create_game(
    request: CreateGameRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> GameStateResponse:
    """새 게임 생성 — 빈 용기 + 조직원"""
    crew = [
        CrewMember(
            member_id=c.member_id,
            name=c.name,
            hp=c.hp,
            max_hp=c.max_hp,
            stress=c.stress,
        )
        for c in request.crew
    ]
    if len({m.member_id for m in crew}) != len(crew):
        raise HTTPException(status_code=400, detail="Duplicated member_id")

    try:
        state = service.create_game(
            request.save_id, crew, energy=request.energy, heat=request.heat
        )
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return _build_state_response(request.save_id, state, service)


@router.get("/games/{save_id}", response_model=GameStateResponse)
def get_game(
    save_id: str,
    service: InventoryService = Depends(get_inventory_service),
) -> GameStateResponse:
    state = service.get_state(save_id)
    if state is None:
        raise HTTPException(status_code=404, detail=f"Save not found: {save_id}")
    return _build_state_response(save_id, state, service)


@router.post("/games/{save_id}/equip", response_model=TransactionResponse)
def equip(
    save_id: str,
    request: EquipRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> TransactionResponse:
    _require_save(save_id, service)
    result = service.equip(
        save_id, request.member_id, request.container, request.instance_id
    )
    return _respond(save_id, result, service)


@router.post("/games/{save_id}/unequip", response_model=TransactionResponse)
def unequip(
    save_id: str,
    request: UnequipRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> TransactionResponse:
    _require_save(save_id, service)
    result = service.unequip(
        save_id, request.member_id, request.slot, request.container
    )
    return _respond(save_id, result, service)


@router.post("/games/{save_id}/consume", response_model=TransactionResponse)
def consume(
    save_id: str,
    request: ConsumeRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> TransactionResponse:
    _require_save(save_id, service)
    result = service.consume(
        save_id, request.member_id, request.container, request.instance_id
    )
    return _respond(save_id, result, service)


@router.post("/games/{save_id}/move", response_model=TransactionResponse)
def move(
    save_id: str,
    request: MoveRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> TransactionResponse:
    _require_save(save_id, service)
    result = service.move(
        save_id, request.source, request.destination, request.instance_id
    )
    return _respond(save_id, result, service)


@router.post("/games/{save_id}/craft", response_model=TransactionResponse)
def craft(
    save_id: str,
    request: CraftRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> TransactionResponse:
    _require_save(save_id, service)
    try:
        result = service.craft(save_id, request.container, request.instance_ids)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _respond(save_id, result, service)


@router.post("/games/{save_id}/trash", response_model=TransactionResponse)
def trash(
    save_id: str,
    request: TrashRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> TransactionResponse:
    _require_save(save_id, service)
    result = service.trash(save_id, request.container, request.instance_id)
    return _respond(save_id, result, service)


@router.post("/games/{save_id}/grant", response_model=TransactionResponse)
def grant(
    save_id: str,
    request: GrantRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> TransactionResponse:
    _require_save(save_id, service)
    result = service.grant_item(
        save_id,
        request.container,
        request.item_id,
        request.quantity,
        custom_name=request.custom_name,
        payload=request.payload,
    )
    return _respond(save_id, result, service)


@router.post("/games/{save_id}/buff", response_model=TransactionResponse)
def buff(
    save_id: str,
    request: BuffRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> TransactionResponse:
    _require_save(save_id, service)
    result = service.apply_buff(save_id, request.member_id, request.trait_id)
    return _respond(save_id, result, service)
