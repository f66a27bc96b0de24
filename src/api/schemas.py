"""API request/response schemas."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from src.core.item.models import ContainerKind, Slot


# === Request Schemas ===


class NewCrewMember(BaseModel):
    """새 게임의 조직원"""

    member_id: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=50)
    hp: int = Field(..., ge=0)
    max_hp: int = Field(..., ge=1)
    stress: int = Field(default=0, ge=0)


class CreateGameRequest(BaseModel):
    """게임 생성 요청"""

    save_id: str = Field(..., min_length=1, max_length=50, description="세이브 ID")
    crew: list[NewCrewMember] = Field(..., min_length=1)
    energy: Optional[int] = Field(default=None, ge=0, description="생략 시 max_energy")
    heat: int = Field(default=0, ge=0)


class EquipRequest(BaseModel):
    member_id: str
    container: ContainerKind
    instance_id: str


class UnequipRequest(BaseModel):
    member_id: str
    slot: Slot
    container: ContainerKind = ContainerKind.PLAYER


class ConsumeRequest(BaseModel):
    member_id: str
    container: ContainerKind
    instance_id: str


class MoveRequest(BaseModel):
    source: ContainerKind
    destination: ContainerKind
    instance_id: str


class CraftRequest(BaseModel):
    """조합 요청 — 슬롯 순서대로, 빈 슬롯은 null"""

    container: ContainerKind = ContainerKind.PLAYER
    instance_ids: list[Optional[str]] = Field(..., description="조합 슬롯의 instance_id")


class TrashRequest(BaseModel):
    container: ContainerKind
    instance_id: str


class GrantRequest(BaseModel):
    """아이템 지급 요청 (구매, 전리품, 메모)"""

    container: ContainerKind = ContainerKind.PLAYER
    item_id: str
    quantity: int = Field(default=1, ge=1)
    custom_name: Optional[str] = None
    payload: Optional[dict[str, Any]] = None


class BuffRequest(BaseModel):
    member_id: str
    trait_id: str


# === Response Schemas ===


class StackInfo(BaseModel):
    """용기 슬롯 하나"""

    instance_id: str
    item_id: str
    name: str
    quantity: int
    custom_name: Optional[str] = None
    payload: Optional[dict[str, Any]] = None


class ContainerInfo(BaseModel):
    kind: ContainerKind
    capacity: int
    used: int
    stacks: list[StackInfo] = []


class TraitInfo(BaseModel):
    trait_id: str
    rank: int


class CrewInfo(BaseModel):
    """조직원 정보"""

    member_id: str
    name: str
    hp: int
    max_hp: int
    stress: int
    counters: dict[str, int] = {}
    traits: list[TraitInfo] = []
    equipment: dict[str, str] = {}


class ResourcesInfo(BaseModel):
    energy: int
    max_energy: int
    heat: int


class GameStateResponse(BaseModel):
    """게임 상태 응답"""

    save_id: str
    containers: list[ContainerInfo] = []
    crew: list[CrewInfo] = []
    resources: ResourcesInfo


class TransactionResponse(BaseModel):
    """트랜잭션 실행 응답"""

    success: bool
    action: str
    message: str
    error: Optional[str] = None
    state: GameStateResponse

