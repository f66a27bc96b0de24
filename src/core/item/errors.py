"""인벤토리 트랜잭션 에러 — 호출자에게 보고되는 예상된 실패

모든 에러는 복구 가능한 조건이다. 트랜잭션은 에러 발생 시 상태를 바꾸지 않는다.
UI 계층은 kind를 토스트/툴팁 메시지로 변환한다.
"""

from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    NOT_EQUIPPABLE = "not_equippable"
    NOT_CONSUMABLE = "not_consumable"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    EMPTY_SLOT = "empty_slot"
    SAME_CONTAINER = "same_container"
    NO_RECIPE = "no_recipe"
    NO_EFFECT = "no_effect"


class InventoryError(Exception):
    """인벤토리 트랜잭션 실패의 기반 클래스."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ItemNotFoundError(InventoryError):
    """인스턴스/슬롯/멤버/정의가 존재하지 않음."""

    kind = ErrorKind.NOT_FOUND


class NotEquippableError(InventoryError):
    kind = ErrorKind.NOT_EQUIPPABLE


class NotConsumableError(InventoryError):
    kind = ErrorKind.NOT_CONSUMABLE


class CapacityExceededError(InventoryError):
    """대상 용기에 새 슬롯이 없음."""

    kind = ErrorKind.CAPACITY_EXCEEDED


class EmptySlotError(InventoryError):
    kind = ErrorKind.EMPTY_SLOT


class SameContainerError(InventoryError):
    kind = ErrorKind.SAME_CONTAINER


class NoRecipeError(InventoryError):
    """재료 조합에 맞는 레시피 없음. UI에서는 "아무 일도 없음"으로 처리."""

    kind = ErrorKind.NO_RECIPE


class NoEffectError(InventoryError):
    """효과가 이미 상한 — CONSUME_WHEN_CAPPED=False일 때만 발생."""

    kind = ErrorKind.NO_EFFECT


class InvariantViolation(RuntimeError):
    """스냅샷 불변식 위반. 예상된 실패가 아니라 버그."""
