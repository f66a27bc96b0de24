"""이벤트 유형 상수

인벤토리 스토어가 커밋한 트랜잭션마다 하나씩 발행한다.
이벤트 데이터는 식별자(ID)만 담는다.
"""


class EventTypes:
    """이벤트 유형 문자열 상수"""

    # game lifecycle
    GAME_CREATED = "game_created"
    GAME_LOADED = "game_loaded"
    GAME_SAVED = "game_saved"

    # equipment
    ITEM_EQUIPPED = "item_equipped"
    ITEM_UNEQUIPPED = "item_unequipped"

    # inventory
    ITEM_CONSUMED = "item_consumed"
    ITEM_MOVED = "item_moved"
    ITEM_CRAFTED = "item_crafted"
    ITEM_TRASHED = "item_trashed"
    ITEM_GRANTED = "item_granted"

    # crew
    BUFF_APPLIED = "buff_applied"
