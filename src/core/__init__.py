"""Inventory & Equipment Transaction Engine Core"""
__version__ = "0.1.0-alpha"

from src.core.state import GameState, count_item, new_game_state, validate_state

__all__ = [
    "GameState",
    "count_item",
    "new_game_state",
    "validate_state",
]
