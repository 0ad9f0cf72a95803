"""
Module: interaction

Purpose:
    Pointer, touch and wheel gestures for adjusting cover-mode cells.

Key Classes:
    - TransformController: Per-cell gesture state machine
    - GestureState, GestureOutcome
"""

from .gestures import GestureOutcome, GestureState, TransformController

__all__ = [
    "GestureOutcome",
    "GestureState",
    "TransformController",
]
