from __future__ import annotations
"""Simple finite state machine utility for enforcing allowed state transitions.

Used by the role editor session (Idle -> LoadingCatalog -> ... -> Done | Failed).
Usage:
    from backoffice.utils.fsm import TransitionValidator
    EDITOR_FSM = TransitionValidator({
        'IDLE': {'LOADING_CATALOG'},
        'LOADING_CATALOG': {'READY', 'FAILED'},
        'READY': set(),
    }, field_name='editor state')
    EDITOR_FSM.assert_can_transition(current_state, target_state)

Raises IllegalTransition if invalid.
"""
from typing import Dict, Hashable, Set

from backoffice.errors import IllegalTransition


class TransitionValidator:
    def __init__(self, graph: Dict[Hashable, Set[Hashable]], field_name: str = 'status'):
        self.graph = graph
        self.field_name = field_name

    def can_transition(self, current, target) -> bool:
        return target in self.graph.get(current, set())

    def assert_can_transition(self, current, target):
        if not self.can_transition(current, target):
            raise IllegalTransition(f"Invalid {self.field_name} transition {_label(current)} -> {_label(target)}")
        return True


def _label(state) -> str:
    return getattr(state, 'value', state)

__all__ = ['TransitionValidator']
