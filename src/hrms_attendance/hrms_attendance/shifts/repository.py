from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import BreakRule, Shift


class ShiftRepository(Protocol):
    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        raise NotImplementedError


class BreakRuleRepository(Protocol):
    def find_break_rule(self, rule_id: int, shift_id: int) -> Optional[BreakRule]:
        """Active rule ``rule_id`` if it belongs to ``shift_id``."""

        raise NotImplementedError

    def list_for_shift(self, shift_id: int) -> Sequence[BreakRule]:
        raise NotImplementedError
