from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee, as far as punching needs it."""

    employee_id: int
    company_id: int
    first_name: str
    last_name: Optional[str] = None
    employee_code: Optional[str] = None
    timezone: Optional[str] = None
    biometric_device_id: Optional[str] = None
    shift_id: Optional[int] = None
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name or ''}".strip()

    def timezone_or(self, default: str) -> str:
        return self.timezone or default
