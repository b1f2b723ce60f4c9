from __future__ import annotations

from typing import Optional, Protocol

from .model import Employee


class EmployeeDirectory(Protocol):
    """Employee lookups the attendance core depends on.

    Note (DIP): services depend on this interface, never on a concrete DB.
    """

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def find_active_employee(self, employee_id: int, company_id: int, *, for_update: bool = False) -> Optional[Employee]:
        """Active employee of ``company_id``.

        ``for_update`` locks the row until the surrounding transaction ends.
        """

        raise NotImplementedError

    def find_active_employee_by_biometric_device(self, device_id: str, company_id: int) -> Optional[Employee]:
        raise NotImplementedError
