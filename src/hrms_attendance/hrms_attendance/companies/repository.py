from __future__ import annotations

from typing import Protocol


class CompanySettings(Protocol):
    def is_biometric_utc_enabled(self, company_id: int) -> bool:
        """True when the company's biometric devices push UTC timestamps."""

        raise NotImplementedError
