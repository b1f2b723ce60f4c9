from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..core.enums import PunchSource


@dataclass(frozen=True)
class Punch:
    """Domain entity: one raw punch event (append-only ledger row).

    ``punch_datetime`` is timezone-aware and expressed in ``timezone`` (the
    employee's zone at punch time). Once stored it never changes; only the
    flags and ``daily_attendance_id`` are updated by reconciliation.
    """

    employee_id: int
    company_id: int
    punch_datetime: datetime
    punch_source: PunchSource
    timezone: str
    punch_id: int = 0
    utc_offset: Optional[str] = None
    is_utc_converted: bool = False
    original_utc_datetime: Optional[datetime] = None
    biometric_device_id: Optional[str] = None
    biometric_device_name: Optional[str] = None
    device_id: Optional[str] = None
    device_name: Optional[str] = None
    device_info: Optional[Any] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    location_accuracy: Optional[float] = None
    location_address: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    photo_url: Optional[str] = None
    photo_verified: bool = False
    is_valid: bool = True
    is_outside_geofence: bool = False
    is_manual_entry: bool = False
    is_duplicate: bool = False
    is_late: bool = False
    is_early_out: bool = False
    daily_attendance_id: Optional[int] = None
    remarks: Optional[str] = None
    created_by: Optional[int] = None


@dataclass(frozen=True)
class Location:
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    accuracy: Optional[float] = None
    address: Optional[str] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(frozen=True)
class PunchRequest:
    """Input of an interactive (web/mobile/admin) punch.

    Device, location and photo fields are carried through to the ledger
    unchanged.
    """

    punch_source: PunchSource = PunchSource.WEB
    punch_datetime: Optional[datetime] = None
    is_utc: bool = False
    location: Optional[Location] = None
    device_id: Optional[str] = None
    device_name: Optional[str] = None
    device_info: Optional[Any] = None
    biometric_device_id: Optional[str] = None
    biometric_device_name: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    photo_url: Optional[str] = None
    photo_verified: bool = False
    is_outside_geofence: bool = False
    remarks: Optional[str] = None


@dataclass(frozen=True)
class BiometricPunch:
    """Payload pushed by a biometric device."""

    biometric_device_id: Optional[str]
    punch_datetime: Optional[datetime]
    company_id: Optional[int]
    is_utc: bool = False
    device_id: Optional[str] = None
    device_name: Optional[str] = None
