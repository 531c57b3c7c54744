from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Intune reports this for devices never registered in the directory.
EMPTY_GUID = "00000000-0000-0000-0000-000000000000"


def _normalize_identifier(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value or value == EMPTY_GUID:
        return None
    return value


# ---- Inventory (Intune managedDevice) -----------------------------------------

class InventoryRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    id: str
    device_name: str = Field(alias="deviceName")
    directory_device_id: Optional[str] = Field(default=None, alias="azureADDeviceId")

    @field_validator("directory_device_id", mode="before")
    @classmethod
    def normalize_directory_device_id(cls, v):
        return _normalize_identifier(v)


# ---- Directory (Entra device object) ------------------------------------------

class DirectoryRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    id: str
    display_name: str = Field(alias="displayName")
    device_id: Optional[str] = Field(default=None, alias="deviceId")

    @field_validator("device_id", mode="before")
    @classmethod
    def normalize_device_id(cls, v):
        return _normalize_identifier(v)

    def matches(self, name: str, directory_device_id: Optional[str]) -> bool:
        """Strict match on displayName AND deviceId; an empty identifier never matches."""
        if not directory_device_id or not self.device_id:
            return False
        return self.display_name == name and self.device_id == directory_device_id


# ---- Outcome ------------------------------------------------------------------

class ProcessingOutcome(BaseModel):
    """One ledger row per input device name. Immutable once created."""
    model_config = ConfigDict(frozen=True)

    device_name: str
    found_in_inventory: bool = False
    found_in_directory: bool = False
    removed_from_inventory: bool = False
    removed_from_directory: bool = False
    timestamp: datetime = Field(default_factory=datetime.now)

    dry_run: bool = False
    errors: Tuple[str, ...] = ()

    @property
    def succeeded(self) -> bool:
        return not self.errors


__all__ = ["EMPTY_GUID", "InventoryRecord", "DirectoryRecord", "ProcessingOutcome"]
