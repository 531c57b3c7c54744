from abc import ABC, abstractmethod
from typing import List, Optional

from device_cleanup.models.device import DirectoryRecord, InventoryRecord


class StoreError(RuntimeError):
    """A backing store call failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class LookupFailure(StoreError):
    """The store could not be queried (network, auth or service error)."""


class DeleteFailure(StoreError):
    """A record existed but could not be removed."""


class InventoryStore(ABC):
    """Device management inventory (managed device records)."""

    @abstractmethod
    def find_by_name(self, name: str) -> List[InventoryRecord]:
        """Return records whose device name equals name. Raises LookupFailure."""

    @abstractmethod
    def delete_by_id(self, record_id: str) -> None:
        """Delete one record. Raises DeleteFailure."""


class DirectoryStore(ABC):
    """Directory service (device objects)."""

    @abstractmethod
    def find_by_display_name(self, name: str) -> List[DirectoryRecord]:
        """Return records whose displayName equals name. Raises LookupFailure."""

    @abstractmethod
    def delete_by_id(self, record_id: str) -> None:
        """Delete one record. Raises DeleteFailure."""
