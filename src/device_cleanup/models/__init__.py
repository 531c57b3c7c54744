from .device import EMPTY_GUID, DirectoryRecord, InventoryRecord, ProcessingOutcome

__all__ = ["EMPTY_GUID", "DirectoryRecord", "InventoryRecord", "ProcessingOutcome"]
