"""
Intune managed-device inventory store.

Looks up managed devices by exact device name and deletes them by their
Intune record id, through a shared GraphSession.
"""

from __future__ import annotations

import logging
from typing import List

from device_cleanup.models.device import InventoryRecord
from device_cleanup.services.base import DeleteFailure, InventoryStore, LookupFailure
from device_cleanup.services.graph import GraphError, GraphSession, odata_quote

logger = logging.getLogger(__name__)

MANAGED_DEVICES = "/deviceManagement/managedDevices"


class IntuneInventoryStore(InventoryStore):
    """Intune managedDevices via Microsoft Graph."""

    def __init__(self, graph: GraphSession):
        self.graph = graph

    def find_by_name(self, name: str) -> List[InventoryRecord]:
        params = {
            "$filter": f"deviceName eq {odata_quote(name)}",
            "$select": "id,deviceName,azureADDeviceId",
        }
        try:
            items = self.graph.get_all(MANAGED_DEVICES, params=params)
        except GraphError as e:
            raise LookupFailure(f"Intune lookup for '{name}' failed: {e}", e.status_code) from e

        records = [InventoryRecord.model_validate(item) for item in items]
        logger.debug(f"Intune returned {len(records)} record(s) for '{name}'")
        return records

    def delete_by_id(self, record_id: str) -> None:
        try:
            self.graph.delete(f"{MANAGED_DEVICES}/{record_id}")
        except GraphError as e:
            raise DeleteFailure(f"Intune delete of {record_id} failed: {e}", e.status_code) from e
