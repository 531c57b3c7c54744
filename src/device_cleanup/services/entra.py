"""
Entra ID device-object directory store.

displayName is not unique in Entra; callers get every device object that
carries the name and decide which one (if any) to delete.
"""

from __future__ import annotations

import logging
from typing import List

from device_cleanup.models.device import DirectoryRecord
from device_cleanup.services.base import DeleteFailure, DirectoryStore, LookupFailure
from device_cleanup.services.graph import GraphError, GraphSession, odata_quote

logger = logging.getLogger(__name__)

DEVICES = "/devices"


class EntraDirectoryStore(DirectoryStore):
    """Entra ID device objects via Microsoft Graph."""

    def __init__(self, graph: GraphSession):
        self.graph = graph

    def find_by_display_name(self, name: str) -> List[DirectoryRecord]:
        params = {
            "$filter": f"displayName eq {odata_quote(name)}",
            "$select": "id,displayName,deviceId",
        }
        try:
            items = self.graph.get_all(DEVICES, params=params)
        except GraphError as e:
            raise LookupFailure(f"Entra lookup for '{name}' failed: {e}", e.status_code) from e

        return [DirectoryRecord.model_validate(item) for item in items]

    def delete_by_id(self, record_id: str) -> None:
        try:
            self.graph.delete(f"{DEVICES}/{record_id}")
        except GraphError as e:
            raise DeleteFailure(f"Entra delete of {record_id} failed: {e}", e.status_code) from e
