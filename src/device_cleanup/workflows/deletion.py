"""
Reconciling device deletion workflow.

Deletes each named device from the inventory store, then deletes the one
directory object that is provably the same device: same displayName AND a
deviceId equal to the directory identifier read from the inventory record
before it was deleted.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, List, Optional

from device_cleanup.logger import log_device_action
from device_cleanup.models.device import DirectoryRecord, InventoryRecord, ProcessingOutcome
from device_cleanup.services.base import (
    DeleteFailure,
    DirectoryStore,
    InventoryStore,
    LookupFailure,
)

logger = logging.getLogger(__name__)


def select_directory_match(records: List[DirectoryRecord], name: str,
                           directory_device_id: Optional[str]) -> Optional[DirectoryRecord]:
    """Return the first record named name whose deviceId equals directory_device_id, if any."""
    matches = [record for record in records if record.matches(name, directory_device_id)]
    if len(matches) > 1:
        logger.warning(f"{len(matches)} directory objects share deviceId {directory_device_id}; "
                       f"using {matches[0].id}")
    return matches[0] if matches else None


class DeletionProcessor:
    """
    Per-device deletion state machine over an inventory and a directory store.

    Stores are injected so tests can swap in fakes. Store errors never
    propagate out of process_device(); they are logged and recorded on the
    outcome, and the batch moves on.
    """

    def __init__(self, inventory: InventoryStore, directory: DirectoryStore,
                 dry_run: bool = False):
        self.inventory = inventory
        self.directory = directory
        self.dry_run = dry_run

    def process_device(self, name: str) -> ProcessingOutcome:
        """Run inventory lookup/delete then directory lookup/match/delete for one name."""
        logger.info(f"Processing device: {name}")

        found_in_inventory = False
        found_in_directory = False
        removed_from_inventory = False
        removed_from_directory = False
        errors: List[str] = []

        def outcome() -> ProcessingOutcome:
            return ProcessingOutcome(
                device_name=name,
                found_in_inventory=found_in_inventory,
                found_in_directory=found_in_directory,
                removed_from_inventory=removed_from_inventory,
                removed_from_directory=removed_from_directory,
                timestamp=datetime.now(),
                dry_run=self.dry_run,
                errors=tuple(errors),
            )

        # 1. Inventory lookup
        try:
            inventory_records = self.inventory.find_by_name(name)
        except LookupFailure as e:
            log_device_action(name, "INVENTORY_LOOKUP", "FAILED", str(e))
            errors.append(str(e))
            return outcome()

        if not inventory_records:
            log_device_action(name, "INVENTORY_LOOKUP", "SKIPPED", "not found in inventory")
            return outcome()

        found_in_inventory = True
        if len(inventory_records) > 1:
            logger.warning(f"{len(inventory_records)} inventory records named '{name}'; "
                           f"using the first ({inventory_records[0].id})")
        record: InventoryRecord = inventory_records[0]

        # Captured before deletion; the inventory record is gone afterwards.
        directory_device_id = record.directory_device_id
        logger.info(f"Found in inventory: {name} (id={record.id}, "
                    f"directoryDeviceId={directory_device_id or '<none>'})")

        # 2. Inventory delete
        if self.dry_run:
            log_device_action(name, "INVENTORY_DELETE", "DRY_RUN", f"would delete {record.id}")
        else:
            try:
                self.inventory.delete_by_id(record.id)
                removed_from_inventory = True
                log_device_action(name, "INVENTORY_DELETE", "SUCCESS", record.id)
            except DeleteFailure as e:
                log_device_action(name, "INVENTORY_DELETE", "FAILED", str(e))
                errors.append(str(e))

        # 3. Directory lookup, gated on "found in inventory" rather than "removed"
        try:
            directory_records = self.directory.find_by_display_name(name)
        except LookupFailure as e:
            log_device_action(name, "DIRECTORY_LOOKUP", "FAILED", str(e))
            errors.append(str(e))
            return outcome()

        found_in_directory = len(directory_records) > 0
        for entry in directory_records:
            logger.info(f"Directory object '{entry.display_name}': id={entry.id}, "
                        f"deviceId={entry.device_id or '<none>'}")

        # 4. Strict match
        match = select_directory_match(directory_records, name, directory_device_id)
        if match is None:
            if not directory_device_id:
                reason = "inventory record has no directory device id"
            elif found_in_directory:
                reason = f"no directory object with deviceId {directory_device_id}"
            else:
                reason = "not found in directory"
            log_device_action(name, "DIRECTORY_MATCH", "SKIPPED", reason)
            return outcome()

        # 5. Directory delete
        if self.dry_run:
            log_device_action(name, "DIRECTORY_DELETE", "DRY_RUN",
                              f"would delete {match.id} (deviceId={match.device_id})")
            return outcome()

        # Stricter than the lookup gate: no directory delete unless the inventory delete succeeded.
        if not removed_from_inventory:
            log_device_action(name, "DIRECTORY_DELETE", "SKIPPED",
                              f"inventory delete failed; leaving {match.id} in place")
            return outcome()

        try:
            self.directory.delete_by_id(match.id)
            removed_from_directory = True
            log_device_action(name, "DIRECTORY_DELETE", "SUCCESS",
                              f"{match.id} (deviceId={match.device_id})")
        except DeleteFailure as e:
            log_device_action(name, "DIRECTORY_DELETE", "FAILED", str(e))
            errors.append(str(e))

        return outcome()

    def iter_outcomes(self, names: Iterable[str]) -> Iterator[ProcessingOutcome]:
        """Yield one outcome per name, strictly in input order."""
        for name in names:
            yield self.process_device(name)

    def run(self, names: Iterable[str]) -> List[ProcessingOutcome]:
        """Process every name and return the ledger."""
        return list(self.iter_outcomes(names))


def summarize(outcomes: List[ProcessingOutcome]) -> Dict[str, Any]:
    """Counts for the end-of-run summary."""
    return {
        'processed': len(outcomes),
        'found_in_inventory': sum(1 for o in outcomes if o.found_in_inventory),
        'removed_from_inventory': sum(1 for o in outcomes if o.removed_from_inventory),
        'found_in_directory': sum(1 for o in outcomes if o.found_in_directory),
        'removed_from_directory': sum(1 for o in outcomes if o.removed_from_directory),
        'with_errors': sum(1 for o in outcomes if o.errors),
    }
