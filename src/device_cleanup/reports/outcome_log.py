"""CSV log of processing outcomes, one row per device name."""

import csv
import logging
from pathlib import Path
from typing import Dict, Iterable, Union

from device_cleanup.models.device import ProcessingOutcome

logger = logging.getLogger(__name__)

FIELDNAMES = [
    'DeviceName',
    'FoundInInventory',
    'FoundInDirectory',
    'RemovedFromInventory',
    'RemovedFromDirectory',
    'TimeStamp',
]

TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'


def _yes_no(value: bool) -> str:
    return 'Yes' if value else 'No'


def outcome_to_row(outcome: ProcessingOutcome) -> Dict[str, str]:
    return {
        'DeviceName': outcome.device_name,
        'FoundInInventory': str(outcome.found_in_inventory),
        'FoundInDirectory': str(outcome.found_in_directory),
        'RemovedFromInventory': _yes_no(outcome.removed_from_inventory),
        'RemovedFromDirectory': _yes_no(outcome.removed_from_directory),
        'TimeStamp': outcome.timestamp.strftime(TIMESTAMP_FORMAT),
    }


def write_outcome_log(outcomes: Iterable[ProcessingOutcome], path: Union[str, Path]) -> int:
    """
    Write outcomes to a CSV file in ledger order.

    Args:
        outcomes: Processing outcomes, one per input device name
        path: Output CSV path; parent directories are created

    Returns:
        Number of rows written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with open(path, 'w', newline='', encoding='utf-8') as csvfile:
        writer = csv.DictWriter(csvfile, fieldnames=FIELDNAMES)
        writer.writeheader()
        for outcome in outcomes:
            writer.writerow(outcome_to_row(outcome))
            count += 1

    logger.info(f"Wrote {count} row(s) to {path}")
    return count
