from .outcome_log import FIELDNAMES, outcome_to_row, write_outcome_log

__all__ = ["FIELDNAMES", "outcome_to_row", "write_outcome_log"]
