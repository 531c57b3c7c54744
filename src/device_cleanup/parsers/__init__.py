# device_cleanup.parsers package
from .device_list import parse_device_names, read_device_names

__all__ = ["parse_device_names", "read_device_names"]
