"""VPK directory reading."""

from .header import VPKEntry, VPKHeader
from .reader import VPKReader, parse_directory
from .resolver import EntryLocation, archive_base_name, archive_part_name, resolve

__all__ = [
    "EntryLocation",
    "VPKEntry",
    "VPKHeader",
    "VPKReader",
    "archive_base_name",
    "archive_part_name",
    "parse_directory",
    "resolve",
]
