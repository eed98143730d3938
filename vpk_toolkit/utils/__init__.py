"""Shared helpers."""

from .binary import BinaryReader
from .log import setup_logging

__all__ = ["BinaryReader", "setup_logging"]
