"""Decompiler-driven extraction of econ images."""

from .config import CATEGORY_PATHS, METADATA_FILES, ExtractorConfig
from .decompiler import DecompilerResult, Source2Viewer
from .orchestrator import ExtractionOrchestrator, ExtractionReport, select_entries
from .rename import RenameReport, rename_inline_outputs

__all__ = [
    "CATEGORY_PATHS",
    "METADATA_FILES",
    "DecompilerResult",
    "ExtractionOrchestrator",
    "ExtractionReport",
    "ExtractorConfig",
    "RenameReport",
    "Source2Viewer",
    "rename_inline_outputs",
    "select_entries",
]
