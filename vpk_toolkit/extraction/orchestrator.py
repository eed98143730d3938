"""Drive the decompiler over the requested archive paths.

One decompiler process per requested prefix runs on a thread pool. A failed
prefix is logged and recorded; the others still run, and the rename pass
always runs once every process has finished.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from ..errors import PrerequisiteError
from ..vpk import VPKEntry, VPKReader
from ..vpk.paths import is_under, normalize_path
from .config import ExtractorConfig
from .decompiler import DecompilerResult, Source2Viewer
from .rename import RenameReport, rename_inline_outputs

Runner = Callable[[Path, str, Path], DecompilerResult]


@dataclass
class ExtractionReport:
    results: List[DecompilerResult] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    rename: Optional[RenameReport] = None

    @property
    def succeeded(self) -> List[str]:
        return [r.vpk_path for r in self.results if r.ok]

    @property
    def failed(self) -> List[str]:
        return [r.vpk_path for r in self.results if not r.ok]


def select_entries(entries: Iterable[VPKEntry], prefixes: Iterable[str]) -> Dict[str, List[VPKEntry]]:
    """Group entries by the requested prefix they fall under.

    Duplicate prefixes collapse into one key; an entry under two prefixes is
    listed under both.
    """
    selected: Dict[str, List[VPKEntry]] = {normalize_path(p): [] for p in prefixes}
    for entry in entries:
        for prefix, matches in selected.items():
            if is_under(entry.path, prefix):
                matches.append(entry)
    return selected


class ExtractionOrchestrator:
    """Extract the configured econ images and metadata files."""

    def __init__(
        self,
        config: ExtractorConfig,
        runner: Optional[Runner] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config
        self.runner = runner or Source2Viewer(config.executable_path, timeout=config.timeout)
        self.log = logger or logging.getLogger(__name__)

    def check_prerequisites(self) -> None:
        """Fail early if the archive or the decompiler is missing."""
        if not self.config.archive_path.is_file():
            raise PrerequisiteError(f"VPK file not found at: {self.config.archive_path}")
        if not self.config.executable_path.is_file():
            raise PrerequisiteError(
                f"Source2Viewer not found at: {self.config.executable_path}. "
                f"Please ensure {self.config.decompiler} is in the data directory"
            )

    def run(self) -> ExtractionReport:
        self.check_prerequisites()

        self.log.info("Loading VPK files...")
        with VPKReader(self.config.archive_path) as reader:
            selected = select_entries(reader.entries, self.config.requested_paths())

        report = ExtractionReport()
        to_dump = []
        for prefix, matches in selected.items():
            if matches:
                self.log.debug("%s: %d entries", prefix, len(matches))
                to_dump.append(prefix)
            else:
                self.log.warning("Nothing in the archive under %s, skipping", prefix)
                report.skipped.append(prefix)

        self.log.info("Starting PNG extraction...")
        report.results = self.dump(to_dump)
        report.rename = rename_inline_outputs(self.config.output_dir, logger=self.log)

        if report.failed:
            self.log.warning("Extraction finished with %d failed paths", len(report.failed))
        else:
            self.log.info("PNG extraction completed successfully!")
        return report

    def dump(self, prefixes: Iterable[str]) -> List[DecompilerResult]:
        """Run the decompiler once per distinct prefix and wait for all of them.

        Results come back in prefix order.
        """
        prefixes = list(dict.fromkeys(normalize_path(p) for p in prefixes))
        if not prefixes:
            return []

        self.log.info("Extracting %d directories/files...", len(prefixes))
        results: Dict[str, DecompilerResult] = {}

        with ThreadPoolExecutor(max_workers=min(self.config.max_workers, len(prefixes))) as pool:
            futures = {pool.submit(self._dump_one, prefix): prefix for prefix in prefixes}
            for future in as_completed(futures):
                results[futures[future]] = future.result()

        return [results[prefix] for prefix in prefixes]

    def _dump_one(self, prefix: str) -> DecompilerResult:
        self.log.debug("Dumping %s...", prefix)
        try:
            result = self.runner(self.config.archive_path, prefix, self.config.output_dir)
        except Exception as e:
            result = DecompilerResult(prefix, error=f"{type(e).__name__}: {e}")

        if result.ok:
            self.log.debug("Dumped %s", prefix)
        else:
            self.log.warning("Warning extracting %s: %s", prefix, result.error or f"exit status {result.returncode}")
        return result
