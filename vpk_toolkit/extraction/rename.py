"""Normalize decompiler output names (``foo_png.png`` -> ``foo.png``)."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

INLINE_SUFFIX = "_png.png"
CANONICAL_SUFFIX = ".png"

# Emit a progress line every this many renames
PROGRESS_INTERVAL = 100


@dataclass
class RenameReport:
    renamed: List[Tuple[Path, Path]] = field(default_factory=list)
    collisions: List[Tuple[Path, Path]] = field(default_factory=list)
    failed: List[Tuple[Path, str]] = field(default_factory=list)


def rename_inline_outputs(
    root: Path,
    suffix: str = INLINE_SUFFIX,
    replacement: str = CANONICAL_SUFFIX,
    logger: Optional[logging.Logger] = None,
) -> RenameReport:
    """Strip ``suffix`` from every file name under ``root``.

    Existing targets are never overwritten; they are reported as collisions.
    """
    log = logger or logging.getLogger(__name__)
    report = RenameReport()
    root = Path(root)

    log.info("Renaming %s files to %s...", suffix, replacement)

    # Collect first so renames don't disturb the walk
    candidates = sorted(
        path for path in root.rglob(f"*{suffix}") if path.is_file() and len(path.name) > len(suffix)
    )

    for path in candidates:
        target = path.with_name(path.name[: -len(suffix)] + replacement)
        if target.exists():
            log.warning("Not renaming %s: %s already exists", path, target.name)
            report.collisions.append((path, target))
            continue

        try:
            path.rename(target)
        except OSError as e:
            log.warning("Failed to rename %s: %s", path.name, e)
            report.failed.append((path, str(e)))
            continue

        report.renamed.append((path, target))
        if len(report.renamed) % PROGRESS_INTERVAL == 0:
            log.debug("Renamed %d files...", len(report.renamed))

    log.info("Renamed %d files", len(report.renamed))
    return report
