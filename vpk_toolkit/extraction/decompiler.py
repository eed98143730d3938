"""Source2Viewer-CLI invocation."""

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional


@dataclass
class DecompilerResult:
    """Outcome of one decompiler run for one archive path."""

    vpk_path: str
    returncode: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.returncode == 0


class Source2Viewer:
    """Runs Source2Viewer-CLI to decompile one archive path into a directory.

    Textures come out as ``<name>_png.png``.
    """

    def __init__(self, executable: Path, timeout: Optional[float] = None):
        self.executable = Path(executable)
        self.timeout = timeout

    def command(self, archive: Path, vpk_path: str, output_dir: Path) -> List[str]:
        return [
            str(self.executable),
            "--input",
            str(archive),
            "--vpk_filepath",
            vpk_path,
            "-o",
            str(output_dir),
            "-d",
        ]

    def __call__(self, archive: Path, vpk_path: str, output_dir: Path) -> DecompilerResult:
        try:
            completed = subprocess.run(
                self.command(archive, vpk_path, output_dir),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            return DecompilerResult(vpk_path, error=f"timed out after {self.timeout:g}s")
        except OSError as e:
            return DecompilerResult(vpk_path, error=str(e))

        result = DecompilerResult(vpk_path, returncode=completed.returncode)
        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace").strip()
            result.error = stderr.splitlines()[-1] if stderr else f"exit status {completed.returncode}"
        return result
