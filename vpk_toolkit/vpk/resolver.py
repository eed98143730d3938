"""Map directory entries to the part file and byte range holding their data.

Nothing here touches the filesystem; callers decide how to read the ranges.
"""

from dataclasses import dataclass
from pathlib import PurePath
from typing import Optional, Union

from ..errors import OutOfBounds
from .header import VPKEntry, VPKHeader

DIRECTORY_SUFFIX = "_dir"


@dataclass(frozen=True)
class EntryLocation:
    """Where an entry's bytes live.

    ``part_name`` is None when the payload is stored in the directory file
    itself. The preload range always refers to the directory file.
    """

    part_name: Optional[str]
    offset: int
    length: int
    preload_offset: int
    preload_length: int

    @property
    def in_directory(self) -> bool:
        return self.part_name is None

    @property
    def end(self) -> int:
        return self.offset + self.length


def archive_base_name(directory_path: Union[str, PurePath]) -> str:
    """Return the part file prefix for a directory file.

    ``pak01_dir.vpk`` becomes ``pak01``. A single-file VPK keeps its stem.
    """
    stem = PurePath(directory_path).stem
    if stem.endswith(DIRECTORY_SUFFIX):
        return stem[: -len(DIRECTORY_SUFFIX)]
    return stem


def archive_part_name(archive_base: str, archive_index: int) -> str:
    """Name of a numbered part file, e.g. ``pak01_007.vpk``."""
    return f"{archive_base}_{archive_index:03d}.vpk"


def resolve(
    entry: VPKEntry,
    directory: bytes,
    header: VPKHeader,
    archive_base: str = "pak01",
) -> EntryLocation:
    """Compute the location of an entry's payload.

    Inline payloads (archive index 0x7FFF) are addressed relative to the end
    of the tree and must fit inside ``directory``.
    """
    if entry.preload_offset + entry.preload_bytes > len(directory):
        raise OutOfBounds(
            f"Preload bytes of {entry.path} end at {entry.preload_offset + entry.preload_bytes}, "
            f"directory is {len(directory)} bytes"
        )

    if entry.is_inline:
        offset = header.data_offset + entry.entry_offset
        if offset + entry.entry_length > len(directory):
            raise OutOfBounds(
                f"Inline data of {entry.path} ends at {offset + entry.entry_length}, "
                f"directory is {len(directory)} bytes"
            )
        part_name = None
    else:
        offset = entry.entry_offset
        part_name = archive_part_name(archive_base, entry.archive_index)

    return EntryLocation(
        part_name=part_name,
        offset=offset,
        length=entry.entry_length,
        preload_offset=entry.preload_offset,
        preload_length=entry.preload_bytes,
    )
