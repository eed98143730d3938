"""VPK directory header and entry structures."""

from dataclasses import dataclass
from typing import Optional

# VPK directory magic number (little-endian uint32)
VPK_MAGIC = 0x55AA1234

# Header sizes including magic, version and tree length
VPK1_HEADER_SIZE = 12
VPK2_HEADER_SIZE = 28

# Archive index marking payloads stored in the directory file after the tree
DIRECTORY_ARCHIVE_INDEX = 0x7FFF

# Tag that closes every directory entry record
ENTRY_TERMINATOR = 0xFFFF

# Placeholder written for an empty extension or directory name
EMPTY_NAME = " "


@dataclass(frozen=True)
class VPKHeader:
    """VPK directory header (12 bytes for v1, 28 bytes for v2)."""

    magic: int  # 4 bytes: 0x55AA1234
    version: int  # 4 bytes: 1 or 2
    tree_length: int  # 4 bytes: size of the directory tree
    # Version 2 only
    embedded_chunk_length: int = 0  # file data stored after the tree
    chunk_hash_length: int = 0  # archive MD5 section
    self_hash_length: int = 0  # tree/section/file MD5s
    signature_length: int = 0

    @property
    def is_valid(self) -> bool:
        return self.magic == VPK_MAGIC

    @property
    def header_size(self) -> int:
        return VPK2_HEADER_SIZE if self.version == 2 else VPK1_HEADER_SIZE

    @property
    def tree_offset(self) -> int:
        return self.header_size

    @property
    def data_offset(self) -> int:
        """Offset of the first byte past the tree (inline payloads start here)."""
        return self.header_size + self.tree_length


@dataclass(frozen=True)
class VPKEntry:
    """A single file record from the directory tree."""

    path: str
    crc32: int  # 4 bytes
    preload_bytes: int  # 2 bytes: bytes stored right after the record
    archive_index: int  # 2 bytes: part number, or 0x7FFF for the dir file
    entry_offset: int  # 4 bytes
    entry_length: int  # 4 bytes
    # Absolute position of the preload bytes in the directory buffer
    preload_offset: int = 0
    # None when the tree stored the file without an extension
    extension: Optional[str] = None

    @property
    def is_inline(self) -> bool:
        return self.archive_index == DIRECTORY_ARCHIVE_INDEX

    @property
    def size(self) -> int:
        return self.preload_bytes + self.entry_length

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def directory(self) -> str:
        if "/" not in self.path:
            return ""
        return self.path.rsplit("/", 1)[0]
