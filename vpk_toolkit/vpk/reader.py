"""VPK directory parser and archive reader."""

import logging
import zlib
from pathlib import Path
from typing import BinaryIO, Dict, Iterable, Iterator, List, Optional, Tuple

from ..errors import ChecksumMismatch, InvalidSignature, MalformedEntry, UnsupportedVersion
from ..utils.binary import BinaryReader
from .header import EMPTY_NAME, ENTRY_TERMINATOR, VPK_MAGIC, VPKEntry, VPKHeader
from .paths import is_under_any, normalize_path
from .resolver import EntryLocation, archive_base_name, resolve

logger = logging.getLogger(__name__)


def parse_directory(data: bytes) -> Tuple[VPKHeader, List[VPKEntry]]:
    """Parse a VPK directory buffer into its header and a flat entry list.

    Entries come back in tree order (extension, then directory, then file).
    Any error aborts the whole parse.
    """
    reader = BinaryReader(data)
    header = _read_header(reader)

    # Confine tree reads to the declared tree so oversized preload counts fail
    tree = BinaryReader(data[: header.data_offset])
    tree.seek(header.tree_offset)
    entries = _read_tree(tree)

    if tree.tell() != header.data_offset:
        logger.warning(
            "Header declares a %d byte tree but parsing stopped after %d bytes",
            header.tree_length,
            tree.tell() - header.tree_offset,
        )
    return header, entries


def _read_header(reader: BinaryReader) -> VPKHeader:
    """Read the v1 or v2 directory header."""
    magic = reader.read_u32()
    if magic != VPK_MAGIC:
        raise InvalidSignature(f"Invalid VPK magic: 0x{magic:08X}, expected 0x{VPK_MAGIC:08X}")

    version = reader.read_u32()
    tree_length = reader.read_u32()

    if version == 1:
        return VPKHeader(magic=magic, version=version, tree_length=tree_length)
    if version != 2:
        raise UnsupportedVersion(f"Unsupported VPK version: {version}")

    return VPKHeader(
        magic=magic,
        version=version,
        tree_length=tree_length,
        embedded_chunk_length=reader.read_u32(),
        chunk_hash_length=reader.read_u32(),
        self_hash_length=reader.read_u32(),
        signature_length=reader.read_u32(),
    )


def _read_tree(reader: BinaryReader) -> List[VPKEntry]:
    """Walk the extension -> directory -> filename lists.

    Each list is terminated by an empty string.
    """
    entries = []

    while True:
        extension = reader.read_cstring()
        if not extension:
            break
        if extension == EMPTY_NAME:
            extension = None

        while True:
            directory = reader.read_cstring()
            if not directory:
                break
            directory = "" if directory == EMPTY_NAME else directory.replace("\\", "/")

            while True:
                filename = reader.read_cstring()
                if not filename:
                    break
                entries.append(_read_entry(reader, directory, filename, extension))

    return entries


def _read_entry(reader: BinaryReader, directory: str, filename: str, extension: Optional[str]) -> VPKEntry:
    """Read one 18-byte entry record and skip its preload bytes."""
    path = f"{directory}/{filename}" if directory else filename
    if extension is not None:
        path = f"{path}.{extension}"

    crc32 = reader.read_u32()
    preload_bytes = reader.read_u16()
    archive_index = reader.read_u16()
    entry_offset = reader.read_u32()
    entry_length = reader.read_u32()
    terminator = reader.read_u16()

    if terminator != ENTRY_TERMINATOR:
        raise MalformedEntry(
            f"Entry {path} ends with 0x{terminator:04X} at offset {reader.tell() - 2}, "
            f"expected 0x{ENTRY_TERMINATOR:04X}"
        )

    preload_offset = reader.tell()
    if preload_bytes:
        reader.skip(preload_bytes)

    return VPKEntry(
        path=path,
        crc32=crc32,
        preload_bytes=preload_bytes,
        archive_index=archive_index,
        entry_offset=entry_offset,
        entry_length=entry_length,
        preload_offset=preload_offset,
        extension=extension,
    )


class VPKReader:
    """Reader for VPK directory files and their numbered part files."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.archive_base = archive_base_name(self.path)
        self._data: Optional[bytes] = None
        self._header: Optional[VPKHeader] = None
        self._entries: List[VPKEntry] = []
        self._index: Dict[str, VPKEntry] = {}
        self._parts: Dict[int, BinaryIO] = {}

    def __enter__(self) -> "VPKReader":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def open(self) -> None:
        """Load the directory file and parse its tree."""
        self._index = {}
        self._data = self.path.read_bytes()
        self._header, self._entries = parse_directory(self._data)
        # First occurrence wins for lookups; the entry list keeps duplicates
        for entry in self._entries:
            self._index.setdefault(entry.path, entry)
        logger.info("Loaded VPK with %d files", len(self._entries))

    def close(self) -> None:
        """Close part files and release the directory buffer."""
        for part in self._parts.values():
            part.close()
        self._parts.clear()
        self._data = None

    @property
    def header(self) -> VPKHeader:
        if not self._header:
            raise RuntimeError("Archive not opened")
        return self._header

    @property
    def entries(self) -> List[VPKEntry]:
        return self._entries

    def list_files(self, prefixes: Optional[Iterable[str]] = None) -> List[str]:
        """List entry paths, optionally only those under the given prefixes."""
        if not prefixes:
            return [e.path for e in self._entries]
        prefixes = list(prefixes)
        return [e.path for e in self._entries if is_under_any(e.path, prefixes)]

    def get_entry_by_name(self, path: str) -> Optional[VPKEntry]:
        """Find an entry by its archive path."""
        return self._index.get(normalize_path(path))

    def locate(self, entry: VPKEntry) -> EntryLocation:
        if self._data is None:
            raise RuntimeError("Archive not opened")
        return resolve(entry, self._data, self.header, self.archive_base)

    def read_file(self, entry: VPKEntry, verify: bool = True) -> bytes:
        """Return an entry's full contents: preload bytes followed by the payload."""
        location = self.locate(entry)
        preload = self._data[location.preload_offset : location.preload_offset + location.preload_length]

        if location.length == 0:
            payload = b""
        elif location.in_directory:
            payload = self._data[location.offset : location.end]
        else:
            part = self._open_part(entry.archive_index, location.part_name)
            part.seek(location.offset)
            payload = BinaryReader(part).read_bytes(location.length)

        data = preload + payload
        if verify:
            crc = zlib.crc32(data) & 0xFFFFFFFF
            if crc != entry.crc32:
                raise ChecksumMismatch(f"CRC mismatch for {entry.path}: got 0x{crc:08X}, expected 0x{entry.crc32:08X}")
        return data

    def extract_all(
        self,
        output_dir: Path,
        prefixes: Optional[Iterable[str]] = None,
        verify: bool = True,
    ) -> Iterator[Tuple[str, Path]]:
        """Write entries to the output directory.

        Yields (path, output_path) for each written file.
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        prefixes = list(prefixes) if prefixes else None

        for entry in self._entries:
            if prefixes and not is_under_any(entry.path, prefixes):
                continue

            output_path = output_dir.joinpath(*entry.path.split("/"))
            if output_dir.resolve() not in output_path.resolve().parents:
                raise ValueError(f"Entry path escapes the output directory: {entry.path}")
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(self.read_file(entry, verify=verify))

            yield entry.path, output_path

    def _open_part(self, archive_index: int, part_name: str) -> BinaryIO:
        if archive_index not in self._parts:
            part_path = self.path.parent / part_name
            if not part_path.is_file():
                raise FileNotFoundError(f"Missing archive part: {part_name} (needed for index {archive_index})")
            self._parts[archive_index] = open(part_path, "rb")
        return self._parts[archive_index]
