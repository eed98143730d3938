"""Binary reading utilities for little-endian VPK data."""

import struct
from io import BytesIO
from typing import BinaryIO, Union

from ..errors import OutOfBounds, UnterminatedString


class BinaryReader:
    """Helper for reading little-endian binary data (Source engine format)."""

    def __init__(self, data: Union[bytes, BinaryIO]):
        if isinstance(data, (bytes, bytearray, memoryview)):
            self._stream = BytesIO(data)
        else:
            self._stream = data

    @property
    def stream(self) -> BinaryIO:
        return self._stream

    def tell(self) -> int:
        return self._stream.tell()

    def seek(self, offset: int, whence: int = 0) -> int:
        return self._stream.seek(offset, whence)

    def read_bytes(self, size: int) -> bytes:
        data = self._stream.read(size)
        if len(data) < size:
            raise OutOfBounds(f"Expected {size} bytes at offset {self.tell() - len(data)}, got {len(data)}")
        return data

    def read_u8(self) -> int:
        return struct.unpack("<B", self.read_bytes(1))[0]

    def read_u16(self) -> int:
        return struct.unpack("<H", self.read_bytes(2))[0]

    def read_u32(self) -> int:
        return struct.unpack("<I", self.read_bytes(4))[0]

    def read_i8(self) -> int:
        return struct.unpack("<b", self.read_bytes(1))[0]

    def read_i16(self) -> int:
        return struct.unpack("<h", self.read_bytes(2))[0]

    def read_i32(self) -> int:
        return struct.unpack("<i", self.read_bytes(4))[0]

    def read_cstring(self) -> str:
        """Read a null-terminated UTF-8 string.

        The cursor ends up just past the terminator. Running off the end of
        the buffer raises UnterminatedString.
        """
        start = self.tell()
        chars = []
        while True:
            byte = self._stream.read(1)
            if not byte:
                raise UnterminatedString(f"No null terminator for string starting at offset {start}")
            if byte == b"\x00":
                break
            chars.append(byte)
        return b"".join(chars).decode("utf-8", errors="replace")

    def skip(self, count: int) -> None:
        """Skip forward by count bytes."""
        if count > self.remaining():
            raise OutOfBounds(f"Cannot skip {count} bytes at offset {self.tell()}, {self.remaining()} remain")
        self._stream.seek(count, 1)

    def remaining(self) -> int:
        """Return number of bytes remaining in stream."""
        current = self.tell()
        self._stream.seek(0, 2)  # Seek to end
        end = self.tell()
        self._stream.seek(current)
        return end - current
