"""Exceptions raised while reading VPK archives and running extractions."""


class VPKError(Exception):
    """Base class for VPK parsing errors."""


class InvalidSignature(VPKError, ValueError):
    """The directory file does not start with the VPK magic number."""


class UnsupportedVersion(VPKError, ValueError):
    """The directory header declares a version other than 1 or 2."""


class OutOfBounds(VPKError, EOFError):
    """A read needed more bytes than the buffer holds."""


class UnterminatedString(VPKError, EOFError):
    """The buffer ended before a string's null terminator."""


class MalformedEntry(VPKError, ValueError):
    """A directory entry was not followed by the 0xFFFF terminator."""


class ChecksumMismatch(VPKError, ValueError):
    """Reconstructed file bytes do not match the entry's CRC32."""


class PrerequisiteError(FileNotFoundError):
    """The archive or the decompiler executable is missing."""
