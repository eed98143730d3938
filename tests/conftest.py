"""Shared fixtures: synthetic VPK directory files."""

import logging
import struct

import pytest

VPK_MAGIC = 0x55AA1234


def build_vpk(tree, version=2, inline_data=b"", corrupt_terminator_at=None):
    """Build a VPK directory buffer.

    ``tree`` maps extension -> directory -> list of file specs. A file spec is
    a filename or a dict with ``name`` and optional ``crc``, ``preload``
    (bytes), ``archive_index``, ``offset``, ``length``.
    """
    body = bytearray()
    count = 0

    def cstring(value):
        body.extend(value.encode("utf-8") + b"\x00")

    for extension, directories in tree.items():
        cstring(extension)
        for directory, files in directories.items():
            cstring(directory)
            for spec in files:
                if isinstance(spec, str):
                    spec = {"name": spec}
                preload = spec.get("preload", b"")
                cstring(spec["name"])
                terminator = 0xFFFF if count != corrupt_terminator_at else 0xBEEF
                body.extend(
                    struct.pack(
                        "<IHHIIH",
                        spec.get("crc", 0),
                        len(preload),
                        spec.get("archive_index", 0),
                        spec.get("offset", 0),
                        spec.get("length", 0),
                        terminator,
                    )
                )
                body.extend(preload)
                count += 1
            cstring("")
        cstring("")
    cstring("")

    header = struct.pack("<III", VPK_MAGIC, version, len(body))
    if version == 2:
        header += struct.pack("<IIII", len(inline_data), 0, 0, 0)
    return header + bytes(body) + inline_data


@pytest.fixture
def make_vpk():
    return build_vpk


@pytest.fixture
def sample_tree():
    return {
        "png": {
            "panorama/images/econ/stickers": ["sticker1", "sticker2"],
            "panorama/images/econ/weapon_cases": ["case1"],
        },
        "txt": {
            "scripts/items": ["items_game"],
            "resource": ["csgo_english"],
        },
        " ": {
            " ": ["README"],
        },
    }


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers added by setup_logging so later tests don't write to closed streams."""
    yield
    logger = logging.getLogger("vpk_toolkit")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
