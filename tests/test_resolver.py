"""Tests for entry resolution and the file-backed archive reader."""

import zlib

import pytest

from vpk_toolkit.errors import ChecksumMismatch, OutOfBounds
from vpk_toolkit.vpk import VPKReader, archive_base_name, archive_part_name, parse_directory, resolve
from vpk_toolkit.vpk.header import DIRECTORY_ARCHIVE_INDEX

INLINE = b"0123456789abcdef"
PART_PAYLOAD = b"\x89PNG" + b"\x11" * 60


def crc32(data):
    return zlib.crc32(data) & 0xFFFFFFFF


class TestNaming:
    def test_archive_base_name(self):
        assert archive_base_name("game/csgo/pak01_dir.vpk") == "pak01"

    def test_archive_base_name_single_file(self):
        assert archive_base_name("addon.vpk") == "addon"

    def test_part_name_padding(self):
        assert archive_part_name("pak01", 0) == "pak01_000.vpk"
        assert archive_part_name("pak01", 7) == "pak01_007.vpk"
        assert archive_part_name("pak01", 123) == "pak01_123.vpk"


class TestResolve:
    """Tests for resolve()."""

    def test_inline_entry(self, make_vpk):
        spec = {"name": "inline", "archive_index": DIRECTORY_ARCHIVE_INDEX, "offset": 4, "length": 6}
        data = make_vpk({"txt": {"a": [spec]}}, inline_data=INLINE)
        header, entries = parse_directory(data)

        location = resolve(entries[0], data, header)

        assert location.in_directory
        assert location.part_name is None
        assert location.offset == header.data_offset + 4
        assert location.end <= len(data)
        assert data[location.offset : location.end] == b"456789"

    def test_inline_entry_past_end(self, make_vpk):
        spec = {"name": "inline", "archive_index": DIRECTORY_ARCHIVE_INDEX, "offset": 10, "length": 100}
        data = make_vpk({"txt": {"a": [spec]}}, inline_data=INLINE)
        header, entries = parse_directory(data)

        with pytest.raises(OutOfBounds):
            resolve(entries[0], data, header)

    def test_part_entry(self, make_vpk):
        spec = {"name": "sticker1", "archive_index": 3, "offset": 2048, "length": 100}
        data = make_vpk({"png": {"panorama/images/econ/stickers": [spec]}})
        header, entries = parse_directory(data)

        location = resolve(entries[0], data, header, archive_base="pak01")

        assert not location.in_directory
        assert location.part_name == "pak01_003.vpk"
        assert location.offset == 2048
        assert location.length == 100

    def test_preload_range(self, make_vpk):
        spec = {"name": "cfg", "preload": b"HEAD", "archive_index": 0, "offset": 0, "length": 10}
        data = make_vpk({"txt": {"a": [spec]}})
        header, entries = parse_directory(data)

        location = resolve(entries[0], data, header)

        assert location.preload_length == 4
        assert data[location.preload_offset : location.preload_offset + 4] == b"HEAD"


@pytest.fixture
def archive(tmp_path, make_vpk):
    """pak01_dir.vpk with one inline file, one part file entry and one preload-only file."""
    preload_only = b"key value\n"
    tree = {
        "png": {
            "panorama/images/econ/stickers": [
                {"name": "sticker1", "crc": crc32(PART_PAYLOAD), "archive_index": 0, "offset": 8, "length": len(PART_PAYLOAD)},
            ],
        },
        "txt": {
            "resource": [
                {"name": "inline", "crc": crc32(b"HI" + INLINE[:6]), "preload": b"HI",
                 "archive_index": DIRECTORY_ARCHIVE_INDEX, "offset": 0, "length": 6},
                {"name": "preloaded", "crc": crc32(preload_only), "preload": preload_only,
                 "archive_index": DIRECTORY_ARCHIVE_INDEX, "offset": 0, "length": 0},
                {"name": "broken", "crc": 0x12345678, "archive_index": DIRECTORY_ARCHIVE_INDEX, "offset": 0, "length": 4},
            ],
        },
    }
    (tmp_path / "pak01_dir.vpk").write_bytes(make_vpk(tree, inline_data=INLINE))
    (tmp_path / "pak01_000.vpk").write_bytes(b"\x00" * 8 + PART_PAYLOAD)
    return tmp_path / "pak01_dir.vpk"


class TestVPKReader:
    """Tests for VPKReader."""

    def test_header_requires_open(self, archive):
        with pytest.raises(RuntimeError):
            VPKReader(archive).header

    def test_list_files(self, archive):
        with VPKReader(archive) as reader:
            assert reader.archive_base == "pak01"
            assert len(reader.entries) == 4
            assert reader.list_files(["resource"]) == [
                "resource/inline.txt",
                "resource/preloaded.txt",
                "resource/broken.txt",
            ]

    def test_get_entry_by_name(self, archive):
        with VPKReader(archive) as reader:
            entry = reader.get_entry_by_name("/panorama\\images/econ/stickers/sticker1.png")
            assert entry is not None
            assert entry.archive_index == 0
            assert reader.get_entry_by_name("missing.png") is None

    def test_read_from_part(self, archive):
        with VPKReader(archive) as reader:
            entry = reader.get_entry_by_name("panorama/images/econ/stickers/sticker1.png")
            assert reader.read_file(entry) == PART_PAYLOAD

    def test_read_inline_with_preload(self, archive):
        with VPKReader(archive) as reader:
            entry = reader.get_entry_by_name("resource/inline.txt")
            assert reader.read_file(entry) == b"HI" + INLINE[:6]

    def test_read_preload_only(self, archive):
        with VPKReader(archive) as reader:
            assert reader.read_file(reader.get_entry_by_name("resource/preloaded.txt")) == b"key value\n"

    def test_checksum_mismatch(self, archive):
        with VPKReader(archive) as reader:
            entry = reader.get_entry_by_name("resource/broken.txt")
            with pytest.raises(ChecksumMismatch):
                reader.read_file(entry)
            assert reader.read_file(entry, verify=False) == INLINE[:4]

    def test_missing_part(self, archive):
        (archive.parent / "pak01_000.vpk").unlink()
        with VPKReader(archive) as reader:
            entry = reader.get_entry_by_name("panorama/images/econ/stickers/sticker1.png")
            with pytest.raises(FileNotFoundError, match="pak01_000.vpk"):
                reader.read_file(entry)

    def test_reopen_and_close(self, archive, make_vpk):
        reader = VPKReader(archive)
        reader.open()
        entry = reader.get_entry_by_name("resource/inline.txt")
        reader.close()

        with pytest.raises(RuntimeError):
            reader.read_file(entry)

        archive.write_bytes(make_vpk({"txt": {"resource": ["other"]}}))
        reader.open()
        assert reader.get_entry_by_name("resource/inline.txt") is None
        assert reader.get_entry_by_name("resource/other.txt") is not None
        reader.close()

    def test_truncated_part(self, archive):
        (archive.parent / "pak01_000.vpk").write_bytes(b"\x00" * 12)
        with VPKReader(archive) as reader:
            entry = reader.get_entry_by_name("panorama/images/econ/stickers/sticker1.png")
            with pytest.raises(OutOfBounds):
                reader.read_file(entry)

    def test_extract_all_with_prefix(self, archive, tmp_path):
        output = tmp_path / "out"
        with VPKReader(archive) as reader:
            written = list(reader.extract_all(output, ["panorama/images/econ/stickers"]))

        assert [path for path, _ in written] == ["panorama/images/econ/stickers/sticker1.png"]
        assert (output / "panorama/images/econ/stickers/sticker1.png").read_bytes() == PART_PAYLOAD
        assert not (output / "resource").exists()
