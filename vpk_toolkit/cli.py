"""VPK Toolkit CLI."""

import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from . import __version__
from .extraction.config import CATEGORY_PATHS

LOG_LEVELS = ["debug", "info", "warning", "error"]


@click.group()
@click.version_option(version=__version__)
def main():
    """VPK Toolkit - Read Valve VPK archives and extract CS2 econ images.

    \b
    info / list / locate / unpack: built-in VPK directory reader
    extract: Source2Viewer-CLI run over the selected econ folders
    rename:  strip the _png.png suffix Source2Viewer leaves behind
    """
    pass


@main.command()
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def info(archive: Path):
    """Show the header of a VPK directory file."""
    from .vpk import VPKReader

    try:
        with VPKReader(archive) as reader:
            header = reader.header
            click.echo(f"Archive:   {archive}")
            click.echo(f"Version:   {header.version}")
            click.echo(f"Tree size: {header.tree_length} bytes")
            if header.version == 2:
                click.echo(f"Embedded:  {header.embedded_chunk_length} bytes")
                click.echo(f"Hashes:    {header.chunk_hash_length} + {header.self_hash_length} bytes")
                click.echo(f"Signature: {header.signature_length} bytes")
            click.echo(f"Files:     {len(reader.entries)}")

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command(name="list")
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-p", "--prefix", "prefixes", multiple=True, help="Only list paths under this directory")
def list_files(archive: Path, prefixes: Tuple[str, ...]):
    """List files in a VPK archive."""
    from .vpk import VPKReader

    try:
        with VPKReader(archive) as reader:
            files = reader.list_files(prefixes)
            for path in files:
                click.echo(path)
            click.echo(f"\n{len(files)} files", err=True)

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("path")
def locate(archive: Path, path: str):
    """Show where a file's bytes are stored."""
    from .vpk import VPKReader

    try:
        with VPKReader(archive) as reader:
            entry = reader.get_entry_by_name(path)
            if entry is None:
                click.echo(f"Error: {path} not found in archive", err=True)
                sys.exit(1)

            location = reader.locate(entry)
            click.echo(f"Path:    {entry.path}")
            click.echo(f"CRC32:   0x{entry.crc32:08X}")
            click.echo(f"Size:    {entry.size} bytes")
            click.echo(f"Part:    {location.part_name or archive.name}")
            click.echo(f"Offset:  {location.offset}")
            click.echo(f"Length:  {location.length}")
            if location.preload_length:
                click.echo(f"Preload: {location.preload_length} bytes at {location.preload_offset}")

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    help="Output directory (default: next to the archive, named after it)",
)
@click.option("-p", "--prefix", "prefixes", multiple=True, help="Only unpack paths under this directory")
@click.option("--verify/--no-verify", default=True, help="Check CRC32 of every unpacked file")
def unpack(archive: Path, output: Optional[Path], prefixes: Tuple[str, ...], verify: bool):
    """Unpack raw files from a VPK archive without decompiling them."""
    from .vpk import VPKReader

    click.echo(f"Opening: {archive}")

    try:
        with VPKReader(archive) as reader:
            if output is None:
                output = archive.parent / reader.archive_base

            click.echo(f"Output:  {output}")
            click.echo()

            count = 0
            with click.progressbar(
                reader.extract_all(output, prefixes, verify=verify),
                length=len(reader.list_files(prefixes)),
                label="Unpacking",
                item_show_func=lambda x: x[0] if x else "",
            ) as items:
                for _ in items:
                    count += 1

            click.echo()
            click.echo(f"Unpacked: {count} files")

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.option(
    "-d",
    "--directory",
    type=click.Path(file_okay=False, path_type=Path),
    help="Data directory holding game/csgo/pak01_dir.vpk and the decompiler (default: data)",
)
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON file with extraction settings",
)
@click.option(
    "--only",
    multiple=True,
    type=click.Choice(list(CATEGORY_PATHS)),
    help="Extract only these categories",
)
@click.option(
    "--skip",
    multiple=True,
    type=click.Choice(list(CATEGORY_PATHS)),
    help="Leave out these categories",
)
@click.option(
    "--decompiler",
    "decompiler_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to Source2Viewer-CLI (default: inside the data directory)",
)
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), help="Seconds allowed per decompiler run")
@click.option("--workers", type=click.IntRange(min=1), help="Decompiler processes run at once")
@click.option("--log-level", type=click.Choice(LOG_LEVELS), help="Logging verbosity")
def extract(
    directory: Optional[Path],
    config_file: Optional[Path],
    only: Tuple[str, ...],
    skip: Tuple[str, ...],
    decompiler_path: Optional[Path],
    timeout: Optional[float],
    workers: Optional[int],
    log_level: Optional[str],
):
    """Extract econ images and item metadata with Source2Viewer-CLI.

    All categories are extracted unless narrowed with --only or --skip.
    items_game.txt and csgo_english.txt are always extracted.
    """
    from .extraction import ExtractionOrchestrator, ExtractorConfig
    from .utils import setup_logging

    overrides = dict(
        directory=directory,
        decompiler_path=decompiler_path,
        timeout=timeout,
        workers=workers,
        log_level=log_level,
    )

    try:
        if config_file:
            config = ExtractorConfig.from_json(config_file, **overrides)
        else:
            config = ExtractorConfig(**{key: value for key, value in overrides.items() if value is not None})
        if only:
            config = config.only(only)
        if skip:
            config = config.without(skip)

        logger = setup_logging(config.log_level)
        report = ExtractionOrchestrator(config, logger=logger).run()

        click.echo()
        click.echo(f"Extracted: {len(report.succeeded)} paths")
        if report.skipped:
            click.echo(f"Skipped:   {len(report.skipped)} paths (not in archive)")
        if report.failed:
            click.echo(f"Failed:    {', '.join(report.failed)}")
        if report.rename:
            click.echo(f"Renamed:   {len(report.rename.renamed)} files")
            if report.rename.collisions:
                click.echo(f"Collisions: {len(report.rename.collisions)} files left as-is")

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False, path_type=Path))
def rename(directory: Path):
    """Rename decompiler output files from NAME_png.png to NAME.png."""
    from .extraction import rename_inline_outputs

    report = rename_inline_outputs(directory)
    click.echo(f"Renamed: {len(report.renamed)} files")
    for source, target in report.collisions:
        click.echo(f"Collision: {source} (target {target.name} exists)", err=True)
    for source, reason in report.failed:
        click.echo(f"Failed:    {source}: {reason}", err=True)


if __name__ == "__main__":
    main()
