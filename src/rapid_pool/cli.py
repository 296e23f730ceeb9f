"""Rapid Pool CLI - Command line interface for rapid-pool."""
import logging
import sys
from pathlib import Path
from typing import List, Optional

import click

from rapid_pool.core.errors import (
    CorruptArchiveError,
    DataDirectoryError,
    MissingContentError,
    VersionNotFoundError,
)
from rapid_pool.packages import read_sdp
from rapid_pool.packages.schemas import RAPID_DIR, ResolutionState
from rapid_pool.pool import rapid_copy
from rapid_pool.repository import LauncherConfigCache, VersionCatalogCache, resolve_version

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(name)s: %(message)s",
)
logger = logging.getLogger("rapid_pool")

EXIT_FAILURE = 1
EXIT_NOT_FOUND = 3
EXIT_CORRUPT = 4
EXIT_MISSING_CONTENT = 5
EXIT_BAD_DATA_DIR = 6


def _parse_resolve_order(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    return [repository for repository in value.split(";") if repository]


@click.group()
@click.option("-V", "--verbose", is_flag=True, help="Use verbose output")
def main(verbose: bool):
    """Rapid Pool - Resolve rapid game versions and import their content."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@main.command()
@click.argument("identifier")
@click.option(
    "--data-dir",
    required=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Data directory containing the rapid/ subdirectory",
)
@click.option(
    "--resolve-order",
    default=None,
    help="Semicolon-separated repository names (default: from launcher config.json)",
)
def resolve(identifier: str, data_dir: Path, resolve_order: Optional[str]):
    """Resolve a rapid tag or name to its ordered package hashes.

    Examples:
        rapid-pool resolve byar:test --data-dir ~/.local/state/Beyond\\ All\\ Reason

    Exit codes:
        0: Success
        1: Generic runtime failure
        3: Rapid version not found
    """
    try:
        order = _parse_resolve_order(resolve_order)
        if order is None:
            order = LauncherConfigCache().resolve_order(data_dir)

        result = resolve_version(identifier, data_dir / RAPID_DIR, order)

        click.echo(f"[OK] Resolved: {identifier}")
        for package_hash in result.package_hashes:
            click.echo(f"  Package: {package_hash}")
        for repository in sorted(result.required_index_files):
            for sub_index in sorted(result.required_index_files[repository]):
                click.echo(f"  Versions: {repository}/{sub_index}")
        sys.exit(0)

    except VersionNotFoundError as e:
        logger.error(f"Version not found: {str(e)}")
        sys.exit(EXIT_NOT_FOUND)

    except Exception as e:
        logger.error(f"Resolve failed: {str(e)}")
        sys.exit(EXIT_FAILURE)


@main.command(name="import")
@click.argument("identifiers", nargs=-1, required=True)
@click.option(
    "--data-dir",
    required=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Local data directory to import from",
)
@click.option(
    "--output-dir",
    required=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Output data directory",
)
@click.option(
    "--resolve-order",
    default=None,
    help="Semicolon-separated repository names (default: from launcher config.json)",
)
def import_cmd(identifiers, data_dir: Path, output_dir: Path, resolve_order: Optional[str]):
    """Import rapid versions from a local data directory.

    Only packages and pool files missing from the output directory are
    copied.

    Examples:
        rapid-pool import byar:test byar-chobby:test --data-dir data --output-dir offline/data

    Exit codes:
        0: Success
        1: Generic runtime failure
        3: Rapid version not found
        4: Corrupt SDP archive
        5: Missing package or pool file
        6: Invalid data directory
    """
    order = _parse_resolve_order(resolve_order)
    catalog_cache = VersionCatalogCache()
    config_cache = LauncherConfigCache()
    state = ResolutionState()

    try:
        for identifier in identifiers:
            result, summary = rapid_copy(
                identifier,
                data_dir,
                output_dir,
                resolve_order=order,
                state=state,
                catalog_cache=catalog_cache,
                config_cache=config_cache,
            )
            click.echo(f"[OK] Imported: {identifier}")
            click.echo(f"  Packages: {len(result.package_hashes)}")
            click.echo(f"  Pool files copied: {summary.pool_files_copied}")
            click.echo(f"  Pool files skipped: {summary.pool_files_skipped}")
        sys.exit(0)

    except VersionNotFoundError as e:
        logger.error(f"Version not found: {str(e)}")
        sys.exit(EXIT_NOT_FOUND)

    except CorruptArchiveError as e:
        logger.error(f"Corrupt archive: {str(e)}")
        sys.exit(EXIT_CORRUPT)

    except MissingContentError as e:
        logger.error(f"Missing content: {str(e)}")
        sys.exit(EXIT_MISSING_CONTENT)

    except DataDirectoryError as e:
        logger.error(f"Invalid data directory: {str(e)}")
        sys.exit(EXIT_BAD_DATA_DIR)

    except Exception as e:
        logger.error(f"Import failed: {str(e)}")
        sys.exit(EXIT_FAILURE)


@main.command(name="ls-sdp")
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def ls_sdp(archive: Path):
    """List the file records of an SDP archive."""
    try:
        entries = read_sdp(archive)
    except CorruptArchiveError as e:
        logger.error(f"Corrupt archive: {str(e)}")
        sys.exit(EXIT_CORRUPT)
    except Exception as e:
        logger.error(f"Listing failed: {str(e)}")
        sys.exit(EXIT_FAILURE)

    for entry in entries:
        click.echo(f"{entry.md5}  {entry.crc32:08x}  {entry.size:>10}  {entry.name}")
    sys.exit(0)


if __name__ == "__main__":
    main()
