"""Pool importer: copy resolved rapid packages between data directories."""
import logging
import shutil
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence, Set, Tuple

from rapid_pool.core.errors import DataDirectoryError, MissingContentError, PoolIOError
from rapid_pool.packages.schemas import (
    ETAG_SUFFIX,
    PACKAGES_DIR,
    POOL_DIR,
    RAPID_DIR,
    REPOS_INDEX_FILE,
    SDP_EXTENSION,
    VERSIONS_FILE,
    ImportSummary,
    ResolutionResult,
    ResolutionState,
)
from rapid_pool.packages.sdp import iter_sdp_entries
from rapid_pool.repository.launcher_config import LauncherConfigCache
from rapid_pool.repository.resolver import resolve_version
from rapid_pool.repository.versions import VersionCatalogCache

logger = logging.getLogger(__name__)


def _create_dir(path: Path, description: str = "directory") -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise PoolIOError(f"Failed to create {description} {path}: {e}") from e


def _copy_file(source: Path, dest: Path, description: str) -> None:
    try:
        shutil.copyfile(source, dest)
    except OSError as e:
        raise PoolIOError(f"Failed to copy {description} from {source} to {dest}: {e}") from e


def check_data_dir(data_dir: Path) -> None:
    """Ensure a data directory has packages, pool and rapid subdirectories.

    Raises:
        DataDirectoryError: If one of them is missing
    """
    for subdir in (PACKAGES_DIR, POOL_DIR, RAPID_DIR):
        if not (Path(data_dir) / subdir).is_dir():
            raise DataDirectoryError(
                f"Cannot find \"{subdir}\" subdirectory in data directory {data_dir}"
            )


class PoolImporter:
    """Copies SDP packages and their pool files without duplicating content.

    Pool files are content addressed: the same file may be listed by many
    packages but is copied at most once, and never when the destination
    already has it.
    """

    def __init__(self, source_dir: Path, dest_dir: Path):
        self.source_dir = Path(source_dir)
        self.dest_dir = Path(dest_dir)
        self.summary = ImportSummary()
        self._seen_pool_files: Set[Path] = set()

    def import_package(self, package_hash: str) -> None:
        """Copy one SDP package and every pool file it lists.

        Raises:
            MissingContentError: If the SDP or one of its pool files is absent
            CorruptArchiveError: If the SDP cannot be decoded
            PoolIOError: If a copy fails
        """
        sdp_name = package_hash + SDP_EXTENSION
        sdp_file = self.source_dir / PACKAGES_DIR / sdp_name
        if not sdp_file.is_file():
            raise MissingContentError("Missing local SDP package file", sdp_file)

        source_pool = self.source_dir / POOL_DIR
        dest_pool = self.dest_dir / POOL_DIR

        for entry in iter_sdp_entries(sdp_file):
            dest_file = dest_pool / entry.pool_subdir / entry.pool_file_name
            if dest_file in self._seen_pool_files or dest_file.is_file():
                self._seen_pool_files.add(dest_file)
                self.summary.pool_files_skipped += 1
                continue

            source_file = source_pool / entry.pool_subdir / entry.pool_file_name
            if not source_file.is_file():
                raise MissingContentError("Missing local pool data file", source_file, referenced_by=sdp_file)

            _create_dir(dest_file.parent, "output pool subdirectory")
            _copy_file(source_file, dest_file, "rapid pool data file")
            self._seen_pool_files.add(dest_file)
            self.summary.pool_files_copied += 1
            logger.debug(f"Copied {entry.name} ({entry.md5})")

        dest_sdp = self.dest_dir / PACKAGES_DIR / sdp_name
        if dest_sdp.is_file():
            self.summary.packages_skipped += 1
            return
        _create_dir(dest_sdp.parent, "output packages directory")
        _copy_file(sdp_file, dest_sdp, "rapid package file")
        self.summary.packages_copied += 1

    def import_versions_files(self, required_index_files: Dict[str, Iterable[str]]) -> None:
        """Copy the versions files that resolved the imported packages.

        The versions.gz files are required. Their .etag sidecars and the
        repository repos.gz index are copied when present, with a warning on
        failure.
        """
        source_rapid = self.source_dir / RAPID_DIR
        dest_rapid = self.dest_dir / RAPID_DIR

        for repository in sorted(required_index_files):
            for sub_index in sorted(required_index_files[repository]):
                versions_file = source_rapid / repository / sub_index / VERSIONS_FILE
                dest_sub_index = dest_rapid / repository / sub_index
                _create_dir(dest_sub_index, "output rapid subdirectory")
                dest_versions = dest_sub_index / VERSIONS_FILE
                _copy_file(versions_file, dest_versions, "rapid versions file")
                self.summary.versions_files_copied += 1

                etag_file = versions_file.with_name(VERSIONS_FILE + ETAG_SUFFIX)
                if etag_file.is_file():
                    self._copy_best_effort(
                        etag_file,
                        dest_versions.with_name(VERSIONS_FILE + ETAG_SUFFIX),
                        "rapid versions etag file",
                    )

            repos_file = source_rapid / repository / REPOS_INDEX_FILE
            if repos_file.is_file():
                self._copy_best_effort(
                    repos_file,
                    dest_rapid / repository / REPOS_INDEX_FILE,
                    "rapid repository index file",
                )

    def _copy_best_effort(self, source: Path, dest: Path, description: str) -> None:
        try:
            _copy_file(source, dest, description)
        except PoolIOError as e:
            logger.warning(str(e))


def import_packages(
    package_hashes: Sequence[str],
    required_index_files: Dict[str, Iterable[str]],
    source_dir: Path,
    dest_dir: Path,
) -> ImportSummary:
    """Copy resolved packages, their pool files and versions files.

    Args:
        package_hashes: SDP hashes in resolution order
        required_index_files: Repository name -> sub-index names to export
        source_dir: Data directory holding packages/, pool/ and rapid/
        dest_dir: Output data directory, created as needed

    Returns:
        ImportSummary with copy and skip counts

    Raises:
        MissingContentError: If an SDP or pool file is missing from source_dir
        CorruptArchiveError: If an SDP cannot be decoded
        PoolIOError: If a required copy fails
    """
    importer = PoolImporter(source_dir, dest_dir)
    for package_hash in package_hashes:
        importer.import_package(package_hash)
    importer.import_versions_files(required_index_files)

    logger.info(
        f"Imported {importer.summary.packages_copied} packages, "
        f"{importer.summary.pool_files_copied} pool files "
        f"({importer.summary.pool_files_skipped} already present)"
    )
    return importer.summary


def rapid_copy(
    identifier: str,
    source_dir: Path,
    dest_dir: Path,
    resolve_order: Optional[Sequence[str]] = None,
    state: Optional[ResolutionState] = None,
    catalog_cache: Optional[VersionCatalogCache] = None,
    config_cache: Optional[LauncherConfigCache] = None,
) -> Tuple[ResolutionResult, ImportSummary]:
    """Import a rapid version from a local data directory into another.

    When `resolve_order` is None it is read from the launcher config.json
    of `source_dir`.

    Raises:
        DataDirectoryError: If source_dir lacks packages/, pool/ or rapid/
        VersionNotFoundError: If the version cannot be resolved
        MissingContentError, CorruptArchiveError, PoolIOError: On import failure
    """
    source_dir = Path(source_dir)
    dest_dir = Path(dest_dir)

    logger.info(f"Importing {identifier} from local rapid repository {source_dir}")
    check_data_dir(source_dir)
    _create_dir(dest_dir / PACKAGES_DIR, "output packages directory")

    if resolve_order is None:
        if config_cache is None:
            config_cache = LauncherConfigCache()
        resolve_order = config_cache.resolve_order(source_dir)

    result = resolve_version(
        identifier,
        source_dir / RAPID_DIR,
        resolve_order,
        state=state,
        cache=catalog_cache,
    )
    summary = import_packages(
        result.package_hashes,
        result.required_index_files,
        source_dir,
        dest_dir,
    )
    return result, summary
