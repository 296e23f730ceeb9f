"""Repository locator: find which rapid repository knows a tag or name."""
import logging
import re
from pathlib import Path
from typing import List, Optional, Sequence, Set

from rapid_pool.core.errors import RepositoryRootError
from rapid_pool.packages.schemas import VERSIONS_FILE, LocatedVersion
from rapid_pool.repository.versions import VersionCatalogCache

logger = logging.getLogger(__name__)

# "byar:test" -> "byar"
SUB_INDEX_PREFIX = re.compile(r"^([\w\-]+):")


def sub_index_prefix(identifier: str) -> Optional[str]:
    """Return the sub-index named by an identifier prefix, if any."""
    match = SUB_INDEX_PREFIX.match(identifier)
    return match.group(1) if match else None


def _is_hidden(path: Path) -> bool:
    return path.name.startswith(".")


def _list_sub_indexes(repository_dir: Path, exclude: Optional[str]) -> List[str]:
    """List sub-index directories holding a versions file, sorted by name."""
    try:
        entries = sorted(repository_dir.iterdir())
    except OSError as e:
        logger.warning(f"Failed to open directory {repository_dir} ({e})")
        return []

    return [
        entry.name
        for entry in entries
        if not _is_hidden(entry)
        and entry.name != exclude
        and (entry / VERSIONS_FILE).is_file()
    ]


def locate_in_repository(
    identifier: str,
    repository_dir: Path,
    cache: VersionCatalogCache,
) -> Optional[LocatedVersion]:
    """Look an identifier up in the sub-indexes of one repository.

    The sub-index named by the identifier prefix ("byar" for "byar:test") is
    searched first; the remaining sub-indexes follow in lexicographic order.
    Within a sub-index, tags take precedence over game names.

    Args:
        identifier: Rapid tag or game name
        repository_dir: Repository directory, e.g. rapid/repos.springrts.com
        cache: Catalog cache shared by the run

    Returns:
        LocatedVersion, or None if no sub-index knows the identifier
    """
    repository_dir = Path(repository_dir)
    prefix = sub_index_prefix(identifier)

    candidates = []
    if prefix is not None and (repository_dir / prefix / VERSIONS_FILE).is_file():
        candidates.append(prefix)
    candidates.extend(_list_sub_indexes(repository_dir, exclude=prefix))

    for sub_index in candidates:
        catalog = cache.get(repository_dir / sub_index / VERSIONS_FILE)
        record = catalog.lookup(identifier)
        if record is not None:
            return LocatedVersion(
                package_hash=record.package_hash,
                parent_name=record.parent_name,
                repository=repository_dir.name,
                sub_index=sub_index,
            )
    return None


def _list_repositories(rapid_dir: Path, tried: Set[str]) -> List[str]:
    try:
        entries = sorted(rapid_dir.iterdir())
    except OSError as e:
        raise RepositoryRootError(f"Failed to open directory {rapid_dir} ({e})") from e

    return [
        entry.name
        for entry in entries
        if not _is_hidden(entry) and entry.is_dir() and entry.name not in tried
    ]


def locate_version(
    identifier: str,
    rapid_dir: Path,
    resolve_order: Sequence[str],
    cache: VersionCatalogCache,
) -> Optional[LocatedVersion]:
    """Find the repository holding an identifier.

    Repositories from `resolve_order` are searched first, skipping those
    that do not exist. Every other non-hidden repository directory is then
    searched in lexicographic order.

    Args:
        identifier: Rapid tag or game name
        rapid_dir: Directory containing one subdirectory per repository
        resolve_order: Preferred repository names, may be empty
        cache: Catalog cache shared by the run

    Returns:
        LocatedVersion, or None if no repository knows the identifier

    Raises:
        RepositoryRootError: If rapid_dir cannot be listed during fallback
    """
    rapid_dir = Path(rapid_dir)
    tried: Set[str] = set()

    for repository in resolve_order:
        if repository in tried:
            continue
        tried.add(repository)
        repository_dir = rapid_dir / repository
        if not repository_dir.is_dir():
            logger.debug(f"Skipping missing rapid repository {repository_dir}")
            continue
        located = locate_in_repository(identifier, repository_dir, cache)
        if located is not None:
            return located

    for repository in _list_repositories(rapid_dir, tried):
        located = locate_in_repository(identifier, rapid_dir / repository, cache)
        if located is not None:
            return located

    return None
