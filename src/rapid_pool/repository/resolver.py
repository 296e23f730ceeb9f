"""Dependency resolver: expand a rapid version into its parent chain."""
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from rapid_pool.core.errors import VersionNotFoundError
from rapid_pool.packages.schemas import ResolutionResult, ResolutionState
from rapid_pool.repository.locator import locate_version
from rapid_pool.repository.versions import VersionCatalogCache

logger = logging.getLogger(__name__)


def resolve_version(
    identifier: str,
    rapid_dir: Path,
    resolve_order: Sequence[str] = (),
    state: Optional[ResolutionState] = None,
    cache: Optional[VersionCatalogCache] = None,
) -> ResolutionResult:
    """Resolve a rapid tag or name to the package hashes it needs.

    Each package may name a parent game it is built upon. The chain is
    followed until a package has no parent or its hash was already resolved
    through `state`, so shared ancestors and cycles stop without error.

    Args:
        identifier: Rapid tag or game name, e.g. "byar:test"
        rapid_dir: Directory containing one subdirectory per repository
        resolve_order: Preferred repository names, searched first
        state: Accumulator shared with earlier calls of the same run
        cache: Catalog cache shared with earlier calls of the same run

    Returns:
        ResolutionResult with hashes ordered parents first, `identifier`
        last. The list is empty when `identifier` was already resolved.

    Raises:
        VersionNotFoundError: If the identifier or one of its parents is
            unknown to every repository
        RepositoryRootError: If rapid_dir cannot be listed
    """
    rapid_dir = Path(rapid_dir)
    if state is None:
        state = ResolutionState()
    if cache is None:
        cache = VersionCatalogCache()

    # Collected child first, reversed at the end
    chain: List[str] = []
    pending: Optional[str] = identifier

    while pending is not None:
        located = locate_version(pending, rapid_dir, resolve_order, cache)
        if located is None:
            raise VersionNotFoundError(pending, rapid_dir)

        if state.is_resolved(located.package_hash):
            logger.debug(f"Rapid version {pending} already resolved ({located.package_hash})")
            break

        state.record(located)
        chain.append(located.package_hash)
        logger.info(
            f"Resolved {pending} → {located.package_hash} "
            f"[{located.repository}/{located.sub_index}]"
        )

        pending = located.parent_identifier

    chain.reverse()
    return ResolutionResult(
        package_hashes=chain,
        required_index_files={
            repository: set(sub_indexes)
            for repository, sub_indexes in state.required_index_files.items()
        },
    )
