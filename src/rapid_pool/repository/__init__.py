"""Repository module: versions catalogs, lookup and dependency resolution."""
from rapid_pool.repository.launcher_config import LauncherConfigCache, load_resolve_order
from rapid_pool.repository.locator import locate_in_repository, locate_version
from rapid_pool.repository.resolver import resolve_version
from rapid_pool.repository.versions import VersionCatalog, VersionCatalogCache, parse_versions_file

__all__ = [
    "LauncherConfigCache",
    "VersionCatalog",
    "VersionCatalogCache",
    "load_resolve_order",
    "locate_in_repository",
    "locate_version",
    "parse_versions_file",
    "resolve_version",
]
