"""Rapid versions.gz reader and per-run catalog cache."""
import gzip
import logging
import zlib
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, Field

from rapid_pool.core.errors import CatalogReadError
from rapid_pool.packages.schemas import VersionRecord
from rapid_pool.packages.sdp import has_gzip_header

logger = logging.getLogger(__name__)


class VersionCatalog(BaseModel):
    """Lookup tables of one versions.gz file."""

    by_tag: Dict[str, VersionRecord] = Field(default_factory=dict)
    by_name: Dict[str, VersionRecord] = Field(default_factory=dict)

    def add(self, record: VersionRecord) -> None:
        # Later lines override earlier ones for the same key
        self.by_tag[record.tag] = record
        self.by_name[record.name] = record

    def lookup(self, identifier: str) -> Optional[VersionRecord]:
        """Find a record by rapid tag, falling back to the game name."""
        record = self.by_tag.get(identifier)
        if record is None:
            record = self.by_name.get(identifier)
        return record

    def __len__(self) -> int:
        return len(self.by_tag)


def parse_versions_file(versions_path: Path) -> VersionCatalog:
    """Decode a gzip-compressed rapid versions file.

    Each line holds "tag,packageHash,parentGameName,gameName". Short lines
    are padded with empty fields.

    Args:
        versions_path: Path to versions.gz

    Returns:
        VersionCatalog indexed by tag and by game name

    Raises:
        CatalogReadError: If the file cannot be opened or decompressed
    """
    try:
        if not has_gzip_header(versions_path):
            raise CatalogReadError(
                f"Failed to open compressed rapid versions file {versions_path}: not a gzip stream"
            )
        stream = gzip.open(versions_path, "rt", encoding="utf-8", errors="surrogateescape")
    except OSError as e:
        raise CatalogReadError(
            f"Failed to open compressed rapid versions file {versions_path}: {e}"
        ) from e

    # A damaged stream discards the whole catalog, not just its tail
    catalog = VersionCatalog()
    try:
        with stream:
            for line in stream:
                catalog.add(VersionRecord.from_line(line.rstrip("\n")))
    except (OSError, EOFError, zlib.error) as e:
        raise CatalogReadError(
            f"Failed to read compressed rapid versions file {versions_path}: {e}"
        ) from e

    logger.debug(f"Loaded {len(catalog)} rapid versions from {versions_path}")
    return catalog


class VersionCatalogCache:
    """Versions catalogs keyed by absolute path, filled on first use.

    A missing file gives an empty catalog. An unreadable one is reported once
    as a warning and then also treated as empty, so that searching can go on
    in other repositories.
    """

    def __init__(self) -> None:
        self._catalogs: Dict[Path, VersionCatalog] = {}

    def get(self, versions_path: Path) -> VersionCatalog:
        key = Path(versions_path).absolute()
        catalog = self._catalogs.get(key)
        if catalog is not None:
            return catalog

        if not key.is_file():
            catalog = VersionCatalog()
        else:
            try:
                catalog = parse_versions_file(key)
            except CatalogReadError as e:
                logger.warning(str(e))
                catalog = VersionCatalog()

        self._catalogs[key] = catalog
        return catalog

    def __contains__(self, versions_path: Path) -> bool:
        return Path(versions_path).absolute() in self._catalogs

    def __len__(self) -> int:
        return len(self._catalogs)
