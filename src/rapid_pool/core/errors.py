"""Core exception types for rapid-pool."""
from pathlib import Path
from typing import Optional, Union


class RapidPoolError(Exception):
    """Base exception for all rapid-pool errors."""
    pass


class VersionNotFoundError(RapidPoolError):
    """Raised when a rapid tag or name cannot be resolved in any repository."""

    def __init__(self, identifier: str, rapid_dir: Union[str, Path]):
        self.identifier = identifier
        self.rapid_dir = str(rapid_dir)
        super().__init__(
            f"Failed to resolve rapid name '{identifier}' using rapid directory {self.rapid_dir}"
        )


class CorruptArchiveError(RapidPoolError):
    """Raised when an SDP archive cannot be decoded."""

    def __init__(self, message: str, archive_path: Union[str, Path]):
        self.archive_path = str(archive_path)
        super().__init__(f"{message} in SDP archive {self.archive_path}")


class MissingContentError(RapidPoolError):
    """Raised when a package or pool file required by an import is absent."""

    def __init__(self, message: str, path: Union[str, Path], referenced_by: Optional[Union[str, Path]] = None):
        self.path = str(path)
        self.referenced_by = str(referenced_by) if referenced_by is not None else None
        if self.referenced_by:
            message = f"{message} {self.path} referenced by {self.referenced_by}"
        else:
            message = f"{message} {self.path}"
        super().__init__(message)


class CatalogReadError(RapidPoolError):
    """Raised when a compressed versions file cannot be read."""
    pass


class PoolIOError(RapidPoolError):
    """Raised when a required filesystem operation fails."""
    pass


class RepositoryRootError(PoolIOError):
    """Raised when the rapid directory cannot be listed."""
    pass


class DataDirectoryError(PoolIOError):
    """Raised when a data directory lacks the packages/pool/rapid layout."""
    pass


class LauncherConfigError(RapidPoolError):
    """Raised when the launcher configuration file is unusable."""
    pass
