"""Packages module: SDP archives and rapid data models."""
from rapid_pool.packages.schemas import (
    ImportSummary,
    LocatedVersion,
    ManifestEntry,
    ResolutionResult,
    ResolutionState,
    VersionRecord,
)
from rapid_pool.packages.sdp import encode_sdp_entries, iter_sdp_entries, read_sdp, write_sdp

__all__ = [
    "ImportSummary",
    "LocatedVersion",
    "ManifestEntry",
    "ResolutionResult",
    "ResolutionState",
    "VersionRecord",
    "encode_sdp_entries",
    "iter_sdp_entries",
    "read_sdp",
    "write_sdp",
]
