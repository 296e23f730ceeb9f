"""Rapid data models: versions entries, SDP entries and resolution results."""
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Data directory layout
PACKAGES_DIR = "packages"
POOL_DIR = "pool"
RAPID_DIR = "rapid"

SDP_EXTENSION = ".sdp"
POOL_EXTENSION = ".gz"
VERSIONS_FILE = "versions.gz"
REPOS_INDEX_FILE = "repos.gz"
ETAG_SUFFIX = ".etag"

RAPID_URI_PREFIX = "rapid://"

HEX_DIGITS = frozenset("0123456789abcdef")


def strip_rapid_prefix(name: str) -> Optional[str]:
    """Turn a parent reference such as "rapid://byar:test" into "byar:test"."""
    if name.startswith(RAPID_URI_PREFIX):
        name = name[len(RAPID_URI_PREFIX):]
    return name or None


def _check_md5_hex(v: str) -> str:
    if len(v) != 32 or not all(c in HEX_DIGITS for c in v):
        raise ValueError(f"expected 32 lowercase hex characters; got '{v}'")
    return v


class VersionRecord(BaseModel):
    """One line of a rapid versions.gz file."""

    model_config = ConfigDict(frozen=True)

    tag: str = Field(..., description="Rapid tag, e.g. byar:test")
    package_hash: str = Field(..., description="MD5 of the SDP package, hex")
    parent_name: str = Field(default="", description="Parent game name, possibly rapid:// prefixed")
    name: str = Field(default="", description="Human-readable game name")

    @classmethod
    def from_line(cls, line: str) -> "VersionRecord":
        """Build a record from a "tag,hash,parent,name" line.

        Missing trailing fields default to the empty string; the name field
        keeps any further commas.
        """
        fields = line.split(",", 3)
        fields += [""] * (4 - len(fields))
        return cls(
            tag=fields[0],
            package_hash=fields[1],
            parent_name=fields[2],
            name=fields[3],
        )


class ManifestEntry(BaseModel):
    """One file record of an SDP archive."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="File path inside the game archive")
    md5: str = Field(..., description="Content hash of the pool file, hex")
    crc32: int = Field(..., ge=0, le=0xFFFFFFFF)
    size: int = Field(..., ge=0, le=0xFFFFFFFF)

    @field_validator("md5")
    @classmethod
    def validate_md5(cls, v: str) -> str:
        """Ensure md5 is a 16-byte digest in hex form."""
        return _check_md5_hex(v)

    @property
    def digest(self) -> bytes:
        return bytes.fromhex(self.md5)

    @property
    def pool_subdir(self) -> str:
        return self.md5[:2]

    @property
    def pool_file_name(self) -> str:
        return self.md5[2:] + POOL_EXTENSION


class LocatedVersion(BaseModel):
    """Where an identifier was found and what it points at."""

    package_hash: str
    parent_name: str = ""
    repository: str = Field(..., description="Repository directory under rapid/")
    sub_index: str = Field(..., description="Sub-index directory holding versions.gz")

    @property
    def parent_identifier(self) -> Optional[str]:
        """Parent game name with the rapid:// prefix removed, or None."""
        return strip_rapid_prefix(self.parent_name)


class ResolutionState(BaseModel):
    """Accumulator shared by every resolution step of one run.

    Package hashes are recorded before their parent is looked up, which both
    deduplicates shared ancestors and stops cycles.
    """

    resolved_hashes: Set[str] = Field(default_factory=set)
    required_index_files: Dict[str, Set[str]] = Field(default_factory=dict)

    def is_resolved(self, package_hash: str) -> bool:
        return package_hash in self.resolved_hashes

    def record(self, located: LocatedVersion) -> None:
        self.resolved_hashes.add(located.package_hash)
        self.required_index_files.setdefault(located.repository, set()).add(located.sub_index)


class ResolutionResult(BaseModel):
    """Ordered package hashes (parents first) and the versions files behind them."""

    package_hashes: List[str] = Field(default_factory=list)
    required_index_files: Dict[str, Set[str]] = Field(default_factory=dict)

    @property
    def already_satisfied(self) -> bool:
        """True when every package was resolved by an earlier call."""
        return not self.package_hashes


class ImportSummary(BaseModel):
    """Counters reported by a pool import."""

    packages_copied: int = 0
    packages_skipped: int = 0
    pool_files_copied: int = 0
    pool_files_skipped: int = 0
    versions_files_copied: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary (for logging, display)."""
        return self.model_dump()
