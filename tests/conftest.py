"""Pytest fixtures for rapid-pool tests."""
import gzip
import hashlib
import json
import zlib
from pathlib import Path
from typing import Dict, List

import pytest

from rapid_pool.packages import ManifestEntry, write_sdp


def _md5(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


@pytest.fixture
def write_versions():
    """Return a helper writing a gzip-compressed versions file."""

    def _write(path: Path, lines: List[str]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with gzip.open(path, "wt", encoding="utf-8") as f:
            for line in lines:
                f.write(line + "\n")
        return path

    return _write


@pytest.fixture
def make_package():
    """Return a helper adding an SDP package and its pool files to a data dir.

    The helper takes (data_dir, label, files) where files maps file names to
    contents, and returns the package hash.
    """

    def _make(data_dir: Path, label: str, files: Dict[str, bytes]) -> str:
        entries = []
        for name, content in files.items():
            md5 = _md5(content)
            pool_file = data_dir / "pool" / md5[:2] / (md5[2:] + ".gz")
            pool_file.parent.mkdir(parents=True, exist_ok=True)
            pool_file.write_bytes(gzip.compress(content))
            entries.append(
                ManifestEntry(
                    name=name,
                    md5=md5,
                    crc32=zlib.crc32(content),
                    size=len(content),
                )
            )

        package_hash = _md5(label.encode("utf-8"))
        write_sdp(data_dir / "packages" / f"{package_hash}.sdp", entries)
        return package_hash

    return _make


@pytest.fixture
def rapid_data_dir(tmp_path: Path, write_versions, make_package) -> Dict[str, any]:
    """Create a local data directory with one repository and two sub-indexes.

    Layout:
        rapid/repos.example.org/byar/versions.gz (+ .etag)
            byar:base  -> base package
            byar:test  -> test package, parent "rapid://Base Game 1.0"
        rapid/repos.example.org/byar-chobby/versions.gz
            byar-chobby:test -> chobby package
        rapid/repos.example.org/repos.gz
        config.json declaring "repos.example.org" as resolution order

    The base and test packages share "shared.txt" (same pool file).

    Returns dict with:
        - path: data directory
        - rapid_dir: rapid/ subdirectory
        - base_hash, test_hash, chobby_hash: package hashes
        - shared_md5: md5 of the shared pool file
    """
    data_dir = tmp_path / "source"
    (data_dir / "packages").mkdir(parents=True)
    (data_dir / "pool").mkdir()
    rapid_dir = data_dir / "rapid"
    repository_dir = rapid_dir / "repos.example.org"

    shared = b"shared content\n"
    base_hash = make_package(data_dir, "base", {"a.txt": b"alpha\n", "shared.txt": shared})
    test_hash = make_package(data_dir, "test", {"b.txt": b"beta\n", "shared.txt": shared})
    chobby_hash = make_package(data_dir, "chobby", {"chobby.lua": b"return {}\n"})

    write_versions(
        repository_dir / "byar" / "versions.gz",
        [
            f"byar:base,{base_hash},,Base Game 1.0",
            f"byar:test,{test_hash},rapid://Base Game 1.0,Beyond All Reason test-1",
        ],
    )
    (repository_dir / "byar" / "versions.gz.etag").write_text('"etag-1"')
    write_versions(
        repository_dir / "byar-chobby" / "versions.gz",
        [f"byar-chobby:test,{chobby_hash},,Chobby 1"],
    )
    (repository_dir / "repos.gz").write_bytes(gzip.compress(b"byar,https://example.org/byar,,\n"))

    config = {
        "setups": [
            {
                "package": {"id": "manual-linux"},
                "launch": {"springsettings": {"RapidTagResolutionOrder": "repos.example.org"}},
            }
        ]
    }
    (data_dir / "config.json").write_text(json.dumps(config))

    return {
        "path": data_dir,
        "rapid_dir": rapid_dir,
        "base_hash": base_hash,
        "test_hash": test_hash,
        "chobby_hash": chobby_hash,
        "shared_md5": _md5(shared),
    }
