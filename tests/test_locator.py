"""Tests for the repository locator."""
import pytest

from rapid_pool.core.errors import RepositoryRootError
from rapid_pool.repository import VersionCatalogCache, locate_in_repository, locate_version
from rapid_pool.repository.locator import sub_index_prefix


def test_sub_index_prefix():
    assert sub_index_prefix("byar:test") == "byar"
    assert sub_index_prefix("byar-chobby:test") == "byar-chobby"
    assert sub_index_prefix("Beyond All Reason test-1") is None


def test_prefix_sub_index_searched_first(tmp_path, write_versions):
    """Test: the sub-index named by the prefix wins over earlier directories.

    Given: sub-indexes "aaa" and "byar" both defining tag byar:test
    When: locate_in_repository is called with "byar:test"
    Then: the "byar" entry is returned although "aaa" sorts first
    """
    repository = tmp_path / "repo"
    write_versions(repository / "aaa" / "versions.gz", ["byar:test,fromAaa,,"])
    write_versions(repository / "byar" / "versions.gz", ["byar:test,fromByar,,"])

    located = locate_in_repository("byar:test", repository, VersionCatalogCache())

    assert located.package_hash == "fromByar"
    assert located.repository == "repo"
    assert located.sub_index == "byar"


def test_other_sub_indexes_in_lexicographic_order(tmp_path, write_versions):
    repository = tmp_path / "repo"
    write_versions(repository / "zzz" / "versions.gz", ["Game,fromZzz,,"])
    write_versions(repository / "mmm" / "versions.gz", ["Game,fromMmm,,"])
    write_versions(repository / ".hidden" / "versions.gz", ["Game,fromHidden,,"])

    located = locate_in_repository("Game", repository, VersionCatalogCache())

    assert located.sub_index == "mmm"


def test_sub_index_without_versions_file_is_skipped(tmp_path, write_versions):
    repository = tmp_path / "repo"
    (repository / "empty").mkdir(parents=True)
    write_versions(repository / "real" / "versions.gz", ["t,h,,"])

    located = locate_in_repository("t", repository, VersionCatalogCache())

    assert located.sub_index == "real"
    assert locate_in_repository("unknown", repository, VersionCatalogCache()) is None


def test_declared_order_before_fallback(tmp_path, write_versions):
    """Test: declared repositories are searched before the others."""
    rapid_dir = tmp_path / "rapid"
    write_versions(rapid_dir / "a-repo" / "byar" / "versions.gz", ["byar:test,fromA,,"])
    write_versions(rapid_dir / "b-repo" / "byar" / "versions.gz", ["byar:test,fromB,,"])

    located = locate_version("byar:test", rapid_dir, ["missing-repo", "b-repo"], VersionCatalogCache())

    assert located.repository == "b-repo"
    assert located.package_hash == "fromB"


def test_fallback_enumeration_order(tmp_path, write_versions):
    rapid_dir = tmp_path / "rapid"
    write_versions(rapid_dir / "z-repo" / "x" / "versions.gz", ["t,fromZ,,"])
    write_versions(rapid_dir / "c-repo" / "x" / "versions.gz", ["t,fromC,,"])
    write_versions(rapid_dir / ".cache" / "x" / "versions.gz", ["t,fromHidden,,"])

    located = locate_version("t", rapid_dir, [], VersionCatalogCache())

    assert located.repository == "c-repo"


def test_not_found_returns_none(tmp_path, write_versions):
    rapid_dir = tmp_path / "rapid"
    write_versions(rapid_dir / "repo" / "x" / "versions.gz", ["t,h,,"])

    assert locate_version("other", rapid_dir, ["repo"], VersionCatalogCache()) is None


def test_missing_rapid_dir_is_fatal(tmp_path):
    with pytest.raises(RepositoryRootError):
        locate_version("t", tmp_path / "no-rapid", [], VersionCatalogCache())


def test_corrupt_catalog_does_not_stop_search(tmp_path, write_versions):
    """Test: an unreadable versions file is skipped and search continues."""
    rapid_dir = tmp_path / "rapid"
    bad = rapid_dir / "a-repo" / "x" / "versions.gz"
    bad.parent.mkdir(parents=True)
    bad.write_bytes(b"garbage")
    write_versions(rapid_dir / "b-repo" / "x" / "versions.gz", ["t,good,,"])

    located = locate_version("t", rapid_dir, ["a-repo"], VersionCatalogCache())

    assert located.package_hash == "good"
