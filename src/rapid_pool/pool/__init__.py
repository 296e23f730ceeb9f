"""Pool module: content-addressed import of rapid packages."""
from rapid_pool.pool.importer import PoolImporter, check_data_dir, import_packages, rapid_copy

__all__ = [
    "PoolImporter",
    "check_data_dir",
    "import_packages",
    "rapid_copy",
]
