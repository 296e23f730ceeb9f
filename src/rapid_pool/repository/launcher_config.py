"""Read the rapid resolution order from a local launcher config.json."""
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from rapid_pool.core.errors import LauncherConfigError

logger = logging.getLogger(__name__)

LAUNCHER_CONFIG_FILE = "config.json"

# Setups describing the standalone game installs
LAUNCHER_PACKAGE_IDS = frozenset({"manual-linux", "manual-win"})

RESOLVE_ORDER_SETTING = "RapidTagResolutionOrder"


def parse_launcher_config(config_path: Path) -> dict:
    """Load a launcher config.json and check it has a "setups" array.

    Raises:
        LauncherConfigError: If the file is missing, unreadable or malformed
    """
    config_path = Path(config_path)
    if not config_path.is_file():
        raise LauncherConfigError(f"Launcher configuration not found: {config_path}")

    try:
        config = json.loads(config_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise LauncherConfigError(f"Failed to read launcher configuration {config_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise LauncherConfigError(f"Failed to parse launcher configuration {config_path}: {e}") from e

    if not isinstance(config, dict) or not isinstance(config.get("setups"), list):
        raise LauncherConfigError(f"Cannot find \"setups\" array in launcher configuration {config_path}")
    return config


def extract_resolve_order(config: dict) -> Optional[List[str]]:
    """Return the first RapidTagResolutionOrder of a standalone setup.

    Returns:
        Repository names in resolution order, or None if not declared
    """
    for setup in config.get("setups", []):
        if not isinstance(setup, dict) or not isinstance(setup.get("package"), dict):
            continue
        if setup["package"].get("id") not in LAUNCHER_PACKAGE_IDS:
            continue
        launch = setup.get("launch")
        if not isinstance(launch, dict) or not isinstance(launch.get("springsettings"), dict):
            continue
        order = launch["springsettings"].get(RESOLVE_ORDER_SETTING)
        if isinstance(order, str):
            return [repository for repository in order.split(";") if repository]
    return None


class LauncherConfigCache:
    """Resolution orders keyed by data directory."""

    def __init__(self) -> None:
        self._orders: Dict[Path, List[str]] = {}

    def resolve_order(self, data_dir: Path) -> List[str]:
        """Resolution order declared in `data_dir`/config.json.

        Any problem is logged as a warning and yields an empty order, which
        makes the resolver fall back to scanning every repository.
        """
        key = Path(data_dir).absolute()
        if key not in self._orders:
            self._orders[key] = load_resolve_order(key)
        return list(self._orders[key])


def load_resolve_order(data_dir: Path) -> List[str]:
    try:
        config = parse_launcher_config(Path(data_dir) / LAUNCHER_CONFIG_FILE)
    except LauncherConfigError as e:
        logger.warning(str(e))
        return []

    order = extract_resolve_order(config)
    if order is None:
        logger.warning(f"Cannot find rapid tag resolution order in launcher configuration of {data_dir}")
        return []

    logger.info(f"Rapid resolution order: {';'.join(order)}")
    return order
