"""rapid-pool: resolve rapid game versions and import their pool content."""

__version__ = "0.1.0"
