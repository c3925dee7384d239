"""Configuration management: profiles, TOML loading, and config models.

Usage:
    >>> from db_snapshot.config import load_db_config, DatabaseProfile, SnapshotConfig
"""

from db_snapshot.config.loader import load_db_config
from db_snapshot.config.models import DatabaseProfile, SnapshotConfig, SnapshotSettings

__all__ = ["load_db_config", "DatabaseProfile", "SnapshotConfig", "SnapshotSettings"]
