"""TOML configuration loader for database profiles and snapshot settings."""

import tomllib
from pathlib import Path

from db_snapshot.config.models import SnapshotConfig

CONFIG_FILENAME = "db.toml"


def load_db_config(config_path: Path | None = None) -> SnapshotConfig:
    """Read ``db.toml`` into a ``SnapshotConfig``.

    Only the ``[profiles.*]`` and ``[snapshot]`` tables are read; other
    top-level tables are ignored so one file can be shared with other tools.

    Args:
        config_path: Path to db.toml (default: ``Path.cwd() / "db.toml"``,
            resolved at call time).

    Raises:
        FileNotFoundError: If the file doesn't exist.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
        pydantic.ValidationError: If a profile or setting is invalid.

    Example:
        >>> config = load_db_config(Path("db.toml"))
        >>> config.profiles["local"].url
        'mysql://root@localhost:3306/app'
    """
    path = config_path if config_path is not None else Path.cwd() / CONFIG_FILENAME

    if not path.is_file():
        raise FileNotFoundError(
            f"Database config not found: {path}\n"
            f"Copy {CONFIG_FILENAME}.example to {CONFIG_FILENAME} and add a [profiles.<name>] table."
        )

    document = tomllib.loads(path.read_text(encoding="utf-8"))
    return SnapshotConfig.model_validate(
        {
            "profiles": document.get("profiles", {}),
            "snapshot": document.get("snapshot", {}),
        }
    )
