"""Source factory: resolve a database profile into a ``SqlSnapshotSource``.

Supports two configuration modes:
1. Profile mode (db.toml): named profiles, selected explicitly or via the
   ``DB_SNAPSHOT_PROFILE`` env var
2. Environment mode: ``DATABASE_URL``, or the ``DB_HOST`` / ``DB_PORT`` /
   ``DB_USER`` / ``DB_PASSWORD`` / ``DB_NAME`` variables (MySQL)

Usage:
    from db_snapshot.factory import get_source

    with get_source(profile_name="local") as source:
        tables = source.list_tables(source.default_schema)
"""

import logging
import os
from pathlib import Path
from urllib.parse import quote

from db_snapshot.config.loader import load_db_config
from db_snapshot.config.models import DatabaseProfile, SnapshotConfig
from db_snapshot.sources.sql import SqlSnapshotSource

logger = logging.getLogger(__name__)

PROFILE_ENV_VAR = "DB_SNAPSHOT_PROFILE"


class ProfileNotFoundError(Exception):
    """Raised when no database profile or connection settings are configured."""

    pass


def resolve_url(profile: DatabaseProfile) -> str:
    """Resolve profile URL with password substitution.

    Args:
        profile: Database profile from config.

    Returns:
        Connection URL with ``[YOUR-PASSWORD]`` replaced by the URL-encoded
        ``db_password``, if both are present.
    """
    url = profile.url
    if profile.db_password and "[YOUR-PASSWORD]" in url:
        url = url.replace("[YOUR-PASSWORD]", quote(profile.db_password, safe=""))
    return url


def url_from_env(environ: dict[str, str] | None = None) -> str | None:
    """Build a connection URL from environment variables.

    ``DATABASE_URL`` wins.  Otherwise a MySQL URL is assembled from
    ``DB_HOST``, ``DB_PORT`` (default 3306), ``DB_USER``, ``DB_PASSWORD``,
    and ``DB_NAME``; ``DB_HOST`` and ``DB_NAME`` are required.

    Returns:
        URL string, or ``None`` if the environment has no settings.
    """
    env = os.environ if environ is None else environ

    database_url = env.get("DATABASE_URL")
    if database_url:
        return database_url

    host = env.get("DB_HOST")
    name = env.get("DB_NAME")
    if not host or not name:
        return None

    user = quote(env.get("DB_USER", ""), safe="")
    password = env.get("DB_PASSWORD")
    credentials = user
    if password:
        credentials = f"{user}:{quote(password, safe='')}"
    if credentials:
        credentials += "@"
    port = env.get("DB_PORT") or "3306"
    return f"mysql://{credentials}{host}:{port}/{name}"


def get_active_profile(
    profile_name: str | None = None,
    config: SnapshotConfig | None = None,
) -> tuple[str, DatabaseProfile]:
    """Resolve the profile to use.

    Priority:
    1. ``profile_name`` argument
    2. ``DB_SNAPSHOT_PROFILE`` env var
    3. The only profile, if exactly one is configured

    Returns:
        Tuple of (profile_name, DatabaseProfile).

    Raises:
        ProfileNotFoundError: If no profile can be selected or it doesn't exist.
    """
    config = config if config is not None else load_db_config()

    name = profile_name or os.environ.get(PROFILE_ENV_VAR)
    if not name and len(config.profiles) == 1:
        name = next(iter(config.profiles))

    if not name:
        raise ProfileNotFoundError(
            "No database profile selected.\n"
            f"Use --profile <name> or set {PROFILE_ENV_VAR}.\n"
            f"Available profiles: {', '.join(config.profiles) or '(none)'}"
        )

    if name not in config.profiles:
        raise ProfileNotFoundError(
            f"Profile '{name}' not found in db.toml.\n"
            f"Available profiles: {', '.join(config.profiles) or '(none)'}"
        )

    return name, config.profiles[name]


def load_config_or_default(config_path: Path | None = None) -> SnapshotConfig:
    """Load db.toml, or return defaults if it doesn't exist.

    An explicitly given ``config_path`` must exist.
    """
    try:
        return load_db_config(config_path)
    except FileNotFoundError:
        if config_path is not None:
            raise
        return SnapshotConfig()


def get_source(
    profile_name: str | None = None,
    config: SnapshotConfig | None = None,
    schema_name: str | None = None,
) -> SqlSnapshotSource:
    """Create a source for the selected profile or the environment.

    Args:
        profile_name: Profile name from db.toml.  If None, uses
            ``DB_SNAPSHOT_PROFILE``, the single configured profile, or the
            environment variables.
        config: Loaded configuration (default: db.toml in cwd, if present).
        schema_name: Schema to export, overriding the profile's
            ``schema_name`` and the URL's database name.

    Returns:
        ``SqlSnapshotSource`` (caller closes it).

    Raises:
        ProfileNotFoundError: If no connection settings are available.
    """
    config = config if config is not None else load_config_or_default()

    if config.profiles or profile_name:
        name, profile = get_active_profile(profile_name, config)
        logger.info("Using database profile: %s", name)
        return SqlSnapshotSource(
            resolve_url(profile), schema_name=schema_name or profile.schema_name
        )

    url = url_from_env()
    if url:
        logger.info("Using database settings from environment")
        return SqlSnapshotSource(url, schema_name=schema_name)

    raise ProfileNotFoundError(
        "No database configuration found.\n"
        "Either:\n"
        "  1. Create db.toml with [profiles.<name>] entries\n"
        "  2. Set DATABASE_URL, or DB_HOST/DB_PORT/DB_USER/DB_PASSWORD/DB_NAME"
    )
