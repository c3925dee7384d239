"""Pydantic models for snapshot configuration."""

from pydantic import BaseModel, Field, field_validator

from db_snapshot.snapshot.serializer import DEFAULT_BATCH_SIZE


class DatabaseProfile(BaseModel):
    """Database connection profile from db.toml."""

    url: str
    description: str = ""
    db_password: str | None = None  # For [YOUR-PASSWORD] placeholder substitution
    schema_name: str | None = None  # Defaults to the URL's database name


class SnapshotSettings(BaseModel):
    """The ``[snapshot]`` table of db.toml."""

    output_dir: str = "database_dumps"
    batch_size: int = DEFAULT_BATCH_SIZE
    exclude_tables: list[str] = Field(default_factory=list)

    @field_validator("batch_size")
    @classmethod
    def _check_batch_size(cls, value: int) -> int:
        if value < 1:
            raise ValueError("batch_size must be at least 1")
        return value


class SnapshotConfig(BaseModel):
    """Complete configuration from db.toml."""

    profiles: dict[str, DatabaseProfile] = Field(default_factory=dict)
    snapshot: SnapshotSettings = Field(default_factory=SnapshotSettings)
