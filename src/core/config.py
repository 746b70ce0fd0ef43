"""Runtime configuration model for Atlas.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import CACHE_DIR_NAME, DEFAULT_DATA_ROOT, DEFAULT_SOURCE_URI
from core.errors import AtlasConfigError


@dataclass(frozen=True)
class AtlasConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local root directory for the snapshot cache.
        source_uri: Collision CSV location, local path or ``s3://`` URI.
        s3_region: Optional default AWS region for S3 sources.
        s3_profile: Optional AWS profile for boto3 session initialization.
    """

    data_root: Path
    source_uri: str
    s3_region: str | None
    s3_profile: str | None

    @classmethod
    def from_env(cls) -> "AtlasConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            AtlasConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("ATLAS_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        source_uri = _parse_source_uri(os.getenv("ATLAS_SOURCE_URI", DEFAULT_SOURCE_URI))
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            source_uri=source_uri,
            s3_region=os.getenv("ATLAS_S3_REGION"),
            s3_profile=os.getenv("ATLAS_S3_PROFILE"),
        )

    @property
    def cache_dir(self) -> Path:
        """Directory holding cached snapshot files."""
        return self.data_root / CACHE_DIR_NAME


def _parse_source_uri(raw_value: str) -> str:
    """Validate the source URI environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Stripped source URI.

    Raises:
        AtlasConfigError: If value is blank.
    """
    source_uri = raw_value.strip()
    if not source_uri:
        raise AtlasConfigError(
            "Invalid ATLAS_SOURCE_URI value: expected a file path or s3:// URI, got ''. "
            "Unset ATLAS_SOURCE_URI to use the default collision CSV path."
        )
    return source_uri
