# bucketsync Configuration Schema
# Pydantic models for YAML configuration validation

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from bucketsync.storage.base import DEFAULT_REGION, Credentials


class LocationsConfig(BaseModel):
    """Source, destination and credentials of a sync run."""

    source: Optional[str] = Field(default=None, description="Source location URI (s3://bucket/prefix)")
    destination: Optional[str] = Field(default=None, description="Destination location URI (s3://bucket/prefix)")
    profile: Optional[str] = Field(default=None, description="AWS profile name (None = default credential chain)")
    fallback_region: str = Field(
        default=DEFAULT_REGION, description="Region used when bucket region discovery fails"
    )

    @field_validator("source", "destination", "profile")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty strings as unset."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @property
    def credentials(self) -> Credentials:
        """Credential reference for both locations."""
        return Credentials(profile=self.profile)


class ConcurrencyConfig(BaseModel):
    """Worker pool and timeout settings."""

    max_workers: int = Field(default=16, ge=1, le=512, description="Maximum concurrent copy tasks")
    request_timeout: float = Field(default=60.0, gt=0, description="Connect/read timeout per storage request")
    run_deadline: Optional[float] = Field(
        default=None, gt=0, description="Overall bound in seconds for the copy phase (None = unbounded)"
    )


class VerificationConfig(BaseModel):
    """Existence check after each copy."""

    poll_delay: float = Field(default=5.0, gt=0, description="Seconds between existence checks")
    timeout: float = Field(default=100.0, gt=0, description="Seconds to wait for a copy to become visible")


class PolicyConfig(BaseModel):
    """Exit status policy."""

    fail_on_errors: bool = Field(
        default=False, description="Exit non-zero when any object fails to copy or verify"
    )


class OutputConfig(BaseModel):
    """Output and logging configuration."""

    verbose: bool = Field(default=False, description="Enable verbose output")
    colored: bool = Field(default=True, description="Enable colored output")
    log_file: Optional[str] = Field(default=None, description="Path to log file")

    @field_validator("log_file")
    @classmethod
    def expand_optional_path(cls, v: Optional[str]) -> Optional[str]:
        """Expand ~ in optional paths."""
        if v is None:
            return None
        return str(Path(v).expanduser())


class BucketSyncConfig(BaseModel):
    """Root configuration model for bucketsync."""

    sync: LocationsConfig = Field(default_factory=LocationsConfig, description="Locations and credentials")
    concurrency: ConcurrencyConfig = Field(default_factory=ConcurrencyConfig, description="Concurrency settings")
    verification: VerificationConfig = Field(
        default_factory=VerificationConfig, description="Copy verification settings"
    )
    policy: PolicyConfig = Field(default_factory=PolicyConfig, description="Failure policy")
    output: OutputConfig = Field(default_factory=OutputConfig, description="Output settings")

    def missing_locations(self) -> list[str]:
        """Names of required location settings that are not set."""
        missing = []
        if not self.sync.source:
            missing.append("source")
        if not self.sync.destination:
            missing.append("destination")
        return missing
