"""Fleet settings loaded from environment with validation."""

import re
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def parse_csv(value: str) -> list[str]:
    """Split a comma-separated setting, keeping order and dropping blanks."""
    return [v.strip() for v in (value or "").split(",") if v.strip()]


class Settings(BaseSettings):
    """Fleet provisioner settings from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FLEET_",
        extra="ignore",
        case_sensitive=False,
    )

    # Deployment
    prefix: str = Field(default="", max_length=16, description="Resource name prefix for this deployment")
    provider: Literal["aws", "memory"] = Field(
        default="aws",
        description="Provisioning backend: aws (boto3) or memory (dry run)",
    )
    aws_region: str = Field(default="us-east-1", min_length=1, description="AWS region for all resources")
    aws_max_attempts: int = Field(default=5, ge=1, le=20, description="botocore standard-mode retry attempts")

    # Requested fleet
    models: str = Field(
        default="",
        description="Comma-separated ordered model ids (or catalog aliases) to deploy",
    )
    huggingface_secret_arn: str = Field(
        default="",
        description="Secrets Manager ARN holding the Hugging Face token for gated models",
    )
    secret_cache_ttl_seconds: int = Field(default=300, ge=0, le=86400)
    unknown_model_policy: Literal["skip", "fail"] = Field(
        default="skip",
        description="skip: record unknown ids and continue; fail: abort the pass before side effects",
    )
    strict_secrets: bool = Field(
        default=True,
        description="Reject gated models without a token instead of deploying them with an empty HF_TOKEN",
    )
    provisioning_concurrency: int = Field(
        default=1,
        ge=1,
        le=16,
        description="Endpoints materialized in parallel within one pass",
    )

    # Shared collaborator handles (opaque)
    security_group_ids: str = Field(default="", description="Comma-separated security group ids")
    subnet_ids: str = Field(default="", description="Comma-separated private subnet ids")
    kms_key_id: str = Field(default="", description="KMS key id or ARN for endpoint storage encryption")
    endpoint_execution_role_arn: str = Field(
        default="",
        description="IAM role SageMaker assumes to pull images and write logs",
    )

    # Registry
    registry_parameter_name: str = Field(
        default="/model-fleet/models",
        min_length=1,
        description="Well-known SSM parameter name of the fleet registry document",
    )

    # Lifecycle schedule
    schedule_enabled: bool = Field(default=False)
    schedule_timezone: str = Field(default="UTC", min_length=1)
    schedule_cron_format: bool = Field(
        default=False,
        description="Use schedule_cron_start/stop verbatim instead of days + times",
    )
    schedule_cron_start: str = Field(default="", description="e.g. cron(0 8 ? * MON-FRI *)")
    schedule_cron_stop: str = Field(default="", description="e.g. cron(0 18 ? * MON-FRI *)")
    schedule_days: str = Field(default="MON-FRI", description="Days-of-week field, e.g. MON-FRI or MON,WED,FRI")
    schedule_start_time: str = Field(default="08:00", description="HH:MM")
    schedule_stop_time: str = Field(default="18:00", description="HH:MM")
    schedule_end_date: str = Field(default="", description="Optional ISO date after which triggers stop firing")

    # API
    internal_api_secret: str = Field(
        default="",
        description="Optional secret required in X-Fleet-Internal-Secret for /v1/fleet routes",
    )

    # Logging
    log_level: LogLevel = Field(default="INFO")
    trace_console_export: bool = Field(default=False, description="Print finished spans to stdout")

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        u = (v or "INFO").upper()
        if u not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return u

    @field_validator("schedule_start_time", "schedule_stop_time")
    @classmethod
    def validate_hhmm(cls, v: str) -> str:
        if not _HHMM.match(v.strip()):
            raise ValueError(f"time must be HH:MM, got {v!r}")
        return v.strip()

    @property
    def requested_models(self) -> list[str]:
        return parse_csv(self.models)

    @property
    def security_groups(self) -> list[str]:
        return parse_csv(self.security_group_ids)

    @property
    def subnets(self) -> list[str]:
        return parse_csv(self.subnet_ids)


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
