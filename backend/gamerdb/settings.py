from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from .db.dynamodb.admin import TableDescriptor


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    # Runtime
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # AWS / data
    aws_region: str = Field(default="us-east-1", validation_alias="AWS_REGION")
    ddb_table_name: str = Field(default="gamerDetails", validation_alias="DDB_TABLE_NAME")
    # Optional: point at DynamoDB Local / LocalStack during development.
    ddb_endpoint_url: str | None = Field(default=None, validation_alias="DDB_ENDPOINT_URL")

    # Provisioned throughput for the gamer table.
    ddb_read_capacity: int = Field(default=2, ge=1, validation_alias="DDB_READ_CAPACITY")
    ddb_write_capacity: int = Field(default=2, ge=1, validation_alias="DDB_WRITE_CAPACITY")

    # botocore client tuning. Total attempts per call, including the first one;
    # callers own any retry policy beyond this.
    ddb_connect_timeout: float = Field(default=2, validation_alias="DDB_CONNECT_TIMEOUT")
    ddb_read_timeout: float = Field(default=10, validation_alias="DDB_READ_TIMEOUT")
    ddb_max_attempts: int = Field(default=1, ge=1, validation_alias="DDB_MAX_ATTEMPTS")

    # Table provisioning (create-table utility)
    table_poll_interval_seconds: float = Field(
        default=5.0, gt=0, validation_alias="TABLE_POLL_INTERVAL_SECONDS"
    )
    table_ready_timeout_seconds: float = Field(
        default=300.0, gt=0, validation_alias="TABLE_READY_TIMEOUT_SECONDS"
    )

    # ---- helpers / derived flags ----
    @property
    def normalized_environment(self) -> str:
        v = (self.environment or "").strip().lower()
        if v in ("prod", "production"):
            return "production"
        if v in ("stage", "staging"):
            return "staging"
        if v in ("dev", "development"):
            return "development"
        return v or "development"

    @property
    def is_production(self) -> bool:
        return self.normalized_environment == "production"

    @property
    def is_development(self) -> bool:
        return self.normalized_environment == "development"

    def require_in_production(self) -> None:
        """
        Enforce required settings in production.

        Development is allowed to lean on defaults (and a local endpoint),
        production must name its region and table explicitly.
        """
        if not self.is_production:
            return

        missing: list[str] = []
        if not (self.aws_region or "").strip():
            missing.append("AWS_REGION")
        if not (self.ddb_table_name or "").strip():
            missing.append("DDB_TABLE_NAME")

        if missing:
            raise RuntimeError(
                "Missing required production environment variables: "
                + ", ".join(missing)
            )

    def table_descriptor(self) -> TableDescriptor:
        from .db.dynamodb.admin import TableDescriptor

        return TableDescriptor(
            name=self.ddb_table_name,
            partition_key="id",
            partition_key_type="S",
            sort_key="createdAt",
            sort_key_type="N",
            read_capacity=self.ddb_read_capacity,
            write_capacity=self.ddb_write_capacity,
        )

    def to_log_safe_dict(self) -> dict[str, object]:
        """
        A redacted representation safe for structured logs / diagnostics.
        """
        return {
            "environment": self.normalized_environment,
            "log_level": self.log_level,
            "aws": {
                "aws_region": self.aws_region,
                "ddb_table_name": self.ddb_table_name,
                "ddb_endpoint_url_configured": bool((self.ddb_endpoint_url or "").strip()),
                "ddb_read_capacity": self.ddb_read_capacity,
                "ddb_write_capacity": self.ddb_write_capacity,
                "ddb_max_attempts": self.ddb_max_attempts,
            },
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    s = Settings()
    s.require_in_production()
    return s
