from __future__ import annotations

from typing import Any

import boto3
from botocore.config import Config

from ...settings import Settings


def botocore_config(settings: Settings) -> Config:
    # "standard" mode with max_attempts=1 means a single attempt: the store layer
    # surfaces failures and leaves retry policy to its callers.
    return Config(
        retries={"max_attempts": settings.ddb_max_attempts, "mode": "standard"},
        connect_timeout=settings.ddb_connect_timeout,
        read_timeout=settings.ddb_read_timeout,
    )


def _client_kwargs(settings: Settings) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "region_name": settings.aws_region,
        "config": botocore_config(settings),
    }
    if settings.ddb_endpoint_url:
        kwargs["endpoint_url"] = settings.ddb_endpoint_url
    return kwargs


def dynamodb_resource(settings: Settings):
    return boto3.resource("dynamodb", **_client_kwargs(settings))


def dynamodb_client(settings: Settings):
    return boto3.client("dynamodb", **_client_kwargs(settings))


def table_resource(settings: Settings, table_name: str | None = None):
    return dynamodb_resource(settings).Table(table_name or settings.ddb_table_name)
