from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

import boto3

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client
else:
    from botocore.client import BaseClient as S3Client

LOCALSTACK_DEFAULT_URL = "http://localhost:4566"


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True, slots=True)
class AwsRuntimeConfig:
    """Where boto3 should send S3 calls for the GTFS reference source.

    Env vars:
      - AWS_REGION (default: eu-west-1)
      - ENDPOINT_URL: explicit endpoint, wins over everything else
      - USE_LOCALSTACK / LOCALSTACK_ENDPOINT_URL: local S3 for development
    """

    region: str
    endpoint_url: str | None
    use_localstack: bool = False

    @staticmethod
    def from_env() -> "AwsRuntimeConfig":
        return AwsRuntimeConfig(
            region=os.getenv("AWS_REGION", "eu-west-1"),
            endpoint_url=(os.getenv("ENDPOINT_URL") or "").strip() or None,
            use_localstack=env_bool("USE_LOCALSTACK"),
        )

    def resolved_endpoint_url(self) -> str | None:
        if self.endpoint_url:
            return self.endpoint_url
        if self.use_localstack:
            return os.getenv("LOCALSTACK_ENDPOINT_URL", LOCALSTACK_DEFAULT_URL)
        # Real AWS.
        return None


def s3_client() -> S3Client:
    cfg = AwsRuntimeConfig.from_env()
    session = boto3.session.Session(region_name=cfg.region)
    return session.client("s3", endpoint_url=cfg.resolved_endpoint_url())
