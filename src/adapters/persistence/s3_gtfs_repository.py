from __future__ import annotations

import os
from dataclasses import dataclass

from botocore.exceptions import BotoCoreError, ClientError

from src.adapters.aws import s3_client
from src.app.ports.output import IGtfsRepository
from src.domain.exceptions import LoadError
from src.domain.models.gtfs import ReferenceIndex

from .gtfs_tables import build_reference_index

_MISSING_CODES = {"NoSuchKey", "404", "NotFound"}


@dataclass(slots=True)
class S3GtfsRepository(IGtfsRepository):
    """Loads the reference index from GTFS .txt objects stored in S3.

    Env vars:
      - GTFS_S3_BUCKET (required)
      - GTFS_S3_PREFIX (default: gtfs)
      - ENDPOINT_URL (preferred for LocalStack)
    """

    bucket: str | None = None
    prefix: str | None = None

    def _bucket(self) -> str:
        value = self.bucket or os.getenv("GTFS_S3_BUCKET")
        if not value:
            raise LoadError("Missing GTFS_S3_BUCKET")
        return value

    def _prefix(self) -> str:
        return (self.prefix or os.getenv("GTFS_S3_PREFIX") or "gtfs").strip("/")

    def _key(self, name: str) -> str:
        prefix = self._prefix()
        return f"{prefix}/{name}.txt" if prefix else f"{name}.txt"

    def load_index(self) -> ReferenceIndex:
        s3 = s3_client()
        bucket = self._bucket()

        def read_table(name: str) -> str | None:
            key = self._key(name)
            try:
                obj = s3.get_object(Bucket=bucket, Key=key)
                return obj["Body"].read().decode("utf-8")
            except ClientError as exc:
                code = str(exc.response.get("Error", {}).get("Code", ""))
                if code in _MISSING_CODES:
                    return None
                raise LoadError(f"Cannot read s3://{bucket}/{key}: {exc}") from exc
            except (BotoCoreError, UnicodeDecodeError) as exc:
                raise LoadError(f"Cannot read s3://{bucket}/{key}: {exc}") from exc

        return build_reference_index(read_table)
