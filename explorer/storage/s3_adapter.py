"""
boto3-backed object store for the data bucket.

The adapter implements ObjectStorePort with an `s3` client signed by the
temporary credentials of the signed-in identity. All buckets are private;
downloads leave the client only as short-lived presigned URLs.

Errors:
    botocore `ClientError`/`BotoCoreError` are wrapped in StorageOperationError
    carrying a short code. No retries beyond botocore's own defaults.
"""
from __future__ import annotations

from typing import Any, BinaryIO, Dict, List, Optional
import logging

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..identity_access.credentials import TemporaryCredentials
from .config import SERVER_SIDE_ENCRYPTION
from .ports import ObjectStorePort, ProgressCallback, StorageOperationError

logger = logging.getLogger("explorer.storage")


def _error_detail(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        return str(exc.response.get("Error", {}).get("Code", "Unknown"))
    return type(exc).__name__


def build_s3_client(credentials: TemporaryCredentials, region: str) -> Any:
    session = boto3.session.Session(
        aws_access_key_id=credentials.access_key_id,
        aws_secret_access_key=credentials.secret_access_key,
        aws_session_token=credentials.session_token,
        region_name=region,
    )
    return session.client("s3", config=Config(signature_version="s3v4"))


class S3ObjectStore(ObjectStorePort):
    def __init__(self, client: Any, bucket: str):
        self._client = client
        self.bucket = bucket

    @classmethod
    def from_credentials(cls, credentials: TemporaryCredentials, *, region: str, bucket: str) -> "S3ObjectStore":
        return cls(build_s3_client(credentials, region), bucket)

    def list_objects(self) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket):
                items.extend(page.get("Contents") or [])
        except (ClientError, BotoCoreError) as exc:
            logger.warning("list failed: bucket=%s error=%s", self.bucket, _error_detail(exc))
            raise StorageOperationError("list_failed", _error_detail(exc)) from exc
        return items

    def upload(
        self,
        *,
        key: str,
        body: BinaryIO,
        content_type: str,
        metadata: Dict[str, str],
        progress: Optional[ProgressCallback] = None,
    ) -> None:
        extra_args = {
            "ContentType": content_type,
            "ServerSideEncryption": SERVER_SIDE_ENCRYPTION,
            "Metadata": dict(metadata),
        }
        try:
            self._client.upload_fileobj(body, self.bucket, key, ExtraArgs=extra_args, Callback=progress)
        except (ClientError, BotoCoreError) as exc:
            logger.warning("upload failed: key=%s error=%s", key, _error_detail(exc))
            raise StorageOperationError("upload_failed", _error_detail(exc)) from exc

    def presign_download(self, *, key: str, expires_in: int) -> str:
        try:
            return self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=int(expires_in),
            )
        except (ClientError, BotoCoreError) as exc:
            logger.warning("presign failed: key=%s error=%s", key, _error_detail(exc))
            raise StorageOperationError("presign_failed", _error_detail(exc)) from exc

    def copy_object(self, *, source_key: str, dest_key: str) -> None:
        try:
            self._client.copy_object(
                Bucket=self.bucket,
                Key=dest_key,
                CopySource={"Bucket": self.bucket, "Key": source_key},
                MetadataDirective="COPY",
                ServerSideEncryption=SERVER_SIDE_ENCRYPTION,
            )
        except (ClientError, BotoCoreError) as exc:
            logger.warning("copy failed: %s -> %s error=%s", source_key, dest_key, _error_detail(exc))
            raise StorageOperationError("copy_failed", _error_detail(exc)) from exc

    def delete_object(self, *, key: str) -> None:
        try:
            self._client.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as exc:
            logger.warning("delete failed: key=%s error=%s", key, _error_detail(exc))
            raise StorageOperationError("delete_failed", _error_detail(exc)) from exc


__all__ = ["S3ObjectStore", "StorageOperationError", "build_s3_client"]
