"""S3 upload gateway for completed backup artifacts."""

import os
import posixpath

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from backupagent.errors import UploadError
from backupagent.errors_catalog import actionable_error
from backupagent.settings import S3Settings


def object_key(path_prefix: str, local_path: str) -> str:
    prefix = (path_prefix or "").strip("/")
    filename = os.path.basename(local_path)
    return posixpath.join(prefix, filename) if prefix else filename


class S3UploadGateway:
    """Pushes one artifact to the configured bucket with a single PUT."""

    def __init__(self, settings: S3Settings, logger, client=None):
        self.settings = settings
        self.logger = logger
        self._client = client

    @property
    def client(self):
        if self._client is None:
            session_kwargs = {
                "region_name": self.settings.region,
                "aws_access_key_id": self.settings.access_key_id,
                "aws_secret_access_key": self.settings.secret_access_key,
                "endpoint_url": self.settings.endpoint_url,
            }
            self._client = boto3.client("s3", **{k: v for k, v in session_kwargs.items() if v})
        return self._client

    def upload(self, local_path: str) -> str:
        key = object_key(self.settings.path, local_path)
        self.logger.info("Uploading %s to s3://%s/%s", local_path, self.settings.bucket, key)

        try:
            with open(local_path, "rb") as body:
                self.client.put_object(Bucket=self.settings.bucket, Key=key, Body=body)
        except (BotoCoreError, ClientError, OSError) as exc:
            raise UploadError(
                actionable_error(
                    "upload_failed",
                    path=local_path,
                    bucket=self.settings.bucket,
                    key=key,
                    reason=exc,
                ),
                cause=exc,
            ) from exc

        self.logger.info("File uploaded to S3 successfully: %s", key)
        return key
