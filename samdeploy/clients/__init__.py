"""Cloud service client interfaces."""

from samdeploy.clients.s3 import S3AccessError, S3Client

__all__ = ["S3AccessError", "S3Client"]
