# tradedocs/storage/s3_storage.py
from __future__ import annotations

import logging
from urllib.parse import quote

import boto3
from botocore.client import Config

from tradedocs.config import Settings, get_settings

logger = logging.getLogger(__name__)


def _safe_filename(name: str) -> str:
    # Content-Disposition: no line breaks, always .pdf
    name = (name or "document.pdf").strip().replace("\n", " ").replace("\r", " ")
    if not name.lower().endswith(".pdf"):
        name += ".pdf"
    return name


class S3Storage:
    """
    Published PDFs live in one bucket. Credentials come from the usual boto3
    chain, optionally pinned to AWS_PROFILE.
    """

    def __init__(self, settings: Settings | None = None, client=None):
        settings = settings or get_settings()
        self.bucket = settings.require_s3_bucket()

        if client is not None:
            self.s3 = client
            return

        session = boto3.Session(profile_name=settings.aws_profile) if settings.aws_profile else boto3.Session()
        self.s3 = session.client(
            "s3",
            region_name=settings.aws_region,
            config=Config(signature_version="s3v4"),
        )

    def upload_pdf_bytes(self, key: str, data: bytes, filename: str | None = None) -> None:
        extra = {}
        if filename:
            extra["ContentDisposition"] = f"inline; filename*=UTF-8''{quote(_safe_filename(filename))}"
        self.s3.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=data,
            ContentType="application/pdf",
            **extra,
        )
        logger.info("Uploaded %d bytes to s3://%s/%s", len(data), self.bucket, key)

    def presign_get_url(
        self,
        key: str,
        expires_seconds: int = 3600,
        download_filename: str | None = None,
        inline: bool = True,
    ) -> str:
        """
        inline=True opens in browser tab; inline=False forces download.
        """
        params = {"Bucket": self.bucket, "Key": key}

        if download_filename:
            fname = _safe_filename(download_filename)
            disp = "inline" if inline else "attachment"
            params["ResponseContentDisposition"] = f"{disp}; filename*=UTF-8''{quote(fname)}"
            params["ResponseContentType"] = "application/pdf"

        return self.s3.generate_presigned_url(
            ClientMethod="get_object",
            Params=params,
            ExpiresIn=int(expires_seconds),
        )


_storage_singleton: S3Storage | None = None


def get_storage() -> S3Storage:
    global _storage_singleton
    if _storage_singleton is None:
        _storage_singleton = S3Storage()
    return _storage_singleton
