"""
Cloud Storage module for original documents

Handles all GCS operations for the knowledge base:
- Upload original files under a timestamped, randomized, whitespace-free key
- Resolve public URLs for stored files
- List and download existing files (startup backfill)

Structure in GCS:
gs://bucket/
├── 1718000000000_3fa2c9d1_lecture_notes.pdf
├── 1718000012345_9b07e4aa_week_2_summary.docx
└── ...

The google-cloud-storage client is synchronous; every call runs in a worker
thread and is bounded by a timeout so a stuck request surfaces as an error.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional

from google.cloud import storage

from .errors import StorageDownloadError, StorageUploadError

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_TIMEOUT = 60.0


@dataclass
class BlobInfo:
    """Bucket listing entry"""
    name: str
    content_type: str = ""
    size: Optional[int] = None


class DocumentStorage:
    """Cloud Storage handler for uploaded documents"""

    def __init__(
        self,
        bucket_name: str = "knowledge-base-documents",
        client: Optional[storage.Client] = None,
        timeout: float = DEFAULT_STORAGE_TIMEOUT,
    ):
        """
        Initialize GCS client

        Args:
            bucket_name: GCS bucket holding original documents
            client: Preconfigured client (default: storage.Client() from ambient credentials)
            timeout: Upper bound in seconds for each storage call
        """
        self.client = client or storage.Client()
        self.bucket = self.client.bucket(bucket_name)
        self.bucket_name = bucket_name
        self.timeout = timeout

    async def upload(self, key: str, content: bytes, content_type: Optional[str] = None) -> str:
        """
        Upload original file bytes (overwrites an existing object with the same key)

        Returns:
            Object name of the stored file

        Raises:
            StorageUploadError: Upload failed or timed out
        """
        blob = self.bucket.blob(key)
        try:
            await asyncio.wait_for(
                asyncio.to_thread(
                    blob.upload_from_string,
                    content,
                    content_type=content_type or "application/octet-stream",
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise StorageUploadError(f"Upload of {key} timed out after {self.timeout}s") from e
        except Exception as e:
            raise StorageUploadError(f"Upload of {key} failed: {e}") from e

        logger.debug(f"Uploaded {len(content)} bytes to gs://{self.bucket_name}/{key}")
        return key

    def get_public_url(self, key: str) -> str:
        """
        Public URL of a stored object ("" if it cannot be resolved)

        The URL is only reachable when the bucket grants public read access.
        """
        try:
            return self.bucket.blob(key).public_url or ""
        except Exception as e:
            logger.warning(f"Could not resolve public URL for {key}: {e}")
            return ""

    async def list_files(self) -> List[BlobInfo]:
        """List every object in the bucket"""
        def _list():
            return [
                BlobInfo(name=blob.name, content_type=blob.content_type or "", size=blob.size)
                for blob in self.client.list_blobs(self.bucket_name)
            ]

        return await asyncio.wait_for(asyncio.to_thread(_list), timeout=self.timeout)

    async def download(self, name: str) -> bytes:
        """
        Download an object's bytes

        Raises:
            StorageDownloadError: Download failed or timed out
        """
        blob = self.bucket.blob(name)
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(blob.download_as_bytes),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise StorageDownloadError(f"Download of {name} timed out after {self.timeout}s") from e
        except Exception as e:
            raise StorageDownloadError(f"Download of {name} failed: {e}") from e
