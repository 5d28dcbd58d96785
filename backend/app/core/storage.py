from typing import List, Optional, Protocol
from app.core.config import settings
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
import httpx
import logging

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    pass


class ObjectStorage(Protocol):
    async def upload(self, path: str, data: bytes, content_type: str) -> None: ...

    async def remove(self, paths: List[str]) -> None: ...

    def public_url(self, path: str) -> str: ...


class HttpObjectStorage:
    """Bucket-scoped client for an HTTP object storage API"""

    def __init__(
        self,
        bucket: str = settings.LISTING_IMAGES_BUCKET,
        base_url: str = settings.STORAGE_URL,
        api_key: Optional[str] = None,
        timeout: float = settings.STORAGE_TIMEOUT_SECONDS,
    ):
        self.bucket = bucket
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key if api_key is not None else settings.STORAGE_API_KEY
        self.timeout = timeout

    def _headers(self, content_type: Optional[str] = None) -> dict:
        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, max=4),
        retry=retry_if_exception_type(httpx.RequestError),
        reraise=True
    )
    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Send one request, retrying transport errors"""
        async with httpx.AsyncClient() as client:
            return await client.request(method, url, timeout=self.timeout, **kwargs)

    async def upload(self, path: str, data: bytes, content_type: str) -> None:
        url = f"{self.base_url}/object/{self.bucket}/{path}"
        response = await self._send("POST", url, content=data, headers=self._headers(content_type))

        if response.status_code >= 400:
            raise StorageError(f"Upload of {path} failed with status {response.status_code}")
        logger.debug(f"Uploaded {path} to bucket {self.bucket}")

    async def remove(self, paths: List[str]) -> None:
        if not paths:
            return

        url = f"{self.base_url}/object/{self.bucket}"
        response = await self._send("DELETE", url, json={"prefixes": paths}, headers=self._headers())

        if response.status_code >= 400:
            raise StorageError(f"Removing {len(paths)} objects failed with status {response.status_code}")

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/object/public/{self.bucket}/{path}"


def get_object_storage() -> ObjectStorage:
    return HttpObjectStorage()
