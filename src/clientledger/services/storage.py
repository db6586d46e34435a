"""Object-storage gateway for signed upload and download URLs."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, quote, urlparse

import requests

from clientledger.domain.errors import ConfigurationError, StorageError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class SignedUpload:
    """Credential allowing one upload to ``path``."""

    path: str
    token: str
    signed_url: str


class StorageGateway(ABC):
    """Interface to the hosted object store."""

    bucket: str

    @abstractmethod
    def create_signed_upload(self, path: str) -> SignedUpload:
        """Issue a time-limited credential to upload one object."""
        pass

    @abstractmethod
    def create_signed_download_url(self, path: str, expires_in: int) -> str:
        """Issue a time-limited URL to read one object."""
        pass


class SupabaseStorage(StorageGateway):
    """Storage gateway backed by the Supabase Storage REST API.

    Uses the privileged service credential, so it must only run server-side.
    """

    def __init__(
        self,
        url: Optional[str],
        service_key: Optional[str],
        bucket: str = "client-files",
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.url = (url or "").rstrip("/")
        self.service_key = service_key
        self.bucket = bucket
        self.timeout = timeout
        self._session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        if not self.url:
            raise ConfigurationError("Missing storage URL")
        if not self.service_key:
            raise ConfigurationError("Missing storage service key")
        return {
            "Authorization": f"Bearer {self.service_key}",
            "apikey": self.service_key,
        }

    def _object_url(self, action: str, path: str) -> str:
        return f"{self.url}/storage/v1/object/{action}/{quote(self.bucket)}/{quote(path)}"

    def _post(self, url: str, payload: Optional[dict] = None) -> dict:
        headers = self._headers()
        try:
            response = self._session.post(url, json=payload or {}, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise StorageError(f"Storage request failed: {e}") from e

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = None
            detail = (body.get("message") if isinstance(body, dict) else None) or response.text
            logger.error("Storage request to %s failed (%s): %s", url, response.status_code, detail)
            raise StorageError(detail or f"Storage request failed with status {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise StorageError("Storage returned an invalid response") from e

    def create_signed_upload(self, path: str) -> SignedUpload:
        """Issue a signed upload credential for ``path``."""
        data = self._post(self._object_url("upload/sign", path))
        relative = data.get("url")
        if not relative:
            raise StorageError("Failed to create signed upload URL")

        token = parse_qs(urlparse(relative).query).get("token", [None])[0]
        if not token:
            raise StorageError("Failed to create signed upload URL")
        return SignedUpload(path=path, token=token, signed_url=f"{self.url}/storage/v1{relative}")

    def create_signed_download_url(self, path: str, expires_in: int) -> str:
        """Issue a signed download URL for ``path`` valid for ``expires_in`` seconds."""
        data = self._post(self._object_url("sign", path), {"expiresIn": expires_in})
        relative = data.get("signedURL") or data.get("signedUrl")
        if not relative:
            raise StorageError("Failed to create signed download URL")
        return f"{self.url}/storage/v1{relative}"
