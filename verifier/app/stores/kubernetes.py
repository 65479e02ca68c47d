"""
Kubernetes API backed payload store.

Reads payload secrets through the core/v1 secrets endpoint:

    GET {api_server}/api/v1/namespaces/{namespace}/secrets/{name}

Secret data values arrive base64-encoded and are decoded here, so callers
always receive raw payload bytes.

The store is read-only and performs no retries. A 404 is reported as
NotFoundError; every other HTTP or transport failure as FetchError.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Dict, Optional
from urllib.parse import quote

import httpx

from verifier.app.errors import FetchError, NotFoundError
from verifier.app.schemas.declaration import SourceRef, StoredPayload
from verifier.app.stores.base import PayloadStore
from verifier.app.stores.settings import StoreSettings

logger = logging.getLogger(__name__)


class KubernetesSecretStore(PayloadStore):
    """
    Async payload store over a shared httpx.AsyncClient.

    The client is owned by the caller, which keeps connection pooling and
    lifecycle outside of the verifier.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: StoreSettings,
    ) -> None:
        self.client = http_client
        self.settings = settings
        self.base_url = str(settings.api_server_url).rstrip("/")

    @classmethod
    def from_settings(
        cls,
        settings: StoreSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "KubernetesSecretStore":
        """
        Construct a store with its own client.

        The caller is responsible for closing `store.client`.
        """
        client = httpx.AsyncClient(
            verify=settings.verify_tls,
            transport=transport,
        )
        return cls(client, settings)

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.settings.token is not None:
            headers["Authorization"] = (
                f"Bearer {self.settings.token.get_secret_value()}"
            )
        return headers

    def _secret_url(self, ref: SourceRef) -> str:
        return (
            f"{self.base_url}/api/v1/namespaces/"
            f"{quote(ref.namespace, safe='')}/secrets/{quote(ref.name, safe='')}"
        )

    async def fetch(self, ref: SourceRef) -> StoredPayload:
        logger.debug("fetching payload secret %s", ref)

        try:
            response = await self.client.get(
                self._secret_url(ref),
                headers=self._headers(),
                timeout=self.settings.request_timeout_seconds,
            )
        except httpx.RequestError as exc:
            logger.error("fetch %s: connection error: %s", ref, exc)
            raise FetchError(
                f"error when retrieving payload secret {ref}: {exc}"
            ) from exc

        if response.status_code == 404:
            raise NotFoundError(ref.namespace, ref.name)

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "fetch %s: HTTP %s body=%s",
                ref,
                exc.response.status_code,
                exc.response.text[:200],
            )
            raise FetchError(
                f"error when retrieving payload secret {ref}: "
                f"API server returned {exc.response.status_code}"
            ) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise FetchError(
                f"payload secret {ref} is not valid JSON"
            ) from exc

        return StoredPayload(
            namespace=ref.namespace,
            name=ref.name,
            data=self._decode_data(ref, body),
        )

    @staticmethod
    def _decode_data(ref: SourceRef, body: object) -> Dict[str, bytes]:
        if not isinstance(body, dict):
            raise FetchError(f"payload secret {ref} is not a JSON object")

        encoded = body.get("data") or {}
        if not isinstance(encoded, dict):
            raise FetchError(f"payload secret {ref} has malformed data")

        data: Dict[str, bytes] = {}
        for key, value in encoded.items():
            if not isinstance(value, str):
                raise FetchError(
                    f"payload secret {ref} data key {key!r} is not a string"
                )
            try:
                data[key] = base64.b64decode(value, validate=True)
            except (binascii.Error, ValueError) as exc:
                raise FetchError(
                    f"payload secret {ref} data key {key!r} is not "
                    f"valid base64"
                ) from exc
        return data
