"""Pinata adapter for content-addressed metadata storage.

This module implements the MetadataStore protocol against the Pinata
pinning API. Writes are single attempts; the caller decides whether a
failure is fatal. Reads through the public gateway are retried on
transient network errors.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import structlog

from ...config.schema import PinataConfig
from ...utils.errors import MirrorError, api_retry
from ...utils.logging import LogEventNames

log = structlog.get_logger()


class PinataStore:
    """MetadataStore backed by Pinata.

    Example:
        store = PinataStore(PinataConfig(jwt="..."))

        image_cid = await store.upload_file("pothole.jpg", data, "image/jpeg")
        doc_cid = await store.upload_json({"issueId": 1, "status": "Resolved"})
        url = store.gateway_url(doc_cid)
    """

    def __init__(
        self,
        config: PinataConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Pinata store.

        Args:
            config: Pinata credentials and endpoints.
            transport: Optional transport shared by both clients (for tests).
        """
        self._config = config
        self._api = httpx.AsyncClient(
            base_url=config.api_url,
            headers={"Authorization": f"Bearer {config.jwt}"},
            timeout=config.timeout,
            transport=transport,
        )
        self._gateway = httpx.AsyncClient(timeout=config.timeout, transport=transport)

    async def aclose(self) -> None:
        """Close the underlying HTTP clients."""
        await self._api.aclose()
        await self._gateway.aclose()

    async def _pin(self, path: str, what: str, **kwargs: Any) -> str:
        try:
            response = await self._api.post(path, **kwargs)
            response.raise_for_status()
            cid = response.json()["IpfsHash"]
        except (httpx.HTTPError, KeyError, ValueError) as e:
            log.error(LogEventNames.MIRROR_FAILED, endpoint=path, error=str(e))
            raise MirrorError(f"Failed to upload {what} to IPFS") from e

        log.info(LogEventNames.MIRROR_UPLOADED, endpoint=path, cid=cid)
        return str(cid)

    async def upload_file(self, filename: str, content: bytes, content_type: str) -> str:
        """Pin a binary file with ``pinFileToIPFS``."""
        return await self._pin(
            "/pinning/pinFileToIPFS",
            "file",
            files={"file": (filename, content, content_type)},
        )

    async def upload_json(self, document: dict[str, Any], name: str | None = None) -> str:
        """Pin a JSON document with ``pinJSONToIPFS``."""
        body: dict[str, Any] = {"pinataContent": document}
        if name:
            body["pinataMetadata"] = {"name": name}
        return await self._pin("/pinning/pinJSONToIPFS", "JSON", json=body)

    def gateway_url(self, cid: str) -> str:
        """Return the public gateway URL for a CID."""
        return f"https://{self._config.gateway}/ipfs/{cid.removeprefix('ipfs://')}"

    @api_retry
    async def _get(self, url: str) -> httpx.Response:
        response = await self._gateway.get(url)
        response.raise_for_status()
        return response

    async def fetch_json(self, cid: str) -> Any:
        """Read a pinned JSON document back through the gateway."""
        url = self.gateway_url(cid)
        try:
            response = await self._get(url)
            return response.json()
        except (httpx.HTTPError, json.JSONDecodeError) as e:
            log.error("mirror_fetch_failed", cid=cid, error=str(e))
            raise MirrorError(f"Failed to fetch {cid} from IPFS gateway") from e

    async def check_auth(self) -> bool:
        """Return True if Pinata accepts the configured JWT."""
        try:
            response = await self._api.get("/data/testAuthentication")
        except httpx.HTTPError as e:
            log.warning("pinata_auth_check_failed", error=str(e))
            return False
        return response.status_code == 200
