"""Abstract interface for content-addressed metadata storage."""

from typing import Any, Protocol


class MetadataStore(Protocol):
    """Content-addressed storage for photos and metadata snapshots.

    Stored content is immutable: every upload yields a new content id (CID).
    """

    async def upload_file(self, filename: str, content: bytes, content_type: str) -> str:
        """
        Pin a binary file.

        Args:
            filename: Original file name
            content: File bytes
            content_type: MIME type

        Returns:
            CID of the pinned file

        Raises:
            MirrorError: If the upload fails
        """
        ...

    async def upload_json(self, document: dict[str, Any], name: str | None = None) -> str:
        """
        Pin a JSON document.

        Args:
            document: JSON-serializable document
            name: Optional human-readable pin name

        Returns:
            CID of the pinned document

        Raises:
            MirrorError: If the upload fails
        """
        ...

    def gateway_url(self, cid: str) -> str:
        """Map a CID (optionally ``ipfs://``-prefixed) to a public URL."""
        ...

    async def fetch_json(self, cid: str) -> Any:
        """
        Read a pinned JSON document back through the public gateway.

        Raises:
            MirrorError: If the document cannot be fetched
        """
        ...

    async def check_auth(self) -> bool:
        """Return True if the storage credentials are accepted."""
        ...
