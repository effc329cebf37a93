"""
Fetch the currently published metadata.json for a box.
"""
from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from boxpublish.domain.box_utils import join_url
from boxpublish.domain.errors import IdentityMismatch, IndexCorrupt
from boxpublish.domain.models import INDEX_FILENAME, PackageIdentity, PackageIndex
from boxpublish.services.transport import IndexTransport


def index_url(identity: PackageIdentity, target_url: str) -> str:
    return join_url(target_url, identity.qualified_name, INDEX_FILENAME)


class IndexFetcher:
    """Downloads and validates the remote index of a box."""

    def __init__(self, transport: IndexTransport, logger: Optional[logging.Logger] = None):
        self.transport = transport
        self.logger = logger or logging.getLogger(__name__)

    async def fetch(self, identity: PackageIdentity, target_url: str) -> Optional[PackageIndex]:
        """
        Return the remote index, or None if none has been published yet.

        Args:
            identity: Box the index must describe
            target_url: Base URL boxes are published under

        Raises:
            TransportError: the GET failed other than with not-found
            IndexCorrupt: the body is not a metadata.json document
            IdentityMismatch: the document describes another box
        """
        url = index_url(identity, target_url)
        self.logger.debug(f"Fetching index from {url}")

        body = await self.transport.get(url)
        if body is None:
            self.logger.warning(f"No index found at {url}; starting a new one")
            return None

        try:
            index = PackageIndex.model_validate_json(body)
        except ValidationError as e:
            self.logger.error(f"Failed to parse index from {url}: {e}")
            raise IndexCorrupt(f"index is not a valid metadata document: {e}", url=url) from e

        if index.name != identity.qualified_name:
            raise IdentityMismatch(
                f"index at {url} describes {index.name!r}, expected {identity.qualified_name!r}",
                expected=identity.qualified_name,
                observed=index.name,
                url=url,
            )

        self.logger.info(f"Fetched index for {index.name} with {len(index.versions)} version(s)")
        return index
