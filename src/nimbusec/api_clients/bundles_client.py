"""Bundles API Client for nimbusec."""

from typing import List, Union

from ..models import Bundle
from .base_client import EMPTY_FILTER, NimbusecAPIClient
from .resource import Identifier, ResourceCollection, identify


class BundlesAPIClient(NimbusecAPIClient):
    """Client for subscription bundle operations."""

    @property
    def _bundles(self) -> ResourceCollection[Bundle]:
        return ResourceCollection(self, "/v2/bundle", Bundle, "bundles")

    async def create_bundle(self, bundle: Bundle) -> Bundle:
        return await self._bundles.create(bundle)

    async def create_or_update_bundle(self, bundle: Bundle) -> Bundle:
        return await self._bundles.create(bundle, upsert=True)

    async def create_or_get_bundle(self, bundle: Bundle) -> Bundle:
        return await self._bundles.create(bundle, upsert=False)

    async def get_bundle(self, bundle_id: Identifier) -> Bundle:
        """Retrieve a bundle by its id, the value domains reference it by."""
        return await self._bundles.get(bundle_id)

    async def get_bundle_by_name(self, name: str) -> Bundle:
        return await self._bundles.get_one("name", name)

    async def find_bundles(self, filter: str = EMPTY_FILTER) -> List[Bundle]:
        return await self._bundles.find(filter)

    async def update_bundle(self, bundle: Bundle) -> Bundle:
        return await self._bundles.update(identify(bundle), bundle)

    async def delete_bundle(self, bundle: Union[Bundle, Identifier]) -> None:
        await self._bundles.delete(identify(bundle))
