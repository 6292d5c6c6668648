"""Domains API Client for nimbusec.

Covers the monitored domains and the collections nested below a domain:
configuration values, billing history and the event log.
"""

import logging
from typing import List, Union

from ..models import BillingChange, Domain, DomainEvent
from .base_client import EMPTY_FILTER, NimbusecAPIClient, Params, filter_params
from .resource import ResourceCollection, identify

logger = logging.getLogger(__name__)


class DomainsAPIClient(NimbusecAPIClient):
    """Client for domain management operations."""

    @property
    def _domains(self) -> ResourceCollection[Domain]:
        return ResourceCollection(self, "/v2/domain", Domain, "domains")

    async def create_domain(self, domain: Domain) -> Domain:
        """Create the given domain. Fails if the domain already exists."""
        return await self._domains.create(domain)

    async def create_or_update_domain(self, domain: Domain) -> Domain:
        """Create the given domain, updating the remote one if it already exists."""
        return await self._domains.create(domain, upsert=True)

    async def create_or_get_domain(self, domain: Domain) -> Domain:
        """Create the given domain, returning the remote one if it already exists."""
        return await self._domains.create(domain, upsert=False)

    async def get_domain(self, domain_id: int) -> Domain:
        """Retrieve a domain by its id."""
        return await self._domains.get(domain_id)

    async def get_domain_by_name(self, name: str) -> Domain:
        """Retrieve a domain by its name.

        Raises:
            NotFoundError: If no domain has this name
            AmbiguousMatchError: If more than one domain has this name
        """
        return await self._domains.get_one("name", name)

    async def find_domains(self, filter: str = EMPTY_FILTER) -> List[Domain]:
        """Search for domains matching the filter."""
        return await self._domains.find(filter)

    async def update_domain(self, domain: Domain) -> Domain:
        """Replace the remote domain with the given state."""
        return await self._domains.update(identify(domain), domain)

    async def delete_domain(
        self, domain: Union[Domain, int], clean: bool = False
    ) -> None:
        """Delete a domain.

        Args:
            domain: Domain or domain id to delete
            clean: False only marks the domain and its data as deleted,
                True also removes all associated data immediately
        """
        await self._domains.delete(
            identify(domain),
            {"pleaseremovealldata": "true" if clean else "false"},
        )

    async def find_infected(self, filter: str = EMPTY_FILTER) -> List[Domain]:
        """Search for domains with pending results matching the filter."""
        url = self._build_url("/v2/infected")
        return await self._get(url, filter_params(filter), List[Domain])

    async def list_domain_config(self, domain_id: int) -> List[str]:
        """List the configuration keys set on a domain."""
        url = self._build_url("/v2/domain/{}/config", domain_id)
        return await self._get(url, {}, List[str])

    async def get_domain_config(self, domain_id: int, key: str) -> str:
        """Read one configuration value of a domain."""
        url = self._build_url("/v2/domain/{}/config/{}", domain_id, key)
        return await self._get_text(url, {})

    async def set_domain_config(self, domain_id: int, key: str, value: str) -> str:
        """Set one configuration value of a domain and return the stored value."""
        url = self._build_url("/v2/domain/{}/config/{}", domain_id, key)
        return await self._put_text(url, {}, value)

    async def delete_domain_config(self, domain_id: int, key: str) -> None:
        """Remove one configuration value of a domain."""
        url = self._build_url("/v2/domain/{}/config/{}", domain_id, key)
        await self._delete(url, {})

    async def list_domain_billing(
        self, domain_id: int, limit: int = 10
    ) -> List[BillingChange]:
        """Fetch the newest billing changes of a domain, newest first."""
        url = self._build_url("/v2/domain/{}/billing", domain_id)
        return await self._get(url, {"limit": str(limit)}, List[BillingChange])

    async def list_domain_events(
        self, domain_id: int, filter: str = EMPTY_FILTER, limit: int = 10
    ) -> List[DomainEvent]:
        """Fetch entries of a domain's event log matching the filter."""
        params: Params = filter_params(filter)
        params["limit"] = str(limit)
        url = self._build_url("/v2/domain/{}/events", domain_id)
        return await self._get(url, params, List[DomainEvent])

    async def create_domain_event(self, domain_id: int, event: DomainEvent) -> None:
        """Append an entry to a domain's event log."""
        url = self._build_url("/v2/domain/{}/events", domain_id)
        logger.debug(f"Appending event {event.event!r} to domain {domain_id}")
        await self._post_no_content(url, {}, event)
