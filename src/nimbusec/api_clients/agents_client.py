"""Server Agent API Client for nimbusec.

Agents are downloadable binaries, not server-side entities, so only
search and download are offered.
"""

import logging
from typing import List

from ..models import Agent
from .base_client import EMPTY_FILTER, NimbusecAPIClient, filter_params

logger = logging.getLogger(__name__)


class AgentsAPIClient(NimbusecAPIClient):
    """Client for server agent downloads."""

    async def find_agents(self, filter: str = EMPTY_FILTER) -> List[Agent]:
        """List the available agent builds matching the filter."""
        url = self._build_url("/v2/agent/download")
        return await self._get(url, filter_params(filter), List[Agent])

    async def download_agent(self, agent: Agent) -> bytes:
        """Download the binary of an agent build."""
        url = self._build_url("/v2/agent/download/{}", agent.filename)
        data = await self._get_bytes(url, {})
        logger.debug(f"Downloaded {agent.filename} ({len(data)} bytes)")
        return data
