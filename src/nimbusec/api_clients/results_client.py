"""Results API Client for nimbusec. Results are read only."""

from typing import List

from ..models import Result
from .base_client import EMPTY_FILTER, NimbusecAPIClient, path_segment
from .resource import ResourceCollection


class ResultsAPIClient(NimbusecAPIClient):
    """Client for the scan results of a domain."""

    def _results(self, domain_id: int) -> ResourceCollection[Result]:
        path = f"/v2/domain/{path_segment(domain_id)}/result"
        return ResourceCollection(self, path, Result, "results")

    async def get_result(self, domain_id: int, result_id: int) -> Result:
        """Retrieve one result of a domain."""
        return await self._results(domain_id).get(result_id)

    async def find_results(
        self, domain_id: int, filter: str = EMPTY_FILTER
    ) -> List[Result]:
        """Search for results of a domain matching the filter."""
        return await self._results(domain_id).find(filter)
