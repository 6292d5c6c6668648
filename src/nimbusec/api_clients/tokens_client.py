"""Agent Tokens API Client for nimbusec.

Tokens are the OAuth credentials handed to server agents. They belong to the
account, not to a single domain.
"""

from typing import List, Union

from ..models import Token
from .base_client import EMPTY_FILTER, NimbusecAPIClient
from .resource import ResourceCollection, identify


class TokensAPIClient(NimbusecAPIClient):
    """Client for agent token operations."""

    @property
    def _tokens(self) -> ResourceCollection[Token]:
        return ResourceCollection(self, "/v2/agent/token", Token, "tokens")

    async def create_token(self, token: Token) -> Token:
        """Issue a new agent token."""
        return await self._tokens.create(token)

    async def create_or_update_token(self, token: Token) -> Token:
        return await self._tokens.create(token, upsert=True)

    async def create_or_get_token(self, token: Token) -> Token:
        return await self._tokens.create(token, upsert=False)

    async def get_token(self, token_id: int) -> Token:
        """Fetch a token by its id."""
        return await self._tokens.get(token_id)

    async def get_token_by_name(self, name: str) -> Token:
        """Fetch a token by its name.

        Raises:
            NotFoundError: If no token has this name
            AmbiguousMatchError: If more than one token has this name
        """
        return await self._tokens.get_one("name", name)

    async def find_tokens(self, filter: str = EMPTY_FILTER) -> List[Token]:
        """Search for tokens matching the filter."""
        return await self._tokens.find(filter)

    async def update_token(self, token: Token) -> Token:
        return await self._tokens.update(identify(token), token)

    async def delete_token(self, token: Union[Token, int]) -> None:
        """Revoke a token."""
        await self._tokens.delete(identify(token))
