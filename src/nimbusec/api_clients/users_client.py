"""Users API Client for nimbusec.

Besides user CRUD, a user of role `user` can be restricted to a subset of
the account's domains; the link operations manage that set.
"""

from typing import List, Union

from ..models import User
from .base_client import EMPTY_FILTER, NimbusecAPIClient
from .resource import ResourceCollection, identify


class UsersAPIClient(NimbusecAPIClient):
    """Client for user management operations."""

    @property
    def _users(self) -> ResourceCollection[User]:
        return ResourceCollection(self, "/v2/user", User, "users")

    async def create_user(self, user: User) -> User:
        """Create the given user. Fails if the login already exists."""
        return await self._users.create(user)

    async def create_or_update_user(self, user: User) -> User:
        """Create the given user, updating the remote one if it already exists."""
        return await self._users.create(user, upsert=True)

    async def create_or_get_user(self, user: User) -> User:
        """Create the given user, returning the remote one if it already exists."""
        return await self._users.create(user, upsert=False)

    async def get_user(self, user_id: int) -> User:
        """Retrieve a user by id."""
        return await self._users.get(user_id)

    async def get_user_by_login(self, login: str) -> User:
        """Retrieve a user by login name.

        Raises:
            NotFoundError: If no user has this login
            AmbiguousMatchError: If more than one user has this login
        """
        return await self._users.get_one("login", login)

    async def find_users(self, filter: str = EMPTY_FILTER) -> List[User]:
        """Search for users matching the filter."""
        return await self._users.find(filter)

    async def update_user(self, user: User) -> User:
        """Replace the remote user with the given state."""
        return await self._users.update(identify(user), user)

    async def delete_user(self, user: Union[User, int]) -> None:
        """Delete a user."""
        await self._users.delete(identify(user))

    async def list_user_domains(self, user: Union[User, int]) -> List[int]:
        """List the ids of the domains a user is allowed to see."""
        url = self._build_url("/v2/user/{}/domains", identify(user))
        return await self._get(url, {}, List[int])

    async def link_user_domain(self, user: Union[User, int], domain_id: int) -> None:
        """Allow a user to see a domain."""
        url = self._build_url("/v2/user/{}/domains", identify(user))
        await self._post_no_content(url, {}, domain_id)

    async def unlink_user_domain(self, user: Union[User, int], domain_id: int) -> None:
        """Revoke a user's access to a domain."""
        url = self._build_url("/v2/user/{}/domains/{}", identify(user), domain_id)
        await self._delete(url, {})

    async def set_user_domains(
        self, user: Union[User, int], domain_ids: List[int]
    ) -> List[int]:
        """Replace the set of domains a user is allowed to see."""
        url = self._build_url("/v2/user/{}/domains", identify(user))
        return await self._put(url, {}, list(domain_ids), List[int])
