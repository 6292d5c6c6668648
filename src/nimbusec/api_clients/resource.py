"""Generic CRUD operations over one nimbusec resource collection.

Every resource of the API follows the same conventions: a collection path
accepting POST (create, with an optional upsert flag) and GET (search with
an optional filter), and an item path below it accepting GET, PUT and
DELETE. ResourceCollection implements those conventions once; the
resource clients derive their public methods from it.
"""

from typing import Generic, List, Optional, Type, TypeVar, Union

from ..exceptions import AmbiguousMatchError, NotFoundError
from ..models import NimbusecModel
from .base_client import EMPTY_FILTER, NimbusecAPIClient, Params, filter_params

ModelT = TypeVar("ModelT", bound=NimbusecModel)

Identifier = Union[int, str]


class ResourceCollection(Generic[ModelT]):
    """CRUD operations for one resource collection."""

    def __init__(
        self,
        client: NimbusecAPIClient,
        path: str,
        model: Type[ModelT],
        noun: str,
    ):
        """Initialize the collection.

        Args:
            client: Client used to issue the requests
            path: Collection path relative to the API base, already formatted
            model: Model the collection's entities decode into
            noun: Plural name of the entities, used in error messages
        """
        self.client = client
        self.path = path
        self.model = model
        self.noun = noun

    def _collection_url(self) -> str:
        return self.client._build_url(self.path)

    def _item_url(self, item_id: Identifier) -> str:
        return self.client._build_url(self.path + "/{}", item_id)

    async def create(self, item: ModelT, upsert: Optional[bool] = None) -> ModelT:
        """Create an entity.

        Args:
            item: Entity to create
            upsert: None fails on duplicates, True updates the existing
                entity, False returns the existing entity unchanged
        """
        params: Params = {}
        if upsert is not None:
            params["upsert"] = "true" if upsert else "false"
        return await self.client._post(
            self._collection_url(), params, item, self.model
        )

    async def get(self, item_id: Identifier) -> ModelT:
        """Fetch one entity by its id."""
        return await self.client._get(self._item_url(item_id), {}, self.model)

    async def find(self, filter: str = EMPTY_FILTER) -> List[ModelT]:
        """Search for entities matching the filter."""
        return await self.client._get(
            self._collection_url(), filter_params(filter), List[self.model]  # type: ignore[name-defined]
        )

    async def get_one(self, field: str, value: str) -> ModelT:
        """Fetch the single entity whose field equals value.

        Raises:
            NotFoundError: If no entity matches
            AmbiguousMatchError: If more than one entity matches
        """
        matches = await self.find(f'{field} eq "{value}"')
        if not matches:
            raise NotFoundError(f"{field} {value!r} did not match any {self.noun}")
        if len(matches) > 1:
            raise AmbiguousMatchError(
                f"{field} {value!r} matched {len(matches)} {self.noun}"
            )
        return matches[0]

    async def update(self, item_id: Identifier, item: ModelT) -> ModelT:
        """Replace an entity with the given state."""
        return await self.client._put(self._item_url(item_id), {}, item, self.model)

    async def delete(self, item_id: Identifier, params: Optional[Params] = None) -> None:
        """Delete an entity."""
        await self.client._delete(self._item_url(item_id), params or {})


def identify(item: Union[NimbusecModel, Identifier]) -> Identifier:
    """Return the id of an entity, accepting either the entity or its id."""
    if isinstance(item, NimbusecModel):
        item_id = getattr(item, "id", None)
        if item_id is None:
            raise ValueError(f"{type(item).__name__} has no id")
        return item_id  # type: ignore[no-any-return]
    return item
