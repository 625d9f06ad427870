# farmlog/tables.py

from typing import Callable, Generic, Iterable, Iterator, List, Optional, Type, TypeVar
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, TypeAdapter

T = TypeVar("T", bound=BaseModel)


class EntityTable(Generic[T]):
    """
    An ordered in-memory collection of one entity type, bound to the storage
    key it is persisted under. Identifiers are unique within the table.
    Persistence and notification are the store's job; this class only
    manages the list and its encoding.
    """

    def __init__(self, key: str, model: Type[T]):
        self.key = key
        self.model = model
        self._items: List[T] = []
        self._adapter = TypeAdapter(List[model], config=ConfigDict(ser_json_inf_nan="constants"))

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    @property
    def items(self) -> List[T]:
        return list(self._items)

    def index_of(self, item_id: UUID) -> Optional[int]:
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return index
        return None

    def get(self, item_id: UUID) -> Optional[T]:
        index = self.index_of(item_id)
        return self._items[index] if index is not None else None

    def _stored_copy(self, item: T) -> T:
        # Re-validating gives a detached copy and re-applies field
        # normalisation skipped by model_copy and attribute assignment.
        return self.model.model_validate(item.model_dump())

    def append(self, item: T) -> T:
        stored = self._stored_copy(item)
        if self.index_of(stored.id) is not None:
            stored.id = uuid4()
        self._items.append(stored)
        return stored

    def replace(self, item: T) -> bool:
        index = self.index_of(item.id)
        if index is None:
            return False
        self._items[index] = self._stored_copy(item)
        return True

    def remove(self, item_id: UUID) -> Optional[T]:
        index = self.index_of(item_id)
        if index is None:
            return None
        return self._items.pop(index)

    def remove_at(self, indices: Iterable[int]) -> List[T]:
        # Pop from the back so earlier positions stay valid.
        valid = sorted({i for i in indices if 0 <= i < len(self._items)}, reverse=True)
        removed = [self._items.pop(i) for i in valid]
        removed.reverse()
        return removed

    def remove_where(self, predicate: Callable[[T], bool]) -> List[T]:
        removed = [item for item in self._items if predicate(item)]
        if removed:
            self._items = [item for item in self._items if not predicate(item)]
        return removed

    def clear(self) -> List[T]:
        removed, self._items = self._items, []
        return removed

    def encode(self) -> bytes:
        return self._adapter.dump_json(self._items)

    def decode(self, raw: bytes) -> None:
        """Replaces the contents with the decoded list. Raises pydantic.ValidationError on bad data."""
        items = self._adapter.validate_json(raw)
        seen = set()
        unique = []
        for item in items:
            if item.id in seen:
                continue
            seen.add(item.id)
            unique.append(item)
        self._items = unique
