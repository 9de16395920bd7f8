from typing import Optional

from pydantic import BaseModel, ConfigDict


class PersistableBase(BaseModel):
    """Immutable value whose ``id`` is only set once it has been stored.

    Values are never changed in place: storing one hands back a copy that
    carries the generated id.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def with_id(self, id: int):
        return self.model_copy(update={"id": id})
