from pydantic import BaseModel, Field, ConfigDict
from typing import Dict, FrozenSet, Any

ANONYMOUS_ID = "anonymous"


class Principal(BaseModel):
    """
    The caller of a request.
    Built from the JWT payload: sub -> id, perms -> permissions.
    """
    id: str = Field(default=ANONYMOUS_ID, alias="sub")
    role: str = "guest"
    permissions: FrozenSet[str] = Field(default_factory=frozenset, alias="perms")

    # Full payload, in case a handler needs a custom claim
    raw_payload: Dict[str, Any] = Field(default_factory=dict, exclude=True)

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )

    @property
    def is_anonymous(self) -> bool:
        return self.id == ANONYMOUS_ID


def anonymous_principal() -> Principal:
    return Principal()
