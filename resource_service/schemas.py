from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator, model_validator
from typing import Any, Dict, List, Optional, Union


def is_plain_id(text: str) -> bool:
    """Only ASCII digits: rejects "+1", "0_1" and " 1", which int() would accept."""
    return text.isascii() and text.isdigit()


class Resource(BaseModel):
    id: int
    type: str
    payload: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class EditRequest(BaseModel):
    # StrictInt: JSON true or "1" is not an id
    id: StrictInt
    payload: Dict[str, Any]


class RemoveRequest(BaseModel):
    """
    Accepts {"id": 1}, {"ids": [1, 2]} or {"ids": "1,2"}.
    """
    id: Optional[StrictInt] = None
    ids: Optional[Union[List[StrictInt], str]] = None

    @field_validator("ids")
    @classmethod
    def split_ids(cls, value):
        if isinstance(value, str):
            parts = [part.strip() for part in value.split(",") if part.strip()]
            if not all(is_plain_id(part) for part in parts):
                raise ValueError("ids must be integers separated by commas")
            return [int(part) for part in parts]
        return value

    @model_validator(mode="after")
    def check_ids_given(self) -> "RemoveRequest":
        if self.id is None and not self.ids:
            raise ValueError("either 'id' or 'ids' is required")
        return self

    def all_ids(self) -> List[int]:
        ids = list(self.ids or [])
        if self.id is not None:
            ids.insert(0, self.id)
        # keep order, drop repeats
        return list(dict.fromkeys(ids))


class RemoveResponse(BaseModel):
    detail: str
    ids: List[int]


class RouteInfo(BaseModel):
    method: str
    path: str
    permission: Optional[str] = None
    name: Optional[str] = None
    description: str = ""
