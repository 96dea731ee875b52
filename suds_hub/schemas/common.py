from pydantic import BaseModel

from ..models.domain import Direction


class MoveRequest(BaseModel):
    direction: Direction
