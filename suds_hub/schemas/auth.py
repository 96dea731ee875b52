from pydantic import BaseModel


class AnonymousSessionResponse(BaseModel):
    actor_id: str
    access_token: str
    token_type: str = "bearer"
    expires_in: int
