import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..config import settings


http_bearer = HTTPBearer(auto_error=False)


def new_actor_id() -> str:
    return f"anon-{uuid.uuid4().hex}"


def _create_token(sub: str, ttl_seconds: int, extra: Optional[dict] = None) -> str:
    now = datetime.now(tz=timezone.utc)
    payload = {
        "sub": sub,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=ttl_seconds)).timestamp()),
        "jti": str(uuid.uuid4()),
    }
    if extra:
        payload.update(extra)
    token = jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return token


def create_access_token(actor_id: str) -> str:
    return _create_token(actor_id, settings.jwt_ttl_seconds, extra={"ns": settings.namespace})


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


def actor_from_token(token: str) -> str:
    payload = decode_token(token)
    actor_id = payload.get("sub")
    if not actor_id or payload.get("ns") != settings.namespace:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid subject")
    return str(actor_id)


def get_current_actor(creds: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer)) -> str:
    """Opaque actor id of the caller; only ever stamped into lastUpdatedBy / validatedBy."""
    if creds is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return actor_from_token(creds.credentials)
