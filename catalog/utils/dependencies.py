from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
from uuid import UUID
from catalog.utils.security import decode_token

# Identity comes from an already-issued access token; the catalog only needs the user id
security = HTTPBearer(auto_error=False)


def _user_id_from_token(token: str) -> UUID:
    payload = decode_token(token)
    if payload is None or payload.get("type") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    try:
        return UUID(str(payload.get("user_id")))
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


# Acting user for public reads: None for anonymous callers
async def get_optional_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[UUID]:
    if credentials is None:
        return None
    return _user_id_from_token(credentials.credentials)


# Acting user for writes: a valid token is required
async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> UUID:
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return _user_id_from_token(credentials.credentials)
