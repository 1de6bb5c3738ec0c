from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from clubstats.core.config import settings

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class CurrentMember:
    member_id: str
    role: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role in settings.ADMIN_ROLES


def decode_access_token(token: str) -> dict:
    # Tokens are issued by the external auth service; we only verify them.
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])


def get_current_member(
    creds: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> CurrentMember:
    if creds is None or creds.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        payload = decode_access_token(creds.credentials)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")

    member_id = payload.get("sub")
    if not member_id:
        raise HTTPException(status_code=401, detail="Invalid token")

    return CurrentMember(member_id=str(member_id), role=payload.get("role"))


def require_admin(member: CurrentMember = Depends(get_current_member)) -> CurrentMember:
    if not member.is_admin:
        raise HTTPException(status_code=403, detail="Club admin privileges required")
    return member
