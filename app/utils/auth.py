import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import jwt

from app.core.config import settings

# --- JWT Token Management ---

def build_staff_claims(staff, clinic_id: Optional[int] = None) -> Dict[str, Any]:
    """Claims carried by every staff token; ``clinic_id`` selects the tenant."""
    claims = {
        "sub": str(staff.id),
        "email": staff.email,
        "name": staff.full_name,
        "role": staff.role,
        "jti": uuid.uuid4().hex,
    }
    if clinic_id is not None:
        claims["clinic_id"] = clinic_id
    return claims


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> Dict[str, Any]:
    """Creates a new JWT access token and returns it along with its expiry."""
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = datetime.now(timezone.utc) + expires_delta

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return {"access_token": encoded_jwt, "expires_in": int(expires_delta.total_seconds())}


def decode_access_token(token: str) -> Dict[str, Any]:
    """Raises ``jose.JWTError`` when the token is invalid or expired."""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
