from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

from core.config import settings

ALGORITHM = "HS256"


def create_access_token(
    data: Dict[str, Any],
    user_type: str = "user",
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a signed access token. `data` must carry the account id under "sub".
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({
        "exp": expire,
        "user_type": user_type,
        "iat": now
    })
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Verify a token and return its payload if valid and unexpired, else None.
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
