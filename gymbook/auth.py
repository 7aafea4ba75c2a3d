import logging
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db
from .models import Member
from .security_utils import verify_jwt_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Member:
    """Get current member from the bearer token"""

    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    payload = verify_jwt_token(credentials.credentials)
    if not payload:
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired token. Please sign in again.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    subject = payload.get("sub")
    try:
        member_id = int(subject)
    except (TypeError, ValueError):
        logger.error(f"Token missing member ID claim. Available claims: {list(payload.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims") from None

    member = db.query(Member).filter(Member.id == member_id).first()
    if not member or not member.is_active:
        logger.warning(f"Token presented for unknown or inactive member {member_id}")
        raise HTTPException(status_code=401, detail="Authentication failed")

    logger.debug(f"Member authenticated: {member.email}")
    return member


def is_in_role(user: Member, *roles: str) -> bool:
    return user.role in roles


def require_roles(*roles: str):
    """Dependency factory that lets only the given roles through"""

    async def checker(user: Member = Depends(get_current_user)) -> Member:
        if not is_in_role(user, *roles):
            logger.warning(f"Member {user.id} with role {user.role} denied; requires {roles}")
            raise HTTPException(status_code=403, detail="You do not have permission to do this.")
        return user

    return checker
