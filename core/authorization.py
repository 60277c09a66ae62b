# core/authorization.py
from fastapi import Depends, HTTPException, status
from core.dependencies import get_current_user, CurrentUser
from utils.logger import get_logger

logger = get_logger("Authorization")

TEAM_ROLES = ("owner", "staff")

def check_role(user: CurrentUser, allowed_roles) -> CurrentUser:
    """Raise 403 unless the user's role is one of `allowed_roles`."""
    if user.role not in allowed_roles:
        logger.warning(f"Forbidden: {user.email} has role {user.role}, needs one of {allowed_roles}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden: insufficient role")
    return user

def require_role(*allowed_roles):
    async def _dependency(current_user: CurrentUser = Depends(get_current_user)):
        return check_role(current_user, allowed_roles)
    return _dependency

require_owner = require_role("owner")
require_team = require_role(*TEAM_ROLES)
