from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from utils.jwt_handler import decode_access_token
from db.db_operation import mongo_conn
from typing import Optional
from pydantic import BaseModel
from utils.logger import get_logger

logger = get_logger("Dependencies")

# tells fastapi to expect a token in the request header after login
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")

class CurrentUser(BaseModel):
    """Session context handed to handlers; built per request from the token."""
    id: str
    email: str
    full_name: Optional[str] = None
    role: str = "staff"
    token_version: int = 0

async def resolve_user(token: str) -> CurrentUser:
    """
    Decode token, fetch the identity and its role, and ensure token_version matches.
    """
    try:
        payload = decode_access_token(token)
    except ValueError:
        logger.error("JWT Error: Invalid token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    email: str = payload.get("sub")
    tv = payload.get("token_version")
    if email is None:
        logger.debug("Email not found for the current user in token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token: no email found")

    user = await mongo_conn.users_collection.find_one({"email": email})
    if user is None:
        logger.warning(f"User not found for email: {email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    if user.get("token_version", 0) != tv:
        logger.warning(f"Token version mismatch for user: {email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has been revoked")

    user_id = str(user["_id"])
    role_doc = await mongo_conn.user_roles.find_one({"user_id": user_id})
    if role_doc is None:
        logger.warning(f"No role assigned for user: {email}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No role assigned")

    return CurrentUser(
        id=user_id,
        email=user["email"],
        full_name=role_doc.get("full_name") or user.get("full_name"),
        role=role_doc["role"],
        token_version=user.get("token_version", 0)
    )

async def get_current_user(token: str = Depends(oauth2_scheme)) -> CurrentUser:
    current_user = await resolve_user(token)
    logger.info(f"Current user fetched successfully: {current_user.email}")
    return current_user
