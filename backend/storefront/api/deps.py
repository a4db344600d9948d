from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from motor.motor_asyncio import AsyncIOMotorDatabase
from bson import ObjectId
from bson.errors import InvalidId
from storefront.core.database import get_database
from storefront.core.security import decode_access_token

# Security scheme. Missing credentials are turned into 401 below.
security = HTTPBearer(auto_error=False)


async def get_db() -> AsyncIOMotorDatabase:
    """Dependency to get database instance."""
    return get_database()


async def _load_user(token: str, db: AsyncIOMotorDatabase) -> Optional[dict]:
    payload = decode_access_token(token)
    if payload is None:
        return None

    user_id = payload.get("sub")
    if user_id is None:
        return None

    try:
        return await db.users.find_one({"_id": ObjectId(user_id)})
    except InvalidId:
        return None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncIOMotorDatabase = Depends(get_db)
) -> dict:
    """
    Dependency to get the current authenticated user.

    Validates the bearer JWT and returns the user document from the database.

    Raises:
        HTTPException: 401 if the token is missing or invalid, or the user is gone
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not credentials:
        raise credentials_exception

    user = await _load_user(credentials.credentials, db)
    if user is None:
        raise credentials_exception

    return user
