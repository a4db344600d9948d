import logging
from fastapi import APIRouter, Depends, HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from storefront.api.deps import get_db, get_current_user
from storefront.models.user import User
from storefront.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from storefront.schemas.user import UserResponse
from storefront.core.security import get_password_hash, verify_password, create_access_token

logger = logging.getLogger(__name__)

router = APIRouter()


def _user_response(user: dict) -> UserResponse:
    return UserResponse(
        id=str(user["_id"]),
        name=user.get("name", ""),
        email=user["email"],
        role=user.get("role", "customer"),
        email_verified=user.get("email_verified", False),
        created_at=user["created_at"]
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Register a new customer account and return a bearer token.
    """
    existing_user = await db.users.find_one({"email": request.email})
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    user_data = User(
        name=request.name,
        email=request.email,
        password_hash=get_password_hash(request.password)
    ).model_dump(exclude={"id"})

    result = await db.users.insert_one(user_data)
    user_data["_id"] = result.inserted_id
    logger.info(f"Registered user {result.inserted_id}")

    access_token = create_access_token(data={"sub": str(result.inserted_id)})

    return AuthResponse(
        token=access_token,
        user=_user_response(user_data),
        message="Registration successful"
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    request: LoginRequest,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Login with email and password.

    Returns a JWT access token on success.
    """
    user = await db.users.find_one({"email": request.email})

    if not user or not verify_password(request.password, user["password_hash"]):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    access_token = create_access_token(data={"sub": str(user["_id"])})

    return AuthResponse(
        token=access_token,
        user=_user_response(user),
        message="Login successful"
    )


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: dict = Depends(get_current_user)):
    """
    Get the current authenticated user's information.
    """
    return _user_response(current_user)
