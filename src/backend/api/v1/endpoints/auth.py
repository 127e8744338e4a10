"""
Authentication endpoints: public registration and login.

Both return {token, user}; the token is a bearer JWT used on every other
route.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserRead
from api.services.auth_service import AuthService
from core.database import get_session

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_session),
):
    """
    Register a resident or technician account.

    Args:
        payload: email, password, firstName, lastName, role,
            phoneNumber?, apartmentNumber?
        db: Database session

    Returns:
        AuthResponse: Access token and the created user

    Raises:
        HTTPException 400: Validation failed (including role admin)
        HTTPException 409: Email already registered

    **Permissions:** Public
    """
    user, token = await AuthService(db).register(payload)
    return AuthResponse(token=token, user=UserRead.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_session),
):
    """
    Exchange email and password for an access token.

    Raises:
        HTTPException 401: Invalid credentials (same for unknown email and wrong password)

    **Permissions:** Public
    """
    client_ip = request.client.host if request.client else None
    user, token = await AuthService(db).login(payload, client_ip=client_ip)
    return AuthResponse(token=token, user=UserRead.model_validate(user))
