from fastapi import APIRouter, Depends, status
from src.api.dependencies import get_auth_service
from src.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from src.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, svc: AuthService = Depends(get_auth_service)):
    return await svc.login(body)


@router.post(
    "/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED
)
async def register(
    body: RegisterRequest, svc: AuthService = Depends(get_auth_service)
):
    return await svc.register(body)
