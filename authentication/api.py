import logging

from django.contrib.auth import authenticate, get_user_model
from django.db import IntegrityError, transaction
from ninja import Router

from .jwt_auth import create_access_token, jwt_auth
from .schemas import (
    LoginSchema,
    MeResponse,
    MessageResponse,
    RegisterSchema,
    TokenResponse,
)

logger = logging.getLogger(__name__)

User = get_user_model()

router = Router()


@router.post("/register", response={201: TokenResponse, 400: dict})
def register(request, data: RegisterSchema):
    """Register a new user"""
    if User.objects.filter(email=data.email).exists():
        return 400, {"error": "User already exists"}

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=data.email,
                password=data.password,
                first_name=data.first_name,
                last_name=data.last_name,
            )
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        return 400, {"error": "User already exists"}

    logger.info("Registered user %s", user.id)
    return 201, {
        "message": "User created successfully",
        "token": create_access_token(user),
        "token_type": "bearer",
        "user": user,
    }


@router.post("/login", response={200: TokenResponse, 401: dict})
def login(request, data: LoginSchema):
    """Login and get JWT token"""
    # ModelBackend hashes the password even when the email is unknown
    user = authenticate(request, email=data.email, password=data.password)

    if user is None:
        logger.warning("Failed login for %s", data.email)
        return 401, {"error": "Invalid credentials"}

    return {
        "message": "Login successful",
        "token": create_access_token(user),
        "token_type": "bearer",
        "user": user,
    }


@router.get("/me", response={200: MeResponse}, auth=jwt_auth)
def me(request):
    """Return the authenticated user"""
    return {"user": request.auth}


@router.post("/logout", response={200: MessageResponse})
def logout(request):
    """Tokens are stateless; the client drops its copy."""
    return {"message": "Logout successful"}
