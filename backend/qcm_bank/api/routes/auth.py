from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel
import structlog

from qcm_bank.core.auth import SimpleAuth

logger = structlog.get_logger()
router = APIRouter()


class LoginRequest(BaseModel):
    password: str


class LoginResponse(BaseModel):
    authenticated: bool
    role: str
    token: str


@router.post("/login", response_model=LoginResponse)
async def admin_login(request: LoginRequest):
    """Authenticate admin with password"""

    logger.info("Admin login attempt")

    if not SimpleAuth.verify_admin_password(request.password):
        logger.warning("Invalid admin login attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin password"
        )

    logger.info("Admin login successful")

    # For simple auth, the password doubles as the bearer token
    return LoginResponse(authenticated=True, role="admin", token=request.password)


@router.post("/logout")
async def admin_logout():
    """Logout admin (simple acknowledgment)"""
    logger.info("Admin logout")
    return {"message": "Logout successful"}


@router.get("/status")
async def auth_status():
    """Get authentication status endpoint"""
    return {"auth_enabled": True, "auth_type": "simple_password"}
