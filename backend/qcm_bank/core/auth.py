from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import structlog
from qcm_bank.core.config import settings

logger = structlog.get_logger()
security = HTTPBearer(auto_error=False)


class SimpleAuth:
    """Simple password-based authentication for question bank admins"""

    @staticmethod
    def verify_admin_password(password: str) -> bool:
        """Verify admin password; an unset password never matches"""
        if not settings.ADMIN_PASSWORD:
            return False
        return password == settings.ADMIN_PASSWORD


async def get_current_admin(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)):
    """Dependency to verify admin authentication"""

    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # For simple auth, the bearer token is the password
    if not SimpleAuth.verify_admin_password(credentials.credentials):
        logger.warning("Rejected admin token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return {"role": "admin", "authenticated": True}


# Alias for clear naming at route level
require_admin_auth = get_current_admin
