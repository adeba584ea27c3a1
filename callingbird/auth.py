import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import ADMIN_JWT_SECRET
from .security_utils import verify_jwt_token

logger = logging.getLogger(__name__)

security = HTTPBearer()


async def get_current_company_id(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> int:
    """Resolve the tenant id from the bearer token"""
    payload = verify_jwt_token(credentials.credentials)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    company_id = payload.get("companyId")
    try:
        return int(company_id)
    except (TypeError, ValueError):
        logger.warning("❌ Token without a valid companyId claim")
        raise HTTPException(status_code=401, detail="Invalid token payload") from None


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict:
    """Require a back-office token signed with the admin secret"""
    payload = verify_jwt_token(credentials.credentials, secret=ADMIN_JWT_SECRET)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    if payload.get("role") != "admin":
        logger.warning(f"⚠️ Non-admin token used on admin route: sub={payload.get('sub')}")
        raise HTTPException(status_code=403, detail="Admin access required")
    return payload
