from typing import Any, Dict

from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from studylib.utils.jwt_verification import decode_token

security = HTTPBearer()


async def verify_token(authorization_credentials: HTTPAuthorizationCredentials = Security(security)) -> Dict[str, Any]:
    """Verify the bearer token and return its claims"""
    return decode_token(authorization_credentials.credentials)


async def get_owner_id(current_user: Dict[str, Any] = Depends(verify_token)) -> str:
    """Library owner of the request: the token subject"""
    return current_user["sub"]
