from functools import lru_cache
from typing import Any, Dict

import jwt
from jwt import PyJWKClient
from starlette.status import HTTP_401_UNAUTHORIZED

from studylib.configs.settings import settings
from studylib.core.exceptions import AppError


@lru_cache(maxsize=1)
def _jwk_client(jwks_url: str) -> PyJWKClient:
    return PyJWKClient(jwks_url)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and verify a bearer token against the identity provider's JWKS"""
    try:
        signing_key = _jwk_client(settings.AUTH_JWKS_URL).get_signing_key_from_jwt(token)

        payload = jwt.decode(
            token,
            signing_key.key,
            algorithms=['RS256'],
            issuer=settings.AUTH_ISSUER,
            options={"verify_aud": False}
        )

    except jwt.ExpiredSignatureError:
        raise AppError("Token has expired", status_code=HTTP_401_UNAUTHORIZED, code="token_expired")
    except jwt.InvalidTokenError as e:
        raise AppError(f"Invalid token: {str(e)}", status_code=HTTP_401_UNAUTHORIZED, code="invalid_token")
    except Exception as e:
        raise AppError(
            f"Token verification failed: {str(e)}", status_code=HTTP_401_UNAUTHORIZED, code="invalid_token")

    if not payload.get("sub"):
        raise AppError("Token has no subject", status_code=HTTP_401_UNAUTHORIZED, code="invalid_token")
    return payload
