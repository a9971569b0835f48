"""Bearer token authentication dependencies."""

from functools import lru_cache

from fastapi.security import HTTPBearer

from infrastructure.settings import get_auth_settings
from shared_kernel.auth import JWTValidator
from shared_kernel.auth.observability import DefaultJWTValidatorProbe

# auto_error is off so a missing header becomes our own 401
bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_jwt_validator() -> JWTValidator:
    """Get cached JWT validator.

    Returns:
        JWTValidator instance configured from auth settings.
    """
    settings = get_auth_settings()
    return JWTValidator(
        secret=settings.jwt_secret.get_secret_value(),
        audience=settings.audience,
        probe=DefaultJWTValidatorProbe(),
        user_id_claim=settings.user_id_claim,
    )
