"""Bearer token validation for tokens signed with a shared HS256 secret."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, NoReturn

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError

if TYPE_CHECKING:
    from shared_kernel.auth.observability import JWTValidatorProbe


@dataclass(frozen=True)
class TokenClaims:
    """Identity read from a verified token."""

    sub: str
    email: str | None


class InvalidTokenError(Exception):
    """Raised when a bearer token cannot be trusted."""


class JWTValidator:
    """Verifies signature, expiry and audience, then reads the user id claim.

    Only HS256 is accepted. The header is checked before decoding so a
    token signed with another algorithm is refused with a clear reason.
    """

    ALGORITHM = "HS256"

    def __init__(
        self,
        secret: str,
        audience: str,
        probe: JWTValidatorProbe,
        user_id_claim: str = "sub",
        email_claim: str = "email",
    ):
        self._secret = secret
        self._audience = audience
        self._probe = probe
        self._user_id_claim = user_id_claim
        self._email_claim = email_claim

    def validate_token(self, token: str) -> TokenClaims:
        """Return the claims of a valid token.

        Raises:
            InvalidTokenError: If the token is malformed, expired, signed
                with the wrong key or algorithm, meant for another audience,
                or has no user id
        """
        claims = self._decode(token)

        user_id = claims.get(self._user_id_claim)
        if not user_id:
            self._reject(
                f"missing_{self._user_id_claim}",
                f"Missing required claim: {self._user_id_claim}",
            )

        email = claims.get(self._email_claim)
        self._probe.token_accepted(user_id=str(user_id))
        return TokenClaims(
            sub=str(user_id),
            email=str(email) if email is not None else None,
        )

    def _decode(self, token: str) -> dict[str, Any]:
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            self._reject("malformed", f"Invalid token format: {e}", e)

        if header.get("alg") != self.ALGORITHM:
            self._reject("algorithm", "Invalid token: unexpected algorithm")

        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self.ALGORITHM],
                audience=self._audience,
            )
        except ExpiredSignatureError as e:
            self._reject("expired", "Token has expired", e)
        except JWTClaimsError as e:
            if "audience" in str(e).lower():
                self._reject("audience", "Invalid audience claim", e)
            self._reject("claims", f"Invalid token claims: {e}", e)
        except JWTError as e:
            if "signature" in str(e).lower():
                self._reject("signature", "Invalid token signature", e)
            self._reject("invalid", f"Invalid token: {e}", e)

    def _reject(
        self, reason: str, message: str, cause: Exception | None = None
    ) -> NoReturn:
        self._probe.token_rejected(reason=reason)
        raise InvalidTokenError(message) from cause
