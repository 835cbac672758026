"""Identity provider token verification.

The back office never issues tokens. It verifies ID tokens minted by the
external identity provider (Firebase Authentication) against the
provider's published signing keys.
"""

from backoffice.app.services.identity.verifier import (
    FirebaseTokenVerifier,
    TokenVerificationError,
    TokenVerifier,
)

__all__ = [
    "FirebaseTokenVerifier",
    "TokenVerificationError",
    "TokenVerifier",
]
