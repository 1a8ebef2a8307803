"""
Thumbprint bundle verification.

A bundle is an RS256-signed JWT whose payload lists the fingerprints of the
code-signing certificates currently trusted. Verification returns the
authenticated, immutable claim set or raises one of the shared error types.
"""

import time
from pathlib import Path
from typing import Callable, List, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwk, jwt
from jose.backends.base import Key
from jose.constants import ALGORITHMS
from jose.exceptions import JOSEError, JWTClaimsError
from pydantic import ValidationError

from codesign_shared.config import DEFAULT_AUDIENCE, DEFAULT_ISSUER, ThumbprintBundleConfig
from codesign_shared.errors import ClaimPolicyError, EncodingError, IOFailure, KeyParseError, SignatureError
from codesign_shared.logging import get_logger
from ..digest.fingerprints import base64url_decode
from ..models import ClaimSet, VerificationSummary

REQUIRED_CLAIMS = ("exp", "nbf", "iat", "iss", "aud")

logger = get_logger("thumbprints.verifier")


def load_public_key(public_key_pem: Union[str, bytes]) -> Key:
    """Parse a PEM encoded RSA public key (SPKI or PKCS#1) for RS256 verification."""
    if isinstance(public_key_pem, bytes):
        try:
            public_key_pem = public_key_pem.decode("ascii")
        except UnicodeDecodeError as e:
            raise KeyParseError("Public key PEM is not ASCII text") from e

    if not isinstance(public_key_pem, str) or not public_key_pem.strip():
        raise KeyParseError("Public key PEM cannot be empty")

    try:
        public_key = serialization.load_pem_public_key(public_key_pem.encode("ascii"))
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyParseError(details={"error": str(e)}) from e

    if not isinstance(public_key, rsa.RSAPublicKey):
        raise KeyParseError(
            "Public key is not an RSA key",
            details={"key_type": type(public_key).__name__}
        )

    try:
        return jwk.construct(public_key_pem, ALGORITHMS.RS256)
    except JOSEError as e:
        raise KeyParseError(details={"error": str(e)}) from e


def _read_text(path: Union[str, Path], what: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise IOFailure(str(path), f"{what} could not be read", {"error": str(e)}) from e
    except UnicodeDecodeError as e:
        raise IOFailure(str(path), f"{what} is not UTF-8 text") from e


def read_bundle_file(path: Union[str, Path]) -> str:
    """Read a bundle token from disk, trimming surrounding whitespace."""
    return _read_text(path, "Bundle").strip()


def read_public_key_file(path: Union[str, Path]) -> str:
    return _read_text(path, "Public key")


def summarize(claims: ClaimSet) -> VerificationSummary:
    return VerificationSummary(
        version=claims.version,
        entry_count=len(claims.thumbprints),
        fingerprint_schema=claims.fingerprint_schema,
    )


class BundleVerifier:
    """Verifies thumbprint bundles against an expected issuer and audience."""

    def __init__(
        self,
        issuer: str = DEFAULT_ISSUER,
        audience: str = DEFAULT_AUDIENCE,
        leeway_seconds: int = 0,
        clock: Callable[[], float] = time.time,
    ):
        if leeway_seconds < 0:
            raise ValueError("leeway_seconds must not be negative")
        self.issuer = issuer
        self.audience = audience
        self.leeway_seconds = leeway_seconds
        self.clock = clock
        self.logger = logger

    @classmethod
    def from_config(cls, config: ThumbprintBundleConfig, clock: Callable[[], float] = time.time) -> "BundleVerifier":
        return cls(
            issuer=config.issuer,
            audience=config.audience,
            leeway_seconds=config.leeway_seconds,
            clock=clock,
        )

    def verify(self, token: str, public_key_pem: Union[str, bytes]) -> ClaimSet:
        """Verify ``token`` and return its claim set.

        Raises:
            KeyParseError: ``public_key_pem`` is not a PEM RSA public key.
            SignatureError: the token is malformed or its signature does not
                verify. No further detail is exposed.
            ClaimPolicyError: a required claim is missing or malformed, the
                token is outside its validity window, or the issuer or
                audience differ from the expected values.
        """
        key = load_public_key(public_key_pem)
        self._check_structure(token)

        try:
            # Required claims, identity and lifetime are enforced below so that
            # every policy failure is reported the same way
            payload = jwt.decode(
                token,
                key,
                algorithms=[ALGORITHMS.RS256],
                options={
                    "verify_signature": True,
                    "verify_exp": False,
                    "verify_nbf": False,
                    "verify_iat": True,
                    "verify_aud": False,
                    "verify_iss": False,
                    "verify_sub": False,
                    "verify_jti": False,
                }
            )
        except JWTClaimsError as e:
            self.logger.warning("Bundle claims rejected", error=str(e))
            raise ClaimPolicyError(str(e), details={"rule": "claims"}) from e
        except JOSEError as e:
            self.logger.warning("Bundle signature verification failed", error=str(e))
            raise SignatureError() from None

        claims = self._validate_claims(payload)
        self._check_identity(claims)
        self._check_lifetime(claims)

        self.logger.info(
            "Bundle verified",
            version=claims.version,
            entries=len(claims.thumbprints),
            schema=claims.fingerprint_schema.value if claims.fingerprint_schema else None
        )
        return claims

    def _check_structure(self, token: str) -> None:
        """Require three canonical base64url segments.

        Canonical decoding matters for the signature segment: a lenient
        decoder ignores the unused low bits of the final character, so a
        changed last character could otherwise still verify.
        """
        if not isinstance(token, str):
            self.logger.warning("Bundle rejected", error="token is not a string")
            raise SignatureError()

        segments = token.split(".")
        if len(segments) != 3 or not all(segments):
            self.logger.warning("Bundle rejected", error="token must have three segments")
            raise SignatureError()

        for segment in segments:
            try:
                base64url_decode(segment)
            except EncodingError as e:
                self.logger.warning("Bundle rejected", error=e.message)
                raise SignatureError() from None

    def _validate_claims(self, payload: dict) -> ClaimSet:
        missing: List[str] = [claim for claim in REQUIRED_CLAIMS if claim not in payload]
        if missing:
            self.logger.warning("Bundle missing required claims", missing=missing)
            raise ClaimPolicyError("Missing required claims", details={"rule": "required", "missing": missing})

        try:
            return ClaimSet.model_validate(payload)
        except ValidationError as e:
            errors = [
                {"loc": [str(part) for part in err["loc"]], "msg": err["msg"]}
                for err in e.errors()
            ]
            self.logger.warning("Bundle claims malformed", errors=errors)
            raise ClaimPolicyError("Malformed bundle claims", details={"rule": "schema", "errors": errors}) from e

    def _check_identity(self, claims: ClaimSet) -> None:
        if claims.issuer != self.issuer:
            raise ClaimPolicyError("Invalid issuer", details={"rule": "issuer", "issuer": claims.issuer})
        if claims.audience != self.audience:
            raise ClaimPolicyError("Invalid audience", details={"rule": "audience", "audience": claims.audience})

    def _check_lifetime(self, claims: ClaimSet) -> None:
        now = int(self.clock())
        leeway = self.leeway_seconds

        if now + leeway < claims.not_before:
            self.logger.warning("Bundle not yet valid", nbf=claims.not_before, now=now)
            raise ClaimPolicyError(
                "Bundle is not yet valid",
                details={"rule": "nbf", "nbf": claims.not_before, "now": now}
            )

        if now - leeway >= claims.expires_at:
            self.logger.warning("Bundle expired", exp=claims.expires_at, now=now)
            raise ClaimPolicyError(
                "Bundle has expired",
                details={"rule": "exp", "exp": claims.expires_at, "now": now}
            )

        if claims.issued_at > now + leeway:
            self.logger.warning("Bundle issued in the future", iat=claims.issued_at, now=now)
            raise ClaimPolicyError(
                "Bundle iat is in the future",
                details={"rule": "iat", "iat": claims.issued_at, "now": now}
            )


def verify_bundle(
    token: str,
    public_key_pem: Union[str, bytes],
    expected_issuer: str = DEFAULT_ISSUER,
    expected_audience: str = DEFAULT_AUDIENCE,
) -> ClaimSet:
    """Verify a bundle with zero clock leeway against the current time."""
    return BundleVerifier(issuer=expected_issuer, audience=expected_audience).verify(token, public_key_pem)
