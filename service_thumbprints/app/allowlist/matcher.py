"""
Allow-list matching of certificates against a verified claim set.
"""

from pathlib import Path
from typing import Union

from codesign_shared.errors import IOFailure
from codesign_shared.logging import get_logger
from ..digest.fingerprints import CertificateFingerprint, fingerprint_certificate
from ..models import (
    ClaimSet,
    FingerprintSchema,
    MatchReason,
    MatchResult,
)

PathLike = Union[str, Path]


def read_certificate(cert_path: PathLike) -> bytes:
    """Read the raw encoded bytes of a certificate file."""
    try:
        return Path(cert_path).read_bytes()
    except OSError as e:
        raise IOFailure(str(cert_path), "Certificate could not be read", {"error": str(e)}) from e


def compute_x5t_from_certificate_file(cert_path: PathLike) -> str:
    return fingerprint_certificate(read_certificate(cert_path)).x5t


def compute_x5t_s256_from_certificate_file(cert_path: PathLike) -> str:
    return fingerprint_certificate(read_certificate(cert_path)).x5t_s256


def compute_sha1_thumbprint_hex_from_certificate_file(cert_path: PathLike) -> str:
    return fingerprint_certificate(read_certificate(cert_path)).sha1_hex


class AllowListMatcher:
    """Decides whether a certificate is listed in a claim set.

    The entry list is treated as a set: the decision never depends on
    entry order. Dual-digest entries only match when both digests match.
    """

    def __init__(self):
        self.logger = get_logger("thumbprints.allowlist")

    def evaluate(self, cert_path: PathLike, claims: ClaimSet) -> MatchResult:
        fingerprint = fingerprint_certificate(read_certificate(cert_path))
        schema = claims.fingerprint_schema

        if schema is None:
            reason = MatchReason.EMPTY_ALLOW_LIST
        elif schema is FingerprintSchema.DUAL_DIGEST:
            reason = self._match_dual(fingerprint, claims, cert_path)
        else:
            reason = self._match_single(fingerprint, claims)

        result = MatchResult(
            allowed=reason is MatchReason.MATCHED,
            reason=reason,
            certificate_path=str(cert_path),
            x5t=fingerprint.x5t,
            x5t_s256=fingerprint.x5t_s256,
        )

        self.logger.info(
            "Certificate evaluated",
            certificate=str(cert_path),
            allowed=result.allowed,
            reason=reason.value,
            bundle_version=claims.version
        )
        return result

    def is_allowed(self, cert_path: PathLike, claims: ClaimSet) -> bool:
        return self.evaluate(cert_path, claims).allowed

    def _match_dual(self, fingerprint: CertificateFingerprint, claims: ClaimSet, cert_path: PathLike) -> MatchReason:
        x5t = fingerprint.x5t
        x5t_s256 = fingerprint.x5t_s256
        partial = False

        for entry in claims.thumbprints:
            sha1_matches = entry.x5t == x5t
            sha256_matches = entry.x5t_s256 == x5t_s256
            if sha1_matches and sha256_matches:
                return MatchReason.MATCHED
            if sha1_matches or sha256_matches:
                partial = True

        if partial:
            # One digest agrees and the other does not: a corrupted entry or
            # a collision, never an allow
            self.logger.warning(
                "Partial thumbprint match",
                certificate=str(cert_path),
                x5t=x5t,
                x5t_s256=x5t_s256,
                bundle_version=claims.version
            )
            return MatchReason.PARTIAL_MATCH

        return MatchReason.NO_MATCH

    def _match_single(self, fingerprint: CertificateFingerprint, claims: ClaimSet) -> MatchReason:
        sha1_hex = fingerprint.sha1_hex
        for entry in claims.thumbprints:
            if entry.thumbprint == sha1_hex:
                return MatchReason.MATCHED
        return MatchReason.NO_MATCH


def is_certificate_allowed(cert_path: PathLike, claims: ClaimSet) -> bool:
    """Return True when the certificate at ``cert_path`` is on the allow-list."""
    return AllowListMatcher().is_allowed(cert_path, claims)
