"""
Certificate digests and fingerprint encoding conversions.

Two textual conventions are in use for the same digest bytes:

- base64url without padding, as in the JOSE ``x5t`` / ``x5t#S256`` headers
- uppercase hex without separators, as in Windows certificate thumbprints

Every conversion goes through the raw digest bytes, so converting in one
direction and back reproduces the original string exactly.
"""

import base64
import binascii
import hashlib
import re
from dataclasses import dataclass
from enum import Enum

from codesign_shared.errors import EncodingError

_BASE64URL_ALPHABET = re.compile(r"[A-Za-z0-9_-]*")
_HEX_ALPHABET = re.compile(r"[0-9A-F]*")


class DigestAlgorithm(str, Enum):
    """Supported certificate digest algorithms."""
    SHA1 = "sha1"
    SHA256 = "sha256"

    @property
    def digest_size(self) -> int:
        return _HASHES[self]().digest_size


_HASHES = {
    DigestAlgorithm.SHA1: hashlib.sha1,
    DigestAlgorithm.SHA256: hashlib.sha256,
}


def digest(data: bytes, algorithm: DigestAlgorithm) -> bytes:
    """Return the raw digest of ``data``."""
    return _HASHES[DigestAlgorithm(algorithm)](data).digest()


def base64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def base64url_decode(value: str) -> bytes:
    """Decode unpadded base64url.

    Rejects padding, characters outside the URL-safe alphabet, impossible
    lengths, and encodings whose unused trailing bits are not zero. The last
    rule keeps decoding one-to-one: two different strings never decode to
    the same bytes.
    """
    if not isinstance(value, str) or not _BASE64URL_ALPHABET.fullmatch(value):
        raise EncodingError("Invalid base64url alphabet", details={"value": str(value)})

    if len(value) % 4 == 1:
        raise EncodingError("Invalid base64url length", details={"value": value, "length": len(value)})

    try:
        raw = base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))
    except binascii.Error as e:
        raise EncodingError("Invalid base64url value", details={"value": value, "error": str(e)}) from e

    if base64url_encode(raw) != value:
        raise EncodingError("Non-canonical base64url value", details={"value": value})

    return raw


def hex_encode_upper(data: bytes) -> str:
    return data.hex().upper()


def normalize_hex(value: str) -> str:
    """Strip ``:`` and space separators and upper-case a hex thumbprint."""
    return value.replace(":", "").replace(" ", "").upper()


def hex_decode(value: str) -> bytes:
    """Decode a hex thumbprint, tolerating ``:``/space separators and lowercase."""
    if not isinstance(value, str):
        raise EncodingError("Invalid hex value", details={"value": str(value)})

    normalized = normalize_hex(value)
    if not _HEX_ALPHABET.fullmatch(normalized):
        raise EncodingError("Invalid hex characters", details={"value": value})
    if len(normalized) % 2:
        raise EncodingError("Odd-length hex value", details={"value": value, "length": len(normalized)})

    return bytes.fromhex(normalized)


def require_digest_size(raw: bytes, algorithm: DigestAlgorithm, value: str) -> bytes:
    if len(raw) != algorithm.digest_size:
        raise EncodingError(
            f"Expected a {algorithm.digest_size}-byte {algorithm.value} digest",
            details={"value": value, "length": len(raw)}
        )
    return raw


def x5t_to_windows_thumbprint_hex(x5t: str) -> str:
    """Convert a base64url SHA-1 ``x5t`` into a Windows thumbprint."""
    raw = require_digest_size(base64url_decode(x5t), DigestAlgorithm.SHA1, x5t)
    return hex_encode_upper(raw)


def windows_thumbprint_hex_to_x5t(hex_value: str) -> str:
    """Convert a Windows SHA-1 thumbprint into a base64url ``x5t``."""
    raw = require_digest_size(hex_decode(hex_value), DigestAlgorithm.SHA1, hex_value)
    return base64url_encode(raw)


def x5t_s256_to_hex(x5t_s256: str) -> str:
    """Convert a base64url ``x5t#S256`` into uppercase hex."""
    raw = require_digest_size(base64url_decode(x5t_s256), DigestAlgorithm.SHA256, x5t_s256)
    return hex_encode_upper(raw)


def hex_to_x5t_s256(hex_value: str) -> str:
    """Convert an uppercase or separated SHA-256 hex thumbprint into ``x5t#S256``."""
    raw = require_digest_size(hex_decode(hex_value), DigestAlgorithm.SHA256, hex_value)
    return base64url_encode(raw)


@dataclass(frozen=True)
class CertificateFingerprint:
    """SHA-1 and SHA-256 digests of a certificate's raw encoded bytes."""
    sha1: bytes
    sha256: bytes

    @property
    def x5t(self) -> str:
        return base64url_encode(self.sha1)

    @property
    def x5t_s256(self) -> str:
        return base64url_encode(self.sha256)

    @property
    def sha1_hex(self) -> str:
        return hex_encode_upper(self.sha1)

    @property
    def sha256_hex(self) -> str:
        return hex_encode_upper(self.sha256)


def fingerprint_certificate(cert_bytes: bytes) -> CertificateFingerprint:
    """Fingerprint raw certificate bytes; the certificate itself is never parsed."""
    return CertificateFingerprint(
        sha1=digest(cert_bytes, DigestAlgorithm.SHA1),
        sha256=digest(cert_bytes, DigestAlgorithm.SHA256),
    )
