"""
Data models for thumbprint bundle claims and allow-list decisions.
"""

from enum import Enum
from typing import Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    field_validator,
    model_validator,
)

from codesign_shared.errors import EncodingError
from .digest.fingerprints import DigestAlgorithm, base64url_decode, require_digest_size


class FingerprintSchema(str, Enum):
    """Shape of the entries carried in a claim set."""
    DUAL_DIGEST = "dual_digest"
    SINGLE_DIGEST = "single_digest"


class MatchReason(str, Enum):
    """Why the allow-list matcher reached its decision."""
    MATCHED = "matched"
    NO_MATCH = "no_match"
    PARTIAL_MATCH = "partial_match"
    EMPTY_ALLOW_LIST = "empty_allow_list"


def _require_base64url_digest(value: str, algorithm: DigestAlgorithm) -> str:
    try:
        require_digest_size(base64url_decode(value), algorithm, value)
    except EncodingError as e:
        raise ValueError(e.message) from e
    return value


class DualDigestEntry(BaseModel):
    """SHA-1 and SHA-256 digests of one certificate, base64url encoded."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    x5t: StrictStr
    x5t_s256: StrictStr = Field(alias="x5t#S256")

    @field_validator("x5t")
    @classmethod
    def _check_x5t(cls, value: str) -> str:
        return _require_base64url_digest(value, DigestAlgorithm.SHA1)

    @field_validator("x5t_s256")
    @classmethod
    def _check_x5t_s256(cls, value: str) -> str:
        return _require_base64url_digest(value, DigestAlgorithm.SHA256)


class SingleDigestEntry(BaseModel):
    """SHA-1 thumbprint of one certificate, 40 uppercase hex characters.

    Bundles carry these entries as bare strings; any other shape is rejected.
    """

    model_config = ConfigDict(frozen=True)

    thumbprint: StrictStr = Field(pattern=r"^[0-9A-F]{40}$")

    @model_validator(mode="before")
    @classmethod
    def _from_bare_string(cls, data):
        if isinstance(data, cls):
            return data
        if not isinstance(data, str):
            raise ValueError("single-digest entries must be bare hex strings")
        return {"thumbprint": data}


FingerprintEntry = Union[DualDigestEntry, SingleDigestEntry]


class ClaimSet(BaseModel):
    """Authenticated payload of a thumbprint bundle.

    Instances are frozen; they are only ever read after verification.
    Entries are ordered newest first by the producer, but matching treats
    them as a set.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    issuer: StrictStr = Field(alias="iss")
    audience: StrictStr = Field(alias="aud")
    issued_at: StrictInt = Field(alias="iat")
    not_before: StrictInt = Field(alias="nbf")
    expires_at: StrictInt = Field(alias="exp")
    version: StrictStr = Field(default="", alias="ver")
    thumbprints: Tuple[FingerprintEntry, ...] = Field(default=())

    @model_validator(mode="after")
    def _check_single_schema(self) -> "ClaimSet":
        if len({type(entry) for entry in self.thumbprints}) > 1:
            raise ValueError("Fingerprint entries mix dual-digest and single-digest shapes")
        return self

    @property
    def fingerprint_schema(self) -> Optional[FingerprintSchema]:
        """Schema of the entries, or None when the allow-list is empty."""
        if not self.thumbprints:
            return None
        if isinstance(self.thumbprints[0], DualDigestEntry):
            return FingerprintSchema.DUAL_DIGEST
        return FingerprintSchema.SINGLE_DIGEST


class VerificationSummary(BaseModel):
    """Observable facts about a verified bundle."""
    version: str
    entry_count: int
    fingerprint_schema: Optional[FingerprintSchema] = None


class MatchResult(BaseModel):
    """Allow-list decision for one certificate."""
    allowed: bool
    reason: MatchReason
    certificate_path: str
    x5t: str = Field(..., description="base64url SHA-1 of the certificate")
    x5t_s256: str = Field(..., description="base64url SHA-256 of the certificate")
