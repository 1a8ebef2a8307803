"""
Unit tests for AllowListMatcher.
"""

import pytest
from structlog.testing import capture_logs

from codesign_shared.errors import IOFailure
from codesign_shared.test_helpers import certificate_entries
from service_thumbprints.app.allowlist.matcher import (
    AllowListMatcher,
    compute_sha1_thumbprint_hex_from_certificate_file,
    compute_x5t_from_certificate_file,
    compute_x5t_s256_from_certificate_file,
    is_certificate_allowed,
)
from service_thumbprints.app.models import ClaimSet, MatchReason
from service_thumbprints.app.validation.bundle_verifier import verify_bundle


class TestAllowListMatcher:
    """Test cases for allow-list decisions."""

    @pytest.fixture
    def matcher(self):
        return AllowListMatcher()

    @pytest.fixture
    def claims_for(self, token_generator):
        def _build(entries):
            return ClaimSet.model_validate(token_generator.build_claims(entries))
        return _build

    def test_both_certificates_are_allowed(self, token_generator, signing_keys, certificates):
        bundle = token_generator.generate_bundle(certificate_entries(certificates))
        claims = verify_bundle(bundle, signing_keys.public_pem)

        for cert in certificates:
            assert is_certificate_allowed(cert.path, claims) is True

    def test_unrelated_certificate_is_blocked(self, matcher, claims_for, certificates, unrelated_certificate):
        claims = claims_for(certificate_entries(certificates))

        result = matcher.evaluate(unrelated_certificate.path, claims)

        assert result.allowed is False
        assert result.reason is MatchReason.NO_MATCH
        assert result.x5t == unrelated_certificate.x5t

    def test_entry_order_does_not_matter(self, matcher, claims_for, certificates):
        forward = claims_for(certificate_entries(certificates))
        reverse = claims_for(list(reversed(certificate_entries(certificates))))

        for cert in certificates:
            assert matcher.is_allowed(cert.path, forward) is True
            assert matcher.is_allowed(cert.path, reverse) is True

    def test_single_digest_certificate_is_allowed(self, matcher, claims_for, certificates):
        claims = claims_for(certificate_entries(certificates, single_digest=True))

        result = matcher.evaluate(certificates[1].path, claims)

        assert result.allowed is True
        assert result.reason is MatchReason.MATCHED

    def test_single_digest_mismatch_is_blocked(self, matcher, claims_for, certificates, unrelated_certificate):
        claims = claims_for(certificate_entries(certificates, single_digest=True))

        assert matcher.is_allowed(unrelated_certificate.path, claims) is False

    def test_partial_match_is_not_allowed(self, claims_for, certificates, unrelated_certificate):
        cert = certificates[0]
        fabricated = {"x5t": cert.x5t, "x5t#S256": unrelated_certificate.x5t_s256}
        claims = claims_for([fabricated])

        with capture_logs() as logs:
            result = AllowListMatcher().evaluate(cert.path, claims)

        assert result.allowed is False
        assert result.reason is MatchReason.PARTIAL_MATCH
        warnings = [entry for entry in logs if entry["event"] == "Partial thumbprint match"]
        assert len(warnings) == 1
        assert warnings[0]["log_level"] == "warning"
        assert warnings[0]["x5t"] == cert.x5t

    def test_sha256_only_partial_match_is_not_allowed(self, matcher, claims_for, certificates, unrelated_certificate):
        cert = certificates[1]
        fabricated = {"x5t": unrelated_certificate.x5t, "x5t#S256": cert.x5t_s256}
        claims = claims_for([fabricated])

        result = matcher.evaluate(cert.path, claims)

        assert result.allowed is False
        assert result.reason is MatchReason.PARTIAL_MATCH

    def test_full_match_wins_over_partial_entry(self, matcher, claims_for, certificates, unrelated_certificate):
        cert = certificates[0]
        fabricated = {"x5t": cert.x5t, "x5t#S256": unrelated_certificate.x5t_s256}
        claims = claims_for([fabricated, cert.dual_digest_entry()])

        assert matcher.evaluate(cert.path, claims).reason is MatchReason.MATCHED

    def test_empty_allow_list_denies_everything(self, token_generator, signing_keys, certificates, unrelated_certificate):
        claims = verify_bundle(token_generator.generate_bundle([]), signing_keys.public_pem)
        matcher = AllowListMatcher()

        for cert in [*certificates, unrelated_certificate]:
            result = matcher.evaluate(cert.path, claims)
            assert result.allowed is False
            assert result.reason is MatchReason.EMPTY_ALLOW_LIST

    def test_missing_certificate_raises_io_failure(self, matcher, claims_for, tmp_path):
        missing = tmp_path / "missing.crt"

        with pytest.raises(IOFailure) as exc_info:
            matcher.is_allowed(missing, claims_for([]))

        assert exc_info.value.path == str(missing)
        assert str(missing) in exc_info.value.message

    def test_directory_raises_io_failure(self, matcher, claims_for, tmp_path):
        with pytest.raises(IOFailure):
            matcher.is_allowed(tmp_path, claims_for([]))

    def test_accepts_string_paths(self, matcher, claims_for, certificates):
        claims = claims_for(certificate_entries(certificates))
        assert matcher.is_allowed(str(certificates[0].path), claims) is True


class TestCertificateFileFingerprints:
    """Test cases for fingerprinting certificate files."""

    def test_computed_fingerprints_match_file_digests(self, certificates):
        for cert in certificates:
            assert compute_x5t_from_certificate_file(cert.path) == cert.x5t
            assert compute_x5t_s256_from_certificate_file(cert.path) == cert.x5t_s256
            assert compute_sha1_thumbprint_hex_from_certificate_file(cert.path) == cert.sha1_hex

    def test_computed_sha1_thumbprints_are_present_in_bundle(self, token_generator, signing_keys, certificates):
        bundle = token_generator.generate_bundle(certificate_entries(certificates, single_digest=True))
        claims = verify_bundle(bundle, signing_keys.public_pem)
        thumbprints = [entry.thumbprint for entry in claims.thumbprints]

        for cert in certificates:
            assert compute_sha1_thumbprint_hex_from_certificate_file(cert.path) in thumbprints

    def test_missing_file_raises_io_failure(self, tmp_path):
        with pytest.raises(IOFailure):
            compute_x5t_from_certificate_file(tmp_path / "missing.crt")
