"""
Shared fixtures for thumbprint bundle tests.
"""

import pytest

from codesign_shared.test_helpers import BundleTokenGenerator, CertificateFactory, KeyFactory


@pytest.fixture(scope="session")
def signing_keys():
    """RSA key pair the test bundles are signed with."""
    return KeyFactory.create_rsa_key_pair()


@pytest.fixture(scope="session")
def foreign_signing_keys():
    """A second, unrelated RSA key pair."""
    return KeyFactory.create_rsa_key_pair()


@pytest.fixture
def token_generator(signing_keys):
    return BundleTokenGenerator(signing_keys.private_pem)


@pytest.fixture
def certificates(tmp_path):
    """Two code-signing certificates, newest first."""
    return [
        CertificateFactory.write_certificate(tmp_path, "CodeSign_2025-2028.crt"),
        CertificateFactory.write_certificate(tmp_path, "CodeSign_2023-2026.crt"),
    ]


@pytest.fixture
def unrelated_certificate(tmp_path):
    return CertificateFactory.write_certificate(tmp_path, "Unrelated.crt")
