"""
Bundle validation package.

Verifies thumbprint bundles: RS256-signed JWTs whose payload lists trusted
code-signing certificate fingerprints. Responsibilities:

- Parsing the PEM RSA public key the bundle is signed with.
- Validating token structure, signature, required claims, lifetime,
  issuer and audience.
- Shaping the payload into an immutable claim set.

Key rotation and key distribution are not handled here; the caller
supplies exactly one public key.
"""
