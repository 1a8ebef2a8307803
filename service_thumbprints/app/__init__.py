"""
Thumbprint bundle service package.

Decides whether a code-signing certificate is currently trusted by checking
its fingerprint against a signed allow-list (the "thumbprint bundle"):

- app.validation: Bundle verification (RS256 signature, claim policy).
- app.digest: Certificate digests and fingerprint encoding conversions.
- app.allowlist: Matching certificates against a verified claim set.
- app.models: Claim set and decision models.
- app.main: Command line entry point.

Design notes:
- Package import has no side effects; files are read only in the
  functions that take a path.
- Use the codesign_shared/ utilities for logging, config and errors.
- Nothing is cached between calls; every decision stands alone.
"""
