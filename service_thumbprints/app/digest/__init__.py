"""
Digest and encoding package.

Pure functions computing certificate digests and converting fingerprints
between the encodings used by different ecosystems:

- base64url without padding (JOSE ``x5t`` / ``x5t#S256``)
- uppercase hex without separators (Windows certificate thumbprints)

No state and no IO live here; reading certificate files is the allow-list
matcher's job.
"""
