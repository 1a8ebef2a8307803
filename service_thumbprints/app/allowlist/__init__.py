"""
Allow-list matching package.

Reads a certificate file once, fingerprints its raw bytes, and checks the
fingerprint against the entries of a verified claim set. A certificate
without a matching entry is a plain ``False``; only unreadable files raise.
"""
