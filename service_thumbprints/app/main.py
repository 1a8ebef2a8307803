"""
Command line interface for the code-signing thumbprint bundle verifier.
"""

from pathlib import Path
from typing import List, NoReturn, Optional

import typer

from codesign_shared.config import get_config
from codesign_shared.errors import EncodingError, IOFailure, ThumbprintBundleError
from codesign_shared.logging import configure_logging, get_logger, set_correlation_id
from .allowlist.matcher import AllowListMatcher, read_certificate
from .digest.fingerprints import (
    fingerprint_certificate,
    hex_to_x5t_s256,
    windows_thumbprint_hex_to_x5t,
    x5t_s256_to_hex,
    x5t_to_windows_thumbprint_hex,
)
from .validation.bundle_verifier import BundleVerifier, read_bundle_file, read_public_key_file, summarize

EXIT_BLOCKED = 1
EXIT_ERROR = 2

app = typer.Typer(help="Verify code-signing certificates against a signed thumbprint bundle")

logger = get_logger("thumbprints.cli")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level (default: CODESIGN_LOG_LEVEL or info)"),
) -> None:
    """Thumbprint bundle CLI entry point."""
    config = get_config(log_level=log_level)
    configure_logging("thumbprints", config.log_level)


def _fail(error: ThumbprintBundleError) -> NoReturn:
    typer.echo(error.to_response().model_dump_json(), err=True)
    raise typer.Exit(code=EXIT_ERROR)


@app.command("check")
def check(
    bundle: Path = typer.Argument(..., help="Signed thumbprint bundle (JWT)"),
    public_key: Path = typer.Argument(..., help="PEM RSA public key the bundle is signed with"),
    certificates: List[Path] = typer.Argument(..., help="Certificate files to check"),
    issuer: Optional[str] = typer.Option(None, "--issuer", help="Expected issuer (default: CODESIGN_ISSUER)"),
    audience: Optional[str] = typer.Option(None, "--audience", help="Expected audience (default: CODESIGN_AUDIENCE)"),
    leeway: Optional[int] = typer.Option(None, "--leeway", min=0, help="Clock skew tolerance in seconds"),
) -> None:
    """
    Verify a thumbprint bundle and report whether each certificate is allowed.

    Exit codes: 0 when every certificate is allowed, 1 when any is blocked,
    2 when the bundle fails verification or a certificate cannot be read.

    Example:
        codesign-thumbprints check bundle/thumbprints.bundle.jwt keys/jwt-public.pem CodeSign_2025.crt
    """
    correlation_id = set_correlation_id()
    config = get_config(issuer=issuer, audience=audience, leeway_seconds=leeway)
    verifier = BundleVerifier.from_config(config)

    try:
        claims = verifier.verify(read_bundle_file(bundle), read_public_key_file(public_key))
    except ThumbprintBundleError as e:
        logger.error("Bundle check aborted", code=e.code, correlation_id=correlation_id)
        _fail(e)

    summary = summarize(claims)
    typer.echo(f"Bundle verified. version={summary.version}, entries={summary.entry_count}")

    matcher = AllowListMatcher()
    blocked = 0
    unreadable = 0
    for cert_path in certificates:
        try:
            allowed = matcher.is_allowed(cert_path, claims)
        except IOFailure as e:
            unreadable += 1
            typer.echo(f"  {cert_path.name}: UNREADABLE ({e.message})")
            continue

        if not allowed:
            blocked += 1
        typer.echo(f"  {cert_path.name}: {'ALLOWED' if allowed else 'BLOCKED'}")

    if unreadable:
        raise typer.Exit(code=EXIT_ERROR)
    if blocked:
        raise typer.Exit(code=EXIT_BLOCKED)


@app.command("fingerprint")
def fingerprint(
    certificate: Path = typer.Argument(..., help="Certificate file"),
) -> None:
    """Print a certificate's fingerprints in every supported encoding."""
    try:
        result = fingerprint_certificate(read_certificate(certificate))
    except IOFailure as e:
        _fail(e)

    typer.echo(f"x5t: {result.x5t}")
    typer.echo(f"x5t#S256: {result.x5t_s256}")
    typer.echo(f"sha1: {result.sha1_hex}")
    typer.echo(f"sha256: {result.sha256_hex}")


@app.command("to-hex")
def to_hex(
    value: str = typer.Argument(..., help="base64url x5t (or x5t#S256 with --sha256)"),
    sha256: bool = typer.Option(False, "--sha256", help="Treat the value as x5t#S256"),
) -> None:
    """Convert a base64url fingerprint into an uppercase hex thumbprint."""
    try:
        typer.echo(x5t_s256_to_hex(value) if sha256 else x5t_to_windows_thumbprint_hex(value))
    except EncodingError as e:
        _fail(e)


@app.command("to-x5t")
def to_x5t(
    value: str = typer.Argument(..., help="Hex thumbprint; ':' and spaces are ignored"),
    sha256: bool = typer.Option(False, "--sha256", help="Treat the value as a SHA-256 thumbprint"),
) -> None:
    """Convert a hex thumbprint into a base64url fingerprint."""
    try:
        typer.echo(hex_to_x5t_s256(value) if sha256 else windows_thumbprint_hex_to_x5t(value))
    except EncodingError as e:
        _fail(e)


if __name__ == "__main__":
    app()
