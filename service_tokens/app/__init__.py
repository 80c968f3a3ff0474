"""
Token Service package.

This package exposes the FastAPI application for issuing, validating and
revoking session-backed tokens:

- app.main: Application entrypoint that wires routes and lifecycle.
- app.tokens: Claim sets, signing, issuance, validation and revocation.
- app.sessions: Session store interface plus Redis and in-memory backends.
- app.domain: Bearer authentication gate for protected routes.

Design notes:
- Keep the package import side-effects minimal; module import must not
  perform network calls. All IO happens in route handlers or the
  explicit startup hook.
- Use the shared/ utilities for logging, metrics, config, and errors.
- Tokens verify on their own; the session store decides whether they are
  still live.
"""
