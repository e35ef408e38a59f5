"""Authentication dependencies — resolve the caller principal from a bearer token.

Roles (admin, participant, expert) are not carried in the token; services
ask the access gate, which reads them from ledger state on every call.
"""

from __future__ import annotations

from fastapi import HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.auth.jwt import AuthError, principal_from_token

bearer_scheme = HTTPBearer(auto_error=False)


def _raise_auth(exc: AuthError) -> HTTPException:
	return HTTPException(
		status_code=exc.status_code,
		detail={"error": exc.code, "message": exc.detail},
	)


def _resolve_principal(credentials: HTTPAuthorizationCredentials | None) -> str:
	if credentials is None or credentials.scheme.lower() != "bearer":
		raise _raise_auth(AuthError(code="auth_required", detail="Bearer token is required"))
	try:
		return principal_from_token(credentials.credentials)
	except AuthError as exc:
		raise _raise_auth(exc) from exc


async def get_caller(request: Request) -> str:
	"""FastAPI dependency returning the authenticated caller principal."""
	credentials = await bearer_scheme(request)
	return _resolve_principal(credentials)


def extract_caller_hint(request: Request) -> str | None:
	"""Best-effort principal for middleware keys; never raises."""
	auth_header = request.headers.get("authorization", "")
	scheme, _, token = auth_header.partition(" ")
	if scheme.lower() != "bearer" or not token.strip():
		return None
	try:
		return principal_from_token(token.strip())
	except AuthError:
		return None
