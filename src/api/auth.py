"""访问令牌校验."""

from typing import Optional

from fastapi import Header, Query, Request

from .errors import AuthError

AUTH_SCHEMES = ("Bearer", "DeepL-Auth-Key")


def token_from_header(authorization: Optional[str]) -> str:
    """Extract the token from an Authorization header value.

    Accepts a bare token or ``<scheme> <token>`` with one of the known
    schemes. Anything else counts as no token at all.
    """
    if not authorization:
        return ""
    parts = authorization.split(" ")
    if len(parts) == 1:
        return parts[0]
    if len(parts) == 2 and parts[0] in AUTH_SCHEMES:
        return parts[1]
    return ""


def is_authorized(
    expected: str, authorization: Optional[str], query_token: Optional[str]
) -> bool:
    if not expected:
        return True
    return token_from_header(authorization) == expected or query_token == expected


def verify_token(
    request: Request,
    token: Optional[str] = Query(default=None),
    authorization: Optional[str] = Header(default=None),
):
    settings = request.app.state.settings
    if not is_authorized(settings.token, authorization, token):
        raise AuthError()
    return True
