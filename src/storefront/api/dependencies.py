"""FastAPI dependencies resolving the caller from the Authorization header."""

from fastapi import Depends, Header

from storefront.auth import Principal, get_resolver
from storefront.exceptions import Forbidden, Unauthenticated


def current_principal(authorization: str = Header(default="")) -> Principal:
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthenticated()
    return get_resolver().resolve(token.strip())


def require_admin(principal: Principal = Depends(current_principal)) -> Principal:
    if not principal.is_admin:
        raise Forbidden()
    return principal
