"""Auth resolver registry.

The fake token-table resolver is installed by default; deployments replace
it with :func:`set_resolver`.
"""

from storefront.auth.port import AuthResolver, Principal, Role

_resolver: AuthResolver | None = None


def get_resolver() -> AuthResolver:
    global _resolver
    if _resolver is None:
        from storefront.auth.fake_resolver import FakeAuthResolver

        _resolver = FakeAuthResolver()
    return _resolver


def set_resolver(resolver: AuthResolver) -> None:
    global _resolver
    _resolver = resolver


def reset_resolver() -> None:
    global _resolver
    _resolver = None


__all__ = ["AuthResolver", "Principal", "Role", "get_resolver", "reset_resolver", "set_resolver"]
