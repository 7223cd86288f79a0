"""In-memory auth resolver backed by a token table."""

from storefront.auth.port import AuthResolver, Principal, Role
from storefront.exceptions import Unauthenticated


class FakeAuthResolver(AuthResolver):
    def __init__(self):
        self.tokens: dict[str, Principal] = {}

    def register(self, token: str, user_id: str, role: Role | str = Role.CUSTOMER) -> Principal:
        principal = Principal(user_id=str(user_id), role=Role(role))
        self.tokens[token] = principal
        return principal

    def resolve(self, token: str) -> Principal:
        principal = self.tokens.get(token)
        if principal is None:
            raise Unauthenticated({"auth": ["Invalid or expired token"]})
        return principal

    def reset(self):
        self.tokens.clear()
