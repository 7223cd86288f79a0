"""Auth resolver port: turns a bearer token into a principal.

Token issuance and verification live outside the storefront; the API only
needs to know who is calling and whether they are an admin.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class Role(Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: Role = Role.CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class AuthResolver(ABC):
    @abstractmethod
    def resolve(self, token: str) -> Principal:
        """Return the principal for ``token``.

        Raises:
            Unauthenticated: the token is unknown, expired or malformed.
        """
        ...
