"""
monitor_gateway.auth.models

The authenticated caller.

Responsibilities:
- Define `User`, the identity every backend call and query is scoped by.
- Render a user as token claims (the inverse of `auth.jwt.user_from_claims`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class User:
    id: str
    customer_id: str
    email: str = ""
    admin: bool = False

    def claims(self) -> dict[str, Any]:
        return {
            "sub": self.id,
            "customer_id": self.customer_id,
            "email": self.email,
            "admin": self.admin,
        }


# --- Module Notes -----------------------------------------------------------
# Backends receive the same claims in short-lived tokens minted per call (`backends.http`).
