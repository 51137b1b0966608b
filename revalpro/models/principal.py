from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated nurse extracted from a validated JWT.

    ``user_id`` scopes every record, reminder and export the request touches.
    """

    user_id: str
    roles: frozenset[str]
