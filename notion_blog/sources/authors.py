from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Protocol


@dataclass(frozen=True)
class AuthorProfile:
    display_name: str


class AuthorResolver(Protocol):
    def resolve_authors(self, ids: Iterable[str]) -> Dict[str, AuthorProfile]:
        ...


class IdentityAuthorResolver:
    """Stand-in resolver: the official API exposes no user details here, so the id is the name."""

    def resolve_authors(self, ids: Iterable[str]) -> Dict[str, AuthorProfile]:
        return {i: AuthorProfile(display_name=i) for i in ids}
