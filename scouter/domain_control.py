# File: scouter/domain_control.py
"""scouter.domain_control: domain exclusion policy.

Three independent sets of domains:

* ``exclude_from_crawling`` – hosts that are never fetched;
* ``exclude_from_evaluation`` – hosts that may appear as links but are never
  sent to the link evaluator, so they never get a frontier score;
* ``exclude_from_relevant`` – hosts that can be crawled and scored but never
  count as relevant results.

A host matches a domain when it equals it or is one of its subdomains
(``m.facebook.com`` matches ``facebook.com``, ``notfacebook.com`` does not).
"""
from __future__ import annotations

from typing import AbstractSet, Any, FrozenSet, Iterable, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = [
    "DEFAULT_EXCLUDE_FROM_CRAWLING",
    "DEFAULT_EXCLUDE_FROM_EVALUATION",
    "DEFAULT_EXCLUDE_FROM_RELEVANT",
    "DomainControl",
    "host_matches",
]

DEFAULT_EXCLUDE_FROM_CRAWLING: FrozenSet[str] = frozenset(
    {
        "facebook.com",
        "instagram.com",
        "youtube.com",
        "pinterest.com",
        "twitter.com",
        "x.com",
        "tiktok.com",
        "linkedin.com",
    }
)
DEFAULT_EXCLUDE_FROM_EVALUATION: FrozenSet[str] = frozenset(
    {"google.com", "gstatic.com", "googleusercontent.com", "accounts.google.com"}
)
DEFAULT_EXCLUDE_FROM_RELEVANT: FrozenSet[str] = frozenset({"google.com"})


def host_matches(host: str, domains: AbstractSet[str]) -> bool:
    """Return True if *host* equals one of *domains* or is a subdomain of one."""
    host = host.lower().rstrip(".")
    return any(host == d or host.endswith("." + d) for d in domains)


def _host_of(url_or_host: str) -> Optional[str]:
    if "://" not in url_or_host:
        return url_or_host.strip().lower() or None
    try:
        return urlsplit(url_or_host).hostname
    except ValueError:
        return None


class DomainControl(BaseModel):
    """Immutable domain policy; all sets are stored lower-cased."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    exclude_from_crawling: FrozenSet[str] = Field(default=DEFAULT_EXCLUDE_FROM_CRAWLING)
    exclude_from_evaluation: FrozenSet[str] = Field(default=DEFAULT_EXCLUDE_FROM_EVALUATION)
    exclude_from_relevant: FrozenSet[str] = Field(default=DEFAULT_EXCLUDE_FROM_RELEVANT)

    @field_validator(
        "exclude_from_crawling", "exclude_from_evaluation", "exclude_from_relevant", mode="before"
    )
    @classmethod
    def _lower_domains(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = [v]
        if isinstance(v, Iterable):
            return frozenset(d.strip().lower().strip(".") for d in v if d and d.strip())
        return v

    def _excluded(self, url_or_host: str, domains: AbstractSet[str]) -> bool:
        host = _host_of(url_or_host)
        if not host:
            return True
        return host_matches(host, domains)

    def is_excluded_from_crawling(self, url_or_host: str) -> bool:
        return self._excluded(url_or_host, self.exclude_from_crawling)

    def is_excluded_from_evaluation(self, url_or_host: str) -> bool:
        return self._excluded(url_or_host, self.exclude_from_evaluation)

    def is_excluded_from_relevant(self, url_or_host: str) -> bool:
        return self._excluded(url_or_host, self.exclude_from_relevant)
