"""Exceptions raised by the feed engine."""
from __future__ import annotations

__all__ = ["CompanyNotFoundError", "FeedContractError"]


class CompanyNotFoundError(LookupError):
    """Raised when a company identifier is unknown to the event store."""

    def __init__(self, company_id: str) -> None:
        super().__init__(f"Company {company_id} not found")
        self.company_id = company_id


class FeedContractError(RuntimeError):
    """Raised when an event violates the encoder's input contract.

    Upstream validation is expected to make this unreachable; it signals a
    programming error rather than a user-facing failure.
    """
