"""Repository objects for managing company persistence."""
from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from calshare.models import Company

__all__ = ["CompanyRepository"]


class CompanyRepository:
    """Persistence operations for companies."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, company_id: str) -> Company:
        company = self.session.get(Company, company_id)
        if company is None:
            raise LookupError(f"Company {company_id} not found")
        return company

    def find_by_shareable_url(self, shareable_url: str) -> Optional[Company]:
        query = select(Company).where(Company.shareable_url == shareable_url)
        return self.session.scalars(query).first()

    def exists(self, company_id: str) -> bool:
        return self.session.get(Company, company_id) is not None

    def create(self, *, name: str, shareable_url: str) -> Company:
        company = Company(name=name, shareable_url=shareable_url)
        self.session.add(company)
        self.session.flush()
        self.session.refresh(company)
        return company

    def update_shareable_url(self, company: Company, shareable_url: str) -> Company:
        company.shareable_url = shareable_url
        self.session.flush()
        self.session.refresh(company)
        return company
