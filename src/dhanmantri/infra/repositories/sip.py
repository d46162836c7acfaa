"""SQLModel implementation of the SIP portfolio repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import select

from ...models.portfolio import SipInvestment
from ..database import SessionFactory


class SQLModelSipRepository:
    """Persist SIP lines per user."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_id(self, sip_id: int, *, user_id: int) -> Optional[SipInvestment]:
        with self.session_factory() as session:
            obj = session.exec(
                select(SipInvestment)
                .where(SipInvestment.id == sip_id)
                .where(SipInvestment.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int) -> list[SipInvestment]:
        with self.session_factory() as session:
            statement = (
                select(SipInvestment)
                .where(SipInvestment.user_id == user_id)
                .order_by(SipInvestment.created_at.asc(), SipInvestment.id.asc())  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, sip: SipInvestment, *, user_id: int) -> SipInvestment:
        with self.session_factory() as session:
            sip.user_id = user_id
            session.add(sip)
            session.commit()
            session.refresh(sip)
            session.expunge(sip)
            return sip

    def delete(self, sip_id: int, *, user_id: int) -> bool:
        with self.session_factory() as session:
            sip = session.exec(
                select(SipInvestment)
                .where(SipInvestment.id == sip_id)
                .where(SipInvestment.user_id == user_id)
            ).first()
            if sip is None:
                return False
            session.delete(sip)
            session.commit()
            return True
