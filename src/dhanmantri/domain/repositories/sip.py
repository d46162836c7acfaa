"""SIP investment repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.portfolio import SipInvestment


class SipRepository(Protocol):
    """Repository for persisted SIP portfolio lines."""

    def get_by_id(self, sip_id: int, *, user_id: int) -> Optional[SipInvestment]:
        ...

    def list_all(self, *, user_id: int) -> list[SipInvestment]:
        ...

    def create(self, sip: SipInvestment, *, user_id: int) -> SipInvestment:
        ...

    def delete(self, sip_id: int, *, user_id: int) -> bool:
        ...
