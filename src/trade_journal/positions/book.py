"""User-managed lifecycle of open positions.

After a matching pass the leftover lots are handed to an
:class:`OpenPositionBook`.  The user can then flag a lot as a long-term
investment, close it manually (no quantity is resolved, the lot is just
hidden from the active list), reopen it, annotate it, or delete it once
it has been closed.

The book is a plain in-memory collection; persisting it is the caller's
job.  All timestamps come from the injected clock.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from trade_journal.core.clock import IClock, WallClock
from trade_journal.core.enums import PositionAction
from trade_journal.core.errors import PositionNotFoundError, PositionStateError
from trade_journal.core.models import OpenPosition

logger = logging.getLogger(__name__)

DEFAULT_CLOSE_REASON = "Manually closed by user"


class OpenPositionBook:
    """Open positions keyed by ``position_id``.

    Parameters
    ----------
    positions : iterable of OpenPosition
        Initial contents, usually ``MatchResult.open``.
    clock : IClock
        Source of ``last_updated`` / ``manual_close_date`` values.
    """

    def __init__(
        self,
        positions: Iterable[OpenPosition] = (),
        *,
        clock: IClock | None = None,
    ) -> None:
        self._clock = clock or WallClock()
        self._positions: dict[str, OpenPosition] = {}
        for position in positions:
            self.add(position)

    def __len__(self) -> int:
        return len(self._positions)

    def __contains__(self, position_id: object) -> bool:
        return position_id in self._positions

    # ------------------------------------------------------------------ #
    # Queries                                                              #
    # ------------------------------------------------------------------ #

    def get(self, position_id: str) -> OpenPosition:
        try:
            return self._positions[position_id]
        except KeyError:
            raise PositionNotFoundError(
                f"Open position {position_id!r} not found"
            ) from None

    def list(
        self,
        *,
        include_closed: bool = False,
        symbol: str | None = None,
        is_investment: bool | None = None,
    ) -> list[OpenPosition]:
        """Filtered positions: active first, then most recently updated."""
        selected = [
            p for p in self._positions.values()
            if (include_closed or p.is_active)
            and (symbol is None or p.symbol == symbol)
            and (is_investment is None or p.is_investment == is_investment)
        ]
        # Two stable passes: recency first, then the active/closed split
        selected.sort(key=lambda p: p.last_updated, reverse=True)
        selected.sort(key=lambda p: p.is_manually_closed)
        return selected

    def counts(self) -> dict[str, int]:
        positions = list(self._positions.values())
        return {
            "total": len(positions),
            "active": sum(1 for p in positions if p.is_active),
            "closed": sum(1 for p in positions if p.is_manually_closed),
            "investments": sum(
                1 for p in positions if p.is_investment and p.is_active
            ),
        }

    # ------------------------------------------------------------------ #
    # Mutations                                                            #
    # ------------------------------------------------------------------ #

    def add(self, position: OpenPosition) -> None:
        if position.last_updated is None:
            position.last_updated = self._clock.now()
        self._positions[position.position_id] = position

    def mark_investment(
        self, position_id: str, is_investment: bool, notes: str | None = None
    ) -> OpenPosition:
        position = self.get(position_id)
        position.is_investment = is_investment
        self._touch(position, notes)
        return position

    def close(
        self,
        position_id: str,
        reason: str | None = None,
        notes: str | None = None,
    ) -> OpenPosition:
        """Flag as manually closed.  ``remaining_quantity`` is left as is."""
        position = self.get(position_id)
        position.is_manually_closed = True
        position.manual_close_date = self._clock.now()
        position.manual_close_reason = reason or DEFAULT_CLOSE_REASON
        self._touch(position, notes)
        logger.info("Closed position %s: %s", position_id, position.manual_close_reason)
        return position

    def reopen(self, position_id: str, notes: str | None = None) -> OpenPosition:
        position = self.get(position_id)
        position.is_manually_closed = False
        position.manual_close_date = None
        position.manual_close_reason = None
        self._touch(position, notes)
        return position

    def update_notes(self, position_id: str, notes: str | None) -> OpenPosition:
        position = self.get(position_id)
        position.notes = notes
        position.last_updated = self._clock.now()
        return position

    def delete(self, position_id: str) -> None:
        """Remove a position.  Only manually closed positions can go."""
        position = self.get(position_id)
        if not position.is_manually_closed:
            raise PositionStateError(
                "Cannot delete active positions. Close them first."
            )
        del self._positions[position_id]
        logger.info("Deleted position %s", position_id)

    def apply(self, action: str, position_id: str, **data: Any) -> OpenPosition | None:
        """Dispatch an action by name, as sent by the dashboard."""
        try:
            act = PositionAction(action)
        except ValueError:
            raise PositionStateError(f"Invalid action: {action!r}") from None

        if act == PositionAction.MARK_INVESTMENT:
            return self.mark_investment(
                position_id, bool(data.get("is_investment")), data.get("notes")
            )
        if act == PositionAction.CLOSE:
            return self.close(position_id, data.get("reason"), data.get("notes"))
        if act == PositionAction.REOPEN:
            return self.reopen(position_id, data.get("notes"))
        if act == PositionAction.UPDATE_NOTES:
            return self.update_notes(position_id, data.get("notes"))
        self.delete(position_id)
        return None

    def _touch(self, position: OpenPosition, notes: str | None) -> None:
        # Empty notes keep the existing text
        if notes:
            position.notes = notes
        position.last_updated = self._clock.now()
