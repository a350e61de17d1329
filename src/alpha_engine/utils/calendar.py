"""
NYSE Trading Calendar

Provides the trading-calendar-aware "today" used for days-to-expiry.
Weekends and exchange holidays roll forward to the next session, so a chain
scored on a Saturday measures DTE from the following Monday.

Usage:
    from alpha_engine.utils.calendar import TradingCalendar

    cal = TradingCalendar()
    today = cal.trading_today()
    dte = cal.days_to_expiry(date(2026, 3, 20), today=today)
"""

from datetime import date
from typing import Iterable, Optional

import pandas as pd
from pandas.tseries.offsets import CustomBusinessDay


class TradingCalendar:
    """
    NYSE trading calendar.

    **Holidays:** full-day closures for 2025-2027 (observed dates).
    Extra closures can be passed in for ad hoc events.
    """

    HOLIDAYS = {
        2025: [
            date(2025, 1, 1),   # New Year's Day
            date(2025, 1, 9),   # National Day of Mourning
            date(2025, 1, 20),  # MLK Day
            date(2025, 2, 17),  # Washington's Birthday
            date(2025, 4, 18),  # Good Friday
            date(2025, 5, 26),  # Memorial Day
            date(2025, 6, 19),  # Juneteenth
            date(2025, 7, 4),   # Independence Day
            date(2025, 9, 1),   # Labor Day
            date(2025, 11, 27), # Thanksgiving
            date(2025, 12, 25), # Christmas
        ],
        2026: [
            date(2026, 1, 1),   # New Year's Day
            date(2026, 1, 19),  # MLK Day
            date(2026, 2, 16),  # Washington's Birthday
            date(2026, 4, 3),   # Good Friday
            date(2026, 5, 25),  # Memorial Day
            date(2026, 6, 19),  # Juneteenth
            date(2026, 7, 3),   # Independence Day (observed)
            date(2026, 9, 7),   # Labor Day
            date(2026, 11, 26), # Thanksgiving
            date(2026, 12, 25), # Christmas
        ],
        2027: [
            date(2027, 1, 1),   # New Year's Day
            date(2027, 1, 18),  # MLK Day
            date(2027, 2, 15),  # Washington's Birthday
            date(2027, 3, 26),  # Good Friday
            date(2027, 5, 31),  # Memorial Day
            date(2027, 6, 18),  # Juneteenth (observed)
            date(2027, 7, 5),   # Independence Day (observed)
            date(2027, 9, 6),   # Labor Day
            date(2027, 11, 25), # Thanksgiving
            date(2027, 12, 24), # Christmas (observed)
        ],
    }

    def __init__(self, extra_holidays: Optional[Iterable[date]] = None):
        """
        Initialize trading calendar.

        Args:
            extra_holidays: Additional closure dates on top of the built-in list
        """
        holidays = [d for year in self.HOLIDAYS.values() for d in year]
        if extra_holidays:
            holidays.extend(extra_holidays)
        self.holidays = sorted(set(holidays))
        self._session = CustomBusinessDay(holidays=self.holidays)

    def is_trading_day(self, check_date: Optional[date] = None) -> bool:
        """Return True if the exchange is open on check_date (default: today)."""
        if check_date is None:
            check_date = date.today()
        return bool(self._session.is_on_offset(pd.Timestamp(check_date)))

    def trading_today(self, now: Optional[date] = None) -> date:
        """
        Return the session "today" belongs to.

        Args:
            now: Calendar date (default: today)

        Returns:
            now itself on a trading day, otherwise the next trading day
        """
        if now is None:
            now = date.today()
        return self._session.rollforward(pd.Timestamp(now)).date()

    def next_trading_day(self, check_date: Optional[date] = None) -> date:
        """Return the first trading day strictly after check_date."""
        if check_date is None:
            check_date = date.today()
        return (pd.Timestamp(check_date) + self._session).date()

    def days_to_expiry(self, expiration: date, today: Optional[date] = None) -> int:
        """
        Calendar days from the trading-aware today to expiration.

        Expired contracts return a negative number so callers can drop them.
        """
        reference = self.trading_today(today)
        return (expiration - reference).days
