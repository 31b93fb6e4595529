"""Net worth at a date and over time, from carry-forward account balances"""

import logging
from bisect import bisect_right
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from sure_forecast.config import settings
from sure_forecast.domain.exceptions import ExchangeRateUnavailableError, InvalidArgumentError
from sure_forecast.domain.models import (
    Account,
    AccountClassification,
    BalancePoint,
    NetWorthSample,
    NetWorthSummary,
    NetWorthTimelinePoint,
    TimelineInterval,
    parse_enum,
)
from sure_forecast.domain.money import Money, percent
from sure_forecast.domain.ports import ExchangeRateProvider
from sure_forecast.utils.date_utils import (
    end_of_month,
    end_of_quarter,
    end_of_year,
    generate_date_range,
)

_PERIOD_END = {
    TimelineInterval.MONTHLY: end_of_month,
    TimelineInterval.QUARTERLY: end_of_quarter,
    TimelineInterval.YEARLY: end_of_year,
}


def timeline_dates(start: date, end: date, interval: TimelineInterval) -> List[date]:
    """
    Sample dates from start to end (both inclusive).

    Daily and weekly step by 1 and 7 days. Calendar intervals snap to each
    successive period end, clamped to ``end``. Duplicates are removed.
    """
    if interval == TimelineInterval.DAILY:
        dates = generate_date_range(start, end)
    elif interval == TimelineInterval.WEEKLY:
        dates = generate_date_range(start, end, step_days=7)
    else:
        period_end = _PERIOD_END[interval]
        dates = [start]
        cursor = start
        while cursor < end:
            next_date = period_end(cursor)
            if next_date == cursor:
                next_date = period_end(cursor + timedelta(days=1))
            cursor = min(next_date, end)
            dates.append(cursor)

    if dates[-1] != end:
        dates.append(end)
    return sorted(set(dates))


class NetWorthCalculator:
    """
    Assets minus liabilities in the reporting currency.

    Each visible account contributes its most recent balance at or before the
    requested date; accounts with no balance yet contribute zero.
    """

    def __init__(
        self,
        accounts: Iterable[Account],
        balances: Iterable[BalancePoint],
        currency: str | None = None,
        exchange_rates: Optional[ExchangeRateProvider] = None,
    ):
        self.currency = (currency or settings.reporting_currency).upper()
        self.accounts = [account for account in accounts if account.visible]
        self.exchange_rates = exchange_rates

        visible_ids = {account.account_id for account in self.accounts}
        by_account: Dict[str, List[BalancePoint]] = defaultdict(list)
        for point in balances:
            if point.account_id in visible_ids:
                by_account[point.account_id].append(point)

        # Sorted per account; a later point on the same date wins
        self._points: Dict[str, List[BalancePoint]] = {}
        self._dates: Dict[str, List[date]] = {}
        for account_id, points in by_account.items():
            points.sort(key=lambda p: p.date)
            self._points[account_id] = points
            self._dates[account_id] = [p.date for p in points]

    def balance_at(self, account: Account, on: date) -> Optional[BalancePoint]:
        """Most recent balance at or before ``on`` (carry-forward)"""
        dates = self._dates.get(account.account_id)
        if not dates:
            return None
        index = bisect_right(dates, on)
        if index == 0:
            return None
        return self._points[account.account_id][index - 1]

    def earliest_balance_date(self) -> Optional[date]:
        firsts = [dates[0] for dates in self._dates.values() if dates]
        return min(firsts) if firsts else None

    def calculate(self, on: date) -> Money:
        """Net worth on a date"""
        total_assets = Money.zero(self.currency)
        total_liabilities = Money.zero(self.currency)

        for account in self.accounts:
            point = self.balance_at(account, on)
            if point is None:
                continue

            balance = self._convert(point.amount, on)
            if account.classification == AccountClassification.ASSET:
                total_assets += balance
            elif account.classification == AccountClassification.LIABILITY:
                total_liabilities += balance

        return total_assets - total_liabilities

    def current(self, as_of: date | None = None) -> Money:
        return self.calculate(as_of or date.today())

    def timeline(
        self,
        start_date: date,
        end_date: date,
        interval: TimelineInterval | str = TimelineInterval.MONTHLY,
    ) -> List[NetWorthTimelinePoint]:
        """
        Net worth series with change and percent change from the previous point.

        Raises:
            InvalidArgumentError: start after end, or unknown interval
        """
        interval = parse_enum(TimelineInterval, interval, "interval")
        self._validate_range(start_date, end_date)

        points: List[NetWorthTimelinePoint] = []
        previous: Optional[Money] = None
        for day in timeline_dates(start_date, end_date, interval):
            value = self.calculate(day)
            change = value - previous if previous is not None else Money.zero(self.currency)
            points.append(
                NetWorthTimelinePoint(
                    date=day,
                    value=value,
                    change=change,
                    percent_change=percent(change.cents, previous.cents) if previous is not None else 0.0,
                )
            )
            previous = value

        return points

    def summary(self, start_date: date, end_date: date) -> NetWorthSummary:
        self._validate_range(start_date, end_date)

        start_value = self.calculate(start_date)
        end_value = self.calculate(end_date)
        total_change = end_value - start_value
        return NetWorthSummary(
            start_date=start_date,
            end_date=end_date,
            start_value=start_value,
            end_value=end_value,
            total_change=total_change,
            percent_change=percent(total_change.cents, start_value.cents),
        )

    def monthly_samples(self, start_date: date, end_date: date) -> List[NetWorthSample]:
        """Net worth at every month end from the month of ``start_date`` up to ``end_date``"""
        samples = []
        current = end_of_month(start_date)
        while current <= end_date:
            samples.append(NetWorthSample(date=current, value=self.calculate(current)))
            current = end_of_month(current + timedelta(days=1))
        return samples

    def _validate_range(self, start_date: date, end_date: date) -> None:
        if start_date > end_date:
            raise InvalidArgumentError(f"start_date {start_date} is after end_date {end_date}")

    def _convert(self, money: Money, on: date) -> Money:
        """Convert to the reporting currency at the rate for ``on``, else the latest rate"""
        if money.currency == self.currency:
            return money

        if self.exchange_rates is None:
            raise ExchangeRateUnavailableError(
                f"No exchange rate provider to convert {money.currency} to {self.currency}"
            )

        rate = self.exchange_rates.rate(money.currency, self.currency, on)
        if rate is None:
            rate = self.exchange_rates.latest_rate(money.currency, self.currency)
            if rate is None:
                raise ExchangeRateUnavailableError(
                    f"No exchange rate known for {money.currency} to {self.currency}"
                )
            logging.warning(
                "Historical exchange rate missing, using latest rate",
                extra={
                    "from_currency": money.currency,
                    "to_currency": self.currency,
                    "date": on.isoformat(),
                },
            )

        return money.exchange_to(self.currency, rate)
