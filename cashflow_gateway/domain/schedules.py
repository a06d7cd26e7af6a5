"""Schedule expansion - decide whether a recurrence fires on a date and for how much"""

from datetime import date, timedelta
from typing import Optional, Tuple

from cashflow_gateway.config import TwiceMonthlyFallback
from cashflow_gateway.domain.models import DayOfMonth, DayOfWeek, Schedule, TwiceMonthly
from cashflow_gateway.utils.date_utils import effective_day, to_calendar_date


def is_monthly_due(day: int, on: date) -> bool:
    """
    Check if a monthly item configured for `day` falls on `on`.

    Days past the end of a short month are clamped to its last day, so a
    day-31 item fires on Feb 28 (or 29), Apr 30, and so on.
    """
    return on.day == effective_day(day, on)


def first_weekday_on_or_after(start: date, weekday: int) -> date:
    """First date >= start whose ISO weekday equals weekday"""
    return start + timedelta(days=(weekday - start.isoweekday()) % 7)


def is_day_of_week_due(schedule: DayOfWeek, on: date, biweekly: bool, window_start: date) -> bool:
    """
    Weekly: every matching weekday.
    Biweekly: every other matching weekday, counting from the first match on
    or after the anchor date (or the projection window start without one).
    """
    if on.isoweekday() != schedule.weekday:
        return False
    if not biweekly:
        return True

    anchor = to_calendar_date(schedule.anchor_date or window_start)
    reference = first_weekday_on_or_after(anchor, schedule.weekday)
    return (on - reference).days % 14 == 0


def twice_monthly_slot_amounts(
    schedule: TwiceMonthly,
    amount_cents: int,
    fallback: TwiceMonthlyFallback,
) -> Tuple[int, int]:
    """
    Resolve the (first, second) payment amounts for a twice-monthly schedule.

    Per-slot amounts win only when both are configured. Otherwise:
    - REPEAT: amount_cents on each date (monthly total is 2x amount_cents)
    - SPLIT:  amount_cents // 2 on the first date, the remainder on the second

    Example (SPLIT):
        300001 cents -> (150000, 150001)
    """
    if schedule.first_amount_cents is not None and schedule.second_amount_cents is not None:
        return schedule.first_amount_cents, schedule.second_amount_cents

    if fallback == TwiceMonthlyFallback.SPLIT:
        first = amount_cents // 2
        return first, amount_cents - first

    return amount_cents, amount_cents


def resolve_scheduled_amount(
    schedule: Schedule,
    frequency: str,
    amount_cents: int,
    on: date,
    window_start: date,
    fallback: TwiceMonthlyFallback = TwiceMonthlyFallback.REPEAT,
) -> Optional[int]:
    """
    Return the amount a recurring item pays on `on`, or None when it does not fire.

    Args:
        schedule: DayOfWeek, DayOfMonth or TwiceMonthly recurrence
        frequency: "weekly" | "biweekly" | "monthly" | "twice-monthly"
        amount_cents: Item's base amount
        on: Calendar date being checked
        window_start: First day of the projection (biweekly parity reference)
        fallback: Twice-monthly policy when per-slot amounts are absent
    """
    if isinstance(schedule, DayOfWeek):
        biweekly = frequency == "biweekly"
        return amount_cents if is_day_of_week_due(schedule, on, biweekly, window_start) else None

    if isinstance(schedule, DayOfMonth):
        return amount_cents if is_monthly_due(schedule.day, on) else None

    if isinstance(schedule, TwiceMonthly):
        first_amount, second_amount = twice_monthly_slot_amounts(schedule, amount_cents, fallback)
        total = None
        # Both slots can clamp onto the same short-month day; they then pay together
        if is_monthly_due(schedule.first_day, on):
            total = first_amount
        if is_monthly_due(schedule.second_day, on):
            total = (total or 0) + second_amount
        return total

    raise TypeError(f"Unknown schedule type: {type(schedule).__name__}")
