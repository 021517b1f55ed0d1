"""
Subscription package catalog and pricing.

Price uses a fixed nominal day count per package (30/90/180/365) while the
end date advances by calendar months. The two are computed independently,
so a "90 day" quarterly package may run for 89 to 92 calendar days.
"""

import calendar
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List

from omnibus.app.core.exceptions import InvalidPackageTypeError

CENT = Decimal("0.01")
RIDES_PER_DAY = 2  # outbound + return


@dataclass(frozen=True)
class SubscriptionPackage:
    package_type: str
    name: str
    discount_percent: Decimal
    day_count: int
    months: int
    
    @property
    def discount_rate(self) -> Decimal:
        return self.discount_percent / Decimal(100)
    
    @property
    def max_rides(self) -> int:
        return self.day_count * RIDES_PER_DAY


PACKAGES: Dict[str, SubscriptionPackage] = {
    "1month": SubscriptionPackage("1month", "Monthly", Decimal("0"), 30, 1),
    "3months": SubscriptionPackage("3months", "Quarterly", Decimal("10"), 90, 3),
    "6months": SubscriptionPackage("6months", "Semester", Decimal("15"), 180, 6),
    "12months": SubscriptionPackage("12months", "Annual", Decimal("25"), 365, 12),
}


def list_packages() -> List[SubscriptionPackage]:
    return list(PACKAGES.values())


def get_package(package_type: str) -> SubscriptionPackage:
    """
    Raises:
        InvalidPackageTypeError: For anything outside the catalog
    """
    package = PACKAGES.get(package_type)
    if package is None:
        raise InvalidPackageTypeError(package_type, allowed=list(PACKAGES))
    return package


def add_months(start: date, months: int) -> date:
    """Advance by calendar months, clamping the day to the target month's end."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def compute_end_date(start_date: date, package_type: str) -> date:
    return add_months(start_date, get_package(package_type).months)


def compute_total_amount(base_fare: Decimal, package_type: str) -> Decimal:
    """(base fare x (1 - discount)) x nominal day count, rounded to cents."""
    package = get_package(package_type)
    daily_fare = Decimal(base_fare) * (Decimal(1) - package.discount_rate)
    return (daily_fare * package.day_count).quantize(CENT, rounding=ROUND_HALF_UP)
