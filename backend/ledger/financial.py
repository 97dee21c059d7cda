"""
Point and commission arithmetic for order settlement.

Key Principles:
1. NEVER use float for money; amounts are converted through ``str`` into Decimal
2. Points are whole numbers and are always truncated toward zero, never rounded up
3. Commission shares are floored independently; the remainder is NOT redistributed.
   Whatever the three shares leave over stays with the platform.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_FLOOR, getcontext
from typing import Union

# Set high precision for intermediate calculations
getcontext().prec = 28

# Monetary value of one point. Fixed for every cafeteria.
POINT_VALUE = Decimal("0.003")

HUNDRED = Decimal("100")

# Prices and totals are stored with four decimal places
PRICE_DECIMAL_PLACES = 4
PRICE_QUANTUM = Decimal(1).scaleb(-PRICE_DECIMAL_PLACES)

Number = Union[Decimal, str, int, float]


def to_decimal(amount: Number) -> Decimal:
    """
    Coerce any numeric input to Decimal.

    Examples:
        >>> to_decimal(0.1)
        Decimal('0.1')
        >>> to_decimal("3.00")
        Decimal('3.00')
    """
    if isinstance(amount, float):
        # Convert float to string first to avoid binary precision artifacts
        amount = str(amount)
    return Decimal(amount)


def floor_to_int(amount: Decimal) -> int:
    return int(amount.to_integral_value(rounding=ROUND_FLOOR))


def fits_price_precision(amount: Decimal) -> bool:
    """
    True when ``amount`` is finite and carries no more than four significant decimal places.

    Examples:
        >>> fits_price_precision(Decimal("2.990000"))
        True
        >>> fits_price_precision(Decimal("2.99999"))
        False
    """
    if not amount.is_finite():
        return False
    try:
        return amount == amount.quantize(PRICE_QUANTUM)
    except InvalidOperation:
        return False


def calculate_points_to_deduct(order_total: Number) -> int:
    """
    Points charged for a monetary order total: ``floor(order_total / 0.003)``.

    Examples:
        >>> calculate_points_to_deduct("3.00")
        1000
        >>> calculate_points_to_deduct("0.001")
        0
        >>> calculate_points_to_deduct("0.0059")
        1

    Raises:
        ValueError: If the total is negative
    """
    total = to_decimal(order_total)
    if total < 0:
        raise ValueError(f"Order total cannot be negative: {total}")
    return floor_to_int(total / POINT_VALUE)


@dataclass(frozen=True)
class CommissionSplit:
    """Points credited to each party for one settled order."""

    points: int
    direct_marketer_points: int
    grandparent_marketer_points: int
    owner_points: int

    @property
    def distributed_points(self) -> int:
        return self.direct_marketer_points + self.grandparent_marketer_points + self.owner_points

    @property
    def retained_points(self) -> int:
        """Flooring shortfall kept by the platform."""
        return self.points - self.distributed_points


def _share(points: int, percent: Number) -> int:
    return floor_to_int(Decimal(points) * to_decimal(percent) / HUNDRED)


def calculate_commissions(points: int, config, has_marketer: bool) -> CommissionSplit:
    """
    Split ``points`` per the commission config.

    Marketer shares are zero when the cafeteria has no marketer; the owner share
    is computed regardless.

    Examples:
        >>> split = calculate_commissions(1000, CommissionConfig(), has_marketer=True)
        >>> (split.direct_marketer_points, split.grandparent_marketer_points, split.owner_points)
        (400, 150, 450)
    """
    if has_marketer:
        direct = _share(points, config.rate_direct_parent_percent)
        grandparent = _share(points, config.rate_grandparent_percent)
    else:
        direct = 0
        grandparent = 0

    return CommissionSplit(
        points=points,
        direct_marketer_points=direct,
        grandparent_marketer_points=grandparent,
        owner_points=_share(points, config.rate_owner_percent),
    )


def validate_commission_config(config, require_full_allocation: bool = True) -> None:
    """
    Check commission percentages.

    Each rate must lie in [0, 100]. When ``require_full_allocation`` is set the
    three rates must sum to exactly 100.

    Raises:
        ValueError: With a message naming the offending rate or the actual sum
    """
    rates = {
        "rate_direct_parent_percent": config.rate_direct_parent_percent,
        "rate_grandparent_percent": config.rate_grandparent_percent,
        "rate_owner_percent": config.rate_owner_percent,
    }
    for name, value in rates.items():
        value = to_decimal(value)
        if value < 0 or value > HUNDRED:
            raise ValueError(f"{name} must be between 0 and 100, got {value}")

    if require_full_allocation:
        total = sum((to_decimal(v) for v in rates.values()), Decimal("0"))
        if total != HUNDRED:
            raise ValueError(f"Commission percentages must sum to 100, got {total}")


def order_total(items) -> Decimal:
    """Sum of price x quantity over order items."""
    return sum((to_decimal(item.price) * item.quantity for item in items), Decimal("0"))
