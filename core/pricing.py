"""
Checkout arithmetic: totals, points to earn, and the redemption cap.

Pure functions with no side effects, cheap enough to run on every quantity or
points edit. All amounts are integers in whole currency units and all rates
are basis points (10000 = 100%), so floor is plain integer division and
nothing drifts.

    subtotal       = unit_price * quantity
    discount       = redeemed_points * point_value      (never above subtotal)
    final_total    = max(0, subtotal - discount)
    points_to_earn = floor(final_total * earn_rate)
    cap            = min(balance, floor(subtotal * max_redemption_rate))
"""

from core.models import CheckoutTotals

BPS_DENOMINATOR = 10_000

# 10% of the amount actually paid comes back as points.
DEFAULT_EARN_RATE_BPS = 1_000

# Points may cover at most half of the subtotal.
DEFAULT_MAX_REDEMPTION_BPS = 5_000


def compute_totals(
    unit_price: int,
    quantity: int,
    redeemed_points: int,
    earn_rate_bps: int = DEFAULT_EARN_RATE_BPS,
    point_value: int = 1,
) -> CheckoutTotals:
    """
    Compute checkout totals for a selection.

    Inputs are expected pre-clamped (quantity within stock, points within the
    redemption cap); no error conditions are raised here.

    Args:
        unit_price: Tier price in currency units (>= 0)
        quantity: Number of tickets (>= 1)
        redeemed_points: Points applied as discount (>= 0)
        earn_rate_bps: Share of the final total earned back as points
        point_value: Currency units per point

    Returns:
        CheckoutTotals
    """
    subtotal = unit_price * quantity
    discount = min(redeemed_points * point_value, subtotal)
    final_total = max(0, subtotal - discount)
    points_to_earn = (final_total * earn_rate_bps) // BPS_DENOMINATOR

    return CheckoutTotals(
        subtotal=subtotal,
        discount=discount,
        final_total=final_total,
        points_to_earn=points_to_earn,
    )


def redemption_cap(
    subtotal: int,
    balance: int,
    max_redemption_bps: int = DEFAULT_MAX_REDEMPTION_BPS,
    point_value: int = 1,
) -> int:
    """
    Maximum points a holder may redeem against a subtotal.

    Bounded by the balance and by max_redemption_bps of the subtotal, so a
    paid tier always leaves a positive amount for the gateway to charge.
    """
    max_discount = (subtotal * max_redemption_bps) // BPS_DENOMINATOR
    return max(0, min(balance, max_discount // point_value))


def clamp_redemption(requested: int, cap: int) -> int:
    """
    Clamp a requested redemption into [0, cap].

    Never raises. Out-of-range input is pulled back into range so the
    shopper's form stays usable.
    """
    return min(max(0, requested), max(0, cap))


def suggest_redemption(cap: int, fraction_bps: int) -> int:
    """Quick-pick amount: a fraction of the cap (2500 = a quarter, 10000 = all of it)."""
    return (max(0, cap) * fraction_bps) // BPS_DENOMINATOR
