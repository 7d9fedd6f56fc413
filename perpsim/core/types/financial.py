"""
Financial helpers for paper-trading calculations.

All amounts are USD-denominated floats. Prices are never rounded (low-priced
assets such as DOGE need their full precision); derived amounts are rounded
to FINANCIAL_DECIMALS so repeated cycles do not accumulate float noise.
"""

FINANCIAL_DECIMALS = 8
ZERO = 0.0


def round_amount(amount: float) -> float:
    """Round a USD amount to the engine's precision."""
    return round(amount, FINANCIAL_DECIMALS)


def calculate_quantity(notional: float, price: float) -> float:
    """Calculate the asset quantity a notional buys at a price.

    Args:
        notional: USD exposure
        price: Asset price

    Returns:
        Quantity as float
    """
    if price <= ZERO:
        raise ValueError(f"Price must be positive, got {price}")

    return notional / price


def calculate_margin_needed(notional: float, leverage: float) -> float:
    """Calculate margin needed with proper precision.

    Args:
        notional: Total notional value
        leverage: Leverage multiplier

    Returns:
        Required margin as float
    """
    if leverage <= ZERO:
        raise ValueError(f"Leverage must be positive, got {leverage}")

    return round_amount(notional / leverage)


def calculate_pnl(
    entry_price: float,
    exit_price: float,
    notional: float,
    side: str,
) -> float:
    """Calculate PnL of a notional exposure between two prices.

    Quantity is derived as notional / entry_price.

    Args:
        entry_price: Entry price of position
        exit_price: Exit (or mark) price of position
        notional: USD exposure at entry
        side: 'LONG' or 'SHORT'

    Returns:
        PnL as float

    Raises:
        ValueError: If side is neither LONG nor SHORT
    """
    quantity = calculate_quantity(abs(notional), entry_price)
    side_upper = str(side).upper()

    if side_upper == "LONG":
        pnl = (exit_price - entry_price) * quantity
    elif side_upper == "SHORT":
        pnl = (entry_price - exit_price) * quantity
    else:
        raise ValueError(f"Invalid position side: {side}")

    return round_amount(pnl)


def average_entry_price(previous_entry: float, reference_price: float) -> float:
    """Two-point average used when a position is resized.

    This is deliberately not size-weighted.

    Args:
        previous_entry: Entry price before the resize
        reference_price: Current market price at the resize

    Returns:
        The new entry price
    """
    return (previous_entry + reference_price) / 2
