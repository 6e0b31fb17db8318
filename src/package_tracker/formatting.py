"""Display formatting for stored numeric values."""


def format_weight(value: float) -> str:
    """2.5 -> '2.50 kg'"""
    return f"{value:.2f} kg"


def format_price(value: float) -> str:
    """50 -> '$50.00'"""
    return f"${value:.2f}"
