import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with ties going up, unlike the built-in round() which rounds ties to even."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def round_price(value: float) -> int:
    return int(round_half_up(value))
