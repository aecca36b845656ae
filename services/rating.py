"""
Rating aggregation over a class's reviews.

A review contributes to the average only when it carries a truthy rating; a stored
rating of 0 is skipped exactly like a missing one. Every review counts toward
`count` whether rated or not.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from schemas.course import RatingSubmission, RatingSummary

_ONE_DECIMAL = Decimal("0.1")


def round_half_up(value: Decimal) -> float:
    return float(value.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def summarize(submissions: Iterable[RatingSubmission]) -> RatingSummary:
    count = 0
    total = 0
    rated = 0
    for submission in submissions:
        count += 1
        # 0 is treated as "no rating" (falsy), matching how rows have always been averaged
        if submission.rating:
            total += submission.rating
            rated += 1

    if not rated:
        return RatingSummary(average=None, count=count)
    return RatingSummary(average=round_half_up(Decimal(total) / Decimal(rated)), count=count)


def format_average(average: Optional[float]) -> Optional[str]:
    """Render an average as a one-decimal string for the wire, or None."""
    if average is None:
        return None
    return str(Decimal(str(average)).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))
