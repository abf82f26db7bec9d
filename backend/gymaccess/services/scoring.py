"""Streak and points arithmetic.

Pure functions shared by access validation and badge awards. No database
access happens here.
"""

import math
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from gymaccess.core.config import settings


def next_streak(current_streak: int, last_visit: Optional[datetime], today: date) -> int:
    """Streak after a scored visit on ``today``.

    A last visit on yesterday continues the streak; anything else (an older
    visit, or no visit at all) starts a new streak of 1.
    """
    if last_visit is None:
        return 1
    yesterday = today - timedelta(days=1)
    if last_visit.date() == yesterday:
        return current_streak + 1
    return 1


def streak_multiplier(
    streak: int,
    step: Optional[float] = None,
    cap: Optional[float] = None,
) -> float:
    """``max(1.0, 1.0 + (streak - 1) * step)``, optionally capped."""
    step = settings.streak_multiplier_step if step is None else step
    cap = settings.streak_multiplier_cap if cap is None else cap
    multiplier = max(1.0, 1.0 + (streak - 1) * step)
    if cap is not None:
        multiplier = min(multiplier, cap)
    # 4 decimals hides float noise such as 1.3000000000000003
    return round(multiplier, 4)


def points_for_streak(streak: int, base_points: Optional[int] = None) -> Tuple[float, int]:
    """Return (multiplier, points earned) for a visit at ``streak``."""
    base = settings.base_points if base_points is None else base_points
    multiplier = streak_multiplier(streak)
    # Round before flooring so 100 * 2.3 (229.99999999999997) yields 230
    earned = math.floor(round(base * multiplier, 6))
    return multiplier, earned


def level_for_experience(experience: int, points_per_level: Optional[int] = None) -> int:
    per_level = settings.points_per_level if points_per_level is None else points_per_level
    return experience // per_level + 1


def experience_to_next_level(level: int, experience: int, points_per_level: Optional[int] = None) -> int:
    per_level = settings.points_per_level if points_per_level is None else points_per_level
    return level * per_level - experience
