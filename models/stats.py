"""
Stats schemas.

Mirror the `user_wine_stats` view, plus the four tiles shown on the
profile and home screens.
"""

from typing import Optional
from datetime import datetime

from models.base import BaseSchema


class WineStats(BaseSchema):
    """One row of the user_wine_stats view."""

    unique_wines: int = 0
    total_tastings: int = 0
    unique_producers: int = 0
    unique_regions: int = 0
    unique_countries: int = 0
    favorites: int = 0
    average_rating: Optional[float] = None
    tastings_last_30_days: int = 0
    last_tasting_date: Optional[datetime] = None


class StatItem(BaseSchema):
    value: str
    label: str
    subtitle: str


class DisplayStats(BaseSchema):
    wines: StatItem
    countries: StatItem
    rating: StatItem
    recent: StatItem

    @classmethod
    def from_stats(cls, stats: WineStats) -> "DisplayStats":
        return cls(
            wines=StatItem(
                value=str(stats.unique_wines),
                label="Wines",
                subtitle=f"{stats.total_tastings} tastings"
            ),
            countries=StatItem(
                value=str(stats.unique_countries),
                label="Countries",
                subtitle=f"{stats.unique_regions} regions"
            ),
            rating=StatItem(
                value=f"{stats.average_rating or 0:.1f}",
                label="Avg Rating",
                subtitle=f"{stats.favorites} favorites"
            ),
            recent=StatItem(
                value=str(stats.tastings_last_30_days),
                label="This Month",
                subtitle="tastings"
            ),
        )
