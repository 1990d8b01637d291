"""ELO ratings for team fixtures, with weekly decay toward the baseline."""

import datetime
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .config import get_elo_settings
from .constants import DAYS_PER_WEEK, MATCH_TYPES
from .errors import RankingError
from .logging_config import log_data_warnings
from .models import EloUpdate, Fixture
from .schemas import EloSettings
from .utils import mean

logger = logging.getLogger('matchday.elo')


def expected_score(rating_a: float, rating_b: float) -> float:
    """Expected score (0-1) for side A against side B."""
    return 1 / (1 + 10 ** ((rating_b - rating_a) / 400))


def actual_score(home_score: int, away_score: int) -> float:
    """Home side's result: 1 for a win, 0.5 for a draw, 0 for a loss."""
    if home_score > away_score:
        return 1.0
    if home_score < away_score:
        return 0.0
    return 0.5


def team_rating(roster: Iterable[str], ratings: Dict[str, float], baseline: float) -> float:
    """Mean rating of a roster; unrated players count at the baseline."""
    return mean((ratings.get(player, baseline) for player in roster if player), default=baseline)


def update_elo(
    prior_ratings: Dict[str, float],
    fixtures: Iterable[Fixture],
    teams: Dict[str, List[str]],
    match_type: str = 'league',
    settings: Optional[EloSettings] = None,
) -> EloUpdate:
    """
    Apply a batch of fixtures to player ratings, in order.

    Each fixture sees the ratings left by the previous one. Every player on a
    side moves by K * (actual - expected), so the two sides' deltas cancel.

    Byes and unplayed fixtures are skipped silently. A fixture with only one
    score, or naming a team with no roster, is skipped with a warning.

    Args:
        prior_ratings: Player -> rating before these fixtures (not modified)
        fixtures: Fixtures in the order they were played
        teams: Team name -> players
        match_type: 'league' (K=10) or 'cup' (K=7)
        settings: ELO settings (default: league config)

    Returns:
        EloUpdate with the new ratings and any warnings

    Raises:
        RankingError: If match_type is not 'league' or 'cup'
    """
    if match_type not in MATCH_TYPES:
        raise RankingError(f'Invalid match type: {match_type!r} (expected one of {", ".join(MATCH_TYPES)})')

    settings = settings or get_elo_settings()
    k_factor = settings.k_league if match_type == 'league' else settings.k_cup
    ratings = dict(prior_ratings)
    warnings = []

    for fixture in fixtures:
        if fixture.is_bye:
            continue
        if fixture.home_score is None and fixture.away_score is None:
            continue

        label = f'{fixture.home} vs {fixture.away}'
        if fixture.home_score is None or fixture.away_score is None:
            warnings.append(f'Skipped {match_type} fixture {label}: only one score recorded')
            continue

        home_roster = [p for p in teams.get(fixture.home) or [] if p]
        away_roster = [p for p in teams.get(fixture.away) or [] if p]
        if not home_roster or not away_roster:
            missing = fixture.home if not home_roster else fixture.away
            warnings.append(f'Skipped {match_type} fixture {label}: no players for {missing}')
            continue

        home_rating = team_rating(home_roster, ratings, settings.baseline)
        away_rating = team_rating(away_roster, ratings, settings.baseline)
        home_expected = expected_score(home_rating, away_rating)
        home_actual = actual_score(fixture.home_score, fixture.away_score)
        delta = k_factor * (home_actual - home_expected)

        for player in home_roster:
            ratings[player] = ratings.get(player, settings.baseline) + delta
        for player in away_roster:
            ratings[player] = ratings.get(player, settings.baseline) - delta

    log_data_warnings(logger, warnings)
    return EloUpdate(ratings=ratings, warnings=warnings)


def inactive_weeks(last_appearance: Optional[datetime.date], as_of: datetime.date) -> int:
    """
    Whole weeks without an appearance between last_appearance and as_of.

    Weekly attendance (7 days apart) never counts as inactive; a 14-day gap
    counts one missed week.
    """
    if last_appearance is None:
        return 0
    days = (as_of - last_appearance).days
    return max(0, (days - 1) // DAYS_PER_WEEK)


def apply_decay(rating: float, weeks: int, settings: Optional[EloSettings] = None) -> float:
    """Move a rating toward the baseline by decay_rate per week (compounded)."""
    if weeks <= 0:
        return rating
    settings = settings or get_elo_settings()
    factor = (1 - settings.decay_rate) ** weeks
    return settings.baseline + (rating - settings.baseline) * factor


def decay_ratings(
    ratings: Dict[str, float],
    last_appearances: Dict[str, datetime.date],
    as_of: datetime.date,
    applied_weeks: Optional[Dict[str, int]] = None,
    settings: Optional[EloSettings] = None,
) -> Tuple[Dict[str, float], Dict[str, int]]:
    """
    Decay each player's rating for inactive weeks not yet applied.

    applied_weeks records how many inactive weeks have already been applied
    since each player's last appearance, so repeated calls never decay the
    same week twice. Neither input dict is modified.

    Returns:
        Tuple of (decayed ratings, updated applied_weeks)
    """
    settings = settings or get_elo_settings()
    decayed = dict(ratings)
    applied = dict(applied_weeks or {})

    for player, rating in ratings.items():
        weeks = inactive_weeks(last_appearances.get(player), as_of)
        pending = weeks - applied.get(player, 0)
        if pending > 0:
            decayed[player] = apply_decay(rating, pending, settings)
            applied[player] = weeks
            logger.debug(f'Decayed {player} by {pending} week(s): {rating:.1f} -> {decayed[player]:.1f}')

    return decayed, applied
