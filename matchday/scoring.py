"""Per-session points accounting: appearance, match, bonus and knockout points."""

import datetime
import logging
from typing import Dict, Iterable, List, Optional

from .config import get_elo_settings, get_ranking_settings
from .errors import RankingError
from .models import Fixture, PlayerSessionRecord
from .schemas import RankingSettings
from .standings import calculate_standings, cup_winner, standings_positions as positions_from_table

logger = logging.getLogger('matchday.scoring')


def match_points(
    fixtures: Iterable[Fixture],
    team_names: Iterable[str],
    settings: Optional[RankingSettings] = None,
) -> Dict[str, int]:
    """
    Sum win/draw points per team over the session's played league fixtures.

    Byes, unplayed fixtures and fixtures involving a team that is not in
    team_names are skipped.
    """
    settings = settings or get_ranking_settings()
    points = {name: 0 for name in team_names}

    for fixture in fixtures:
        if not fixture.is_played:
            continue
        if fixture.home not in points or fixture.away not in points:
            continue

        if fixture.home_score > fixture.away_score:
            points[fixture.home] += settings.win_points
        elif fixture.home_score < fixture.away_score:
            points[fixture.away] += settings.win_points
        else:
            points[fixture.home] += settings.draw_points
            points[fixture.away] += settings.draw_points

    return points


def bonus_points(position: int, team_count: int, settings: Optional[RankingSettings] = None) -> int:
    """
    Finishing-position bonus for a team.

    Scoring:
        (team_count - 1 - position) * bonus_multiplier

    With the default multiplier of 2 the winner of a 2-team day gets 2, the
    winner of a 5-team day gets 8, and last place always gets 0.

    Args:
        position: 0-based league table position
        team_count: Number of teams that day

    Raises:
        RankingError: If position is outside [0, team_count)
    """
    settings = settings or get_ranking_settings()
    if team_count < 1 or not 0 <= position < team_count:
        raise RankingError(f'Position {position} is out of range for {team_count} teams')
    return (team_count - 1 - position) * settings.bonus_multiplier


def knockout_wins(knockout_fixtures: Iterable[Fixture], teams: Dict[str, List[str]]) -> Dict[str, int]:
    """
    Count knockout wins per player.

    Every player on the winning team of a decided knockout fixture gets one
    win. A bye advances its team and counts as a win. Drawn fixtures count
    for nobody.
    """
    wins: Dict[str, int] = {}

    for fixture in knockout_fixtures:
        winner = fixture.bye_team if fixture.is_bye else fixture.winner()
        if winner is None or winner not in teams:
            continue
        for player in teams[winner]:
            if not player:
                continue
            wins[player] = wins.get(player, 0) + 1

    return wins


def score_session(
    fixtures: Iterable[Fixture],
    teams_of_day: Dict[str, List[str]],
    standings_positions: Optional[Dict[str, int]] = None,
    knockout: Optional[Iterable[Fixture]] = None,
    session_date: Optional[datetime.date] = None,
    elo_ratings: Optional[Dict[str, float]] = None,
    settings: Optional[RankingSettings] = None,
) -> Dict[str, PlayerSessionRecord]:
    """
    Score every rostered player for one session.

    total = appearance + match points + bonus + knockout wins * knockout points

    Args:
        fixtures: The session's league fixtures (byes allowed)
        teams_of_day: Team name -> players
        standings_positions: Team -> 0-based position; derived from the
            league table of the fixtures when omitted
        knockout: The session's knockout fixtures, if any
        session_date: Date stamped onto each record
        elo_ratings: Ratings after the session, stamped onto each record
        settings: Points settings (default: league config)

    Returns:
        Dict of player -> PlayerSessionRecord

    Raises:
        RankingError: If supplied positions do not cover every team
    """
    settings = settings or get_ranking_settings()
    fixtures = list(fixtures)
    knockout = list(knockout or [])
    elo_ratings = elo_ratings or {}
    baseline = get_elo_settings().baseline
    team_names = list(teams_of_day)

    table = calculate_standings(fixtures, team_names, settings)
    if standings_positions is None:
        standings_positions = positions_from_table(table)
    else:
        missing = [name for name in team_names if name not in standings_positions]
        if missing:
            raise RankingError(f'No standings position for: {", ".join(missing)}')

    points_by_team = match_points(fixtures, team_names, settings)
    wins_by_player = knockout_wins(knockout, teams_of_day)

    leader = None
    if any(row.played for row in table):
        leader = min(team_names, key=lambda name: standings_positions[name])
    champion = cup_winner(knockout)

    records = {}
    for team, players in teams_of_day.items():
        bonus = bonus_points(standings_positions[team], len(team_names), settings)
        for player in players:
            if not player:
                continue
            knockout_pts = wins_by_player.get(player, 0) * settings.knockout_points
            total = settings.appearance_points + points_by_team[team] + bonus + knockout_pts
            records[player] = PlayerSessionRecord(
                date=session_date,
                team=team,
                appearance_points=settings.appearance_points,
                match_points=points_by_team[team],
                bonus_points=bonus,
                knockout_points=knockout_pts,
                total_points=total,
                elo_rating_after=elo_ratings.get(player, baseline),
                league_winner=team == leader,
                cup_winner=team == champion,
            )

    logger.debug(f'Scored {len(records)} players across {len(team_names)} teams for {session_date}')
    return records
