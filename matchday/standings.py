"""League table, knockout bracket, championship winners and goal tallies for a single session."""

from dataclasses import replace
from typing import Iterable, Optional, Sequence

from .config import get_ranking_settings
from .constants import KNOCKOUT_STAGES
from .errors import SchedulingError
from .models import Fixture, Standing
from .schemas import RankingSettings


def _sort_key(row: Standing):
    return (-row.points, -row.goal_difference, -row.goals_for, row.team)


def calculate_standings(
    fixtures: Iterable[Fixture],
    team_names: Optional[Sequence[str]] = None,
    settings: Optional[RankingSettings] = None,
) -> list[Standing]:
    """
    Build the league table from played fixtures.

    Byes and unplayed fixtures are ignored. When team_names is given, every
    named team gets a row (even without a played fixture) and fixtures
    involving any other team are skipped, e.g. results left over from a
    regenerated set of teams.

    Sorted by points, goal difference, goals for (all descending), then team
    name. Win and draw points come from the ranking settings, so the table
    agrees with match_points().

    Args:
        fixtures: League fixtures for the session
        team_names: Optional teams of the day
        settings: Ranking settings (default: league config)

    Returns:
        List of Standing rows, leader first
    """
    settings = settings or get_ranking_settings()
    table: dict[str, Standing] = {}
    if team_names is not None:
        for name in team_names:
            table[name] = Standing(team=name)

    for fixture in fixtures:
        if not fixture.is_played or not fixture.home or not fixture.away:
            continue
        if team_names is not None and (fixture.home not in table or fixture.away not in table):
            continue

        home = table.setdefault(fixture.home, Standing(team=fixture.home))
        away = table.setdefault(fixture.away, Standing(team=fixture.away))

        home.played += 1
        away.played += 1
        home.goals_for += fixture.home_score
        home.goals_against += fixture.away_score
        away.goals_for += fixture.away_score
        away.goals_against += fixture.home_score

        if fixture.home_score > fixture.away_score:
            home.wins += 1
            away.losses += 1
            home.points += settings.win_points
        elif fixture.home_score < fixture.away_score:
            away.wins += 1
            home.losses += 1
            away.points += settings.win_points
        else:
            home.draws += 1
            away.draws += 1
            home.points += settings.draw_points
            away.points += settings.draw_points

    return sorted(table.values(), key=_sort_key)


def standings_positions(standings: Sequence[Standing]) -> dict[str, int]:
    """Map each team to its 0-based finishing position."""
    return {row.team: index for index, row in enumerate(standings)}


def league_winner(
    fixtures: Iterable[Fixture],
    team_names: Optional[Sequence[str]] = None,
    settings: Optional[RankingSettings] = None,
) -> Optional[str]:
    """Leader of the league table, or None if no fixture has been played."""
    table = calculate_standings(fixtures, team_names, settings)
    if not table or table[0].played == 0:
        return None
    return table[0].team


def cup_winner(knockout: Iterable[Fixture]) -> Optional[str]:
    """Winner of the knockout final, or None if it is undecided or missing."""
    for fixture in knockout:
        if fixture.stage != 'final':
            continue
        if fixture.is_bye:
            return fixture.bye_team
        return fixture.winner()
    return None


def _seed_order(size: int) -> list[int]:
    """Seed indices in bracket order, so seeds 1 and 2 can only meet in the final."""
    order = [0, 1]
    while len(order) < size:
        slots = len(order) * 2
        order = [seed for top in order for seed in (top, slots - 1 - top)]
    return order


def knockout_bracket(standings: Sequence[Standing]) -> list[Fixture]:
    """
    Build the day's knockout bracket from the league table.

    Teams are seeded in table order and the top eight qualify. The first
    round is padded to a power of two; missing opponents become byes for the
    top seeds, and bye teams are already advanced. Later rounds are
    placeholder fixtures whose teams are filled in by advance_winners().

    Args:
        standings: League table, leader first

    Returns:
        Fixtures grouped by stage ('quarter', 'semi', 'final'), in bracket order

    Raises:
        SchedulingError: If fewer than 2 teams are in the table

    Example:
        >>> [(f.stage, f.home, f.away) for f in knockout_bracket(table)]  # 3 teams
        [('semi', 'A', None), ('semi', 'B', 'C'), ('final', 'A', None)]
    """
    seeds = [row.team for row in standings][:2 ** len(KNOCKOUT_STAGES)]
    if len(seeds) < 2:
        raise SchedulingError(f'Not enough teams for a knockout bracket: need at least 2, got {len(seeds)}')

    size = 2
    while size < len(seeds):
        size *= 2
    stages = KNOCKOUT_STAGES[-(size.bit_length() - 1):]

    order = _seed_order(size)
    bracket = []
    for i in range(0, size, 2):
        home, away = order[i], order[i + 1]
        if away >= len(seeds):
            bracket.append(Fixture.bye(seeds[home], stage=stages[0]))
        else:
            bracket.append(Fixture(home=seeds[home], away=seeds[away], stage=stages[0]))

    matches = size // 4
    for stage in stages[1:]:
        bracket.extend(Fixture(home=None, away=None, stage=stage) for _ in range(matches))
        matches //= 2

    return advance_winners(bracket)


def advance_winners(bracket: Sequence[Fixture]) -> list[Fixture]:
    """
    Move decided winners into the next knockout round.

    The winner of match i in a round goes to match i // 2 of the next round,
    at home when i is even and away when it is odd. Bye teams advance; drawn
    and unplayed fixtures leave their slot empty. The input is not modified.
    """
    advanced = [replace(fixture) for fixture in bracket]
    by_stage = {stage: [f for f in advanced if f.stage == stage] for stage in KNOCKOUT_STAGES}

    for stage, next_stage in zip(KNOCKOUT_STAGES, KNOCKOUT_STAGES[1:]):
        next_matches = by_stage[next_stage]
        for index, fixture in enumerate(by_stage[stage]):
            winner = fixture.bye_team if fixture.is_bye else fixture.winner()
            if winner is None or index // 2 >= len(next_matches):
                continue
            target = next_matches[index // 2]
            if index % 2 == 0:
                target.home = winner
            else:
                target.away = winner

    return advanced


def goal_tally(fixtures: Iterable[Fixture]) -> dict[str, int]:
    """Goals per scorer across the given fixtures, highest first."""
    tally: dict[str, int] = {}
    for fixture in fixtures:
        for scorers in (fixture.home_scorers, fixture.away_scorers):
            for player, goals in (scorers or {}).items():
                tally[player] = tally.get(player, 0) + goals
    return dict(sorted(tally.items(), key=lambda item: (-item[1], item[0])))
