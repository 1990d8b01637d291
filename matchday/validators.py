"""Validation functions for fixtures, schedules, team configurations and session records."""

from typing import Optional, Sequence

from .constants import KNOCKOUT_STAGES
from .models import Fixture, PlayerSessionRecord, Round, TeamConfiguration
from .schemas import TeamBounds


def validate_fixture(fixture: Fixture) -> list[str]:
    """
    Validate the shape of a single fixture.

    Checks:
    - Byes name exactly one team and carry no scores
    - Regular fixtures name two different teams (knockout fixtures may wait
      for teams until they are played)
    - Scores are both set or both missing, and non-negative
    - Scorer goal totals do not exceed the team's score
    - Stage, if set, is a known knockout stage

    Args:
        fixture: Fixture to validate

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    if fixture.is_bye:
        if len(fixture.teams) != 1:
            errors.append(f'Bye must name exactly one team (got {len(fixture.teams)})')
        if fixture.home_score is not None or fixture.away_score is not None:
            errors.append(f'Bye for {fixture.bye_team} has a score')
    else:
        label = f'{fixture.home} vs {fixture.away}'
        if not fixture.home or not fixture.away:
            # knockout slots stay empty until advance_winners() fills them
            if fixture.stage is None or fixture.home_score is not None or fixture.away_score is not None:
                errors.append(f'Fixture {label} is missing a team')
        elif fixture.home == fixture.away:
            errors.append(f'Fixture {label} has the same team on both sides')

        if (fixture.home_score is None) != (fixture.away_score is None):
            errors.append(f'Fixture {label} has only one score recorded')

        for side, score, scorers in (
            ('home', fixture.home_score, fixture.home_scorers),
            ('away', fixture.away_score, fixture.away_scorers),
        ):
            if score is not None and score < 0:
                errors.append(f'Fixture {label} has negative {side} score: {score}')
            if scorers and score is not None:
                goals = sum(scorers.values())
                if goals > score:
                    errors.append(f'Fixture {label} credits {goals} {side} goals but scored {score}')

    if fixture.stage is not None and fixture.stage not in KNOCKOUT_STAGES:
        errors.append(f'Unknown knockout stage: {fixture.stage}')

    return errors


def validate_schedule(rounds: Sequence[Round], team_ids: Optional[Sequence[str]] = None) -> list[str]:
    """
    Validate a schedule's structure.

    Checks every fixture, that no team appears twice in a round, and (when
    team_ids is given) that only known teams are scheduled.

    Args:
        rounds: Schedule rounds
        team_ids: Optional set of teams expected in the schedule

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []
    known = set(team_ids) if team_ids is not None else None

    for round_index, round_ in enumerate(rounds):
        seen = set()
        for fixture in round_:
            for error in validate_fixture(fixture):
                errors.append(f'Round {round_index + 1}: {error}')
            for team in fixture.teams:
                if team in seen:
                    errors.append(f'Round {round_index + 1}: {team} appears more than once')
                seen.add(team)
                if known is not None and team not in known:
                    errors.append(f'Round {round_index + 1}: unknown team {team}')

    return errors


def validate_team_configuration(
    config: TeamConfiguration, player_count: int, bounds: TeamBounds
) -> list[str]:
    """
    Validate a team configuration against the roster size and league limits.

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    if config.team_count < 2:
        errors.append(f'At least 2 teams are required (got {config.team_count})')
    if not bounds.min_teams <= config.team_count <= bounds.max_teams:
        errors.append(
            f'Team count {config.team_count} outside allowed range '
            f'{bounds.min_teams}-{bounds.max_teams}'
        )
    if len(config.team_sizes) != config.team_count:
        errors.append(f'{len(config.team_sizes)} team sizes given for {config.team_count} teams')

    for index, size in enumerate(config.team_sizes):
        if not bounds.min_players_per_team <= size <= bounds.max_players_per_team:
            errors.append(
                f'Team {index + 1} size {size} outside allowed range '
                f'{bounds.min_players_per_team}-{bounds.max_players_per_team}'
            )

    if sum(config.team_sizes) != player_count:
        errors.append(f'Team sizes sum to {sum(config.team_sizes)} but {player_count} players are available')

    return errors


def validate_session_record(record: PlayerSessionRecord) -> list[str]:
    """
    Validate a player's session record.

    Checks that point components are non-negative and add up to the total.

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    components = {
        'appearance_points': record.appearance_points,
        'match_points': record.match_points,
        'bonus_points': record.bonus_points,
        'knockout_points': record.knockout_points,
    }
    for name, value in components.items():
        if value < 0:
            errors.append(f'{name} is negative: {value}')

    expected = sum(components.values())
    if record.total_points != expected:
        errors.append(f'total_points {record.total_points} != sum of components {expected}')

    if not record.team:
        errors.append('Record has no team')

    return errors
