"""Double round-robin fixture scheduling (circle method)."""

import logging
import random
from typing import Optional, Sequence

from .errors import SchedulingError
from .models import Fixture, Round, ScheduleStatus
from .utils import rotate

logger = logging.getLogger('matchday.schedule')


def _check_teams(team_ids: Sequence[str]) -> list[str]:
    if team_ids is None or isinstance(team_ids, str):
        raise SchedulingError('Teams must be a list of team ids')

    teams = list(team_ids)
    if len(teams) < 2:
        raise SchedulingError('At least 2 teams are required for scheduling')

    errors = []
    seen = set()
    for team in teams:
        if not isinstance(team, str) or not team.strip():
            errors.append(f'Invalid team id: {team!r}')
        elif team in seen:
            errors.append(f'Duplicate team id: {team}')
        seen.add(team)

    if errors:
        raise SchedulingError('; '.join(errors))
    return teams


def _check_anchor(anchor_index) -> int:
    # bool is an int subclass but never a meaningful anchor
    if isinstance(anchor_index, bool) or not isinstance(anchor_index, int):
        raise SchedulingError(f'Anchor index must be an integer, got {anchor_index!r}')
    if anchor_index < 0:
        raise SchedulingError(f'Anchor index must be non-negative, got {anchor_index}')
    return anchor_index


def generate_round_robin_rounds(team_ids: Sequence[str], anchor_index: int = 0) -> list[Round]:
    """
    Generate one leg of a round-robin: every pair of teams meets exactly once.

    An odd team count gets a bye placeholder, so each team sits out one round.
    The slot order is rotated by anchor_index before pairing; position 0 then
    stays fixed while the others rotate one place per round.

    Args:
        team_ids: Team ids to schedule (at least 2, unique, non-blank)
        anchor_index: Starting rotation offset (wraps modulo the slot count)

    Returns:
        n-1 rounds (n = team count rounded up to even), each of n/2 fixtures

    Raises:
        SchedulingError: For invalid teams or anchor
    """
    teams = _check_teams(team_ids)
    anchor_index = _check_anchor(anchor_index)

    slots: list[Optional[str]] = list(teams)
    if len(slots) % 2 != 0:
        slots.append(None)  # bye

    n = len(slots)
    slots = rotate(slots, anchor_index % n)
    rounds = []

    for round_index in range(n - 1):
        fixtures = []
        for i in range(n // 2):
            home = slots[i]
            away = slots[n - 1 - i]

            if home is None or away is None:
                fixtures.append(Fixture.bye(home if home is not None else away))
            elif round_index % 2 == 0:
                fixtures.append(Fixture(home=home, away=away))
            else:
                fixtures.append(Fixture(home=away, away=home))

        # Odd rounds lead with a different fixture
        if round_index % 2 != 0:
            fixtures = fixtures[1:] + fixtures[:1]

        rounds.append(fixtures)
        slots = [slots[0], slots[-1]] + slots[1:-1]

    return rounds


def generate_double_round_robin(team_ids: Sequence[str], anchor_index: int = 0) -> list[Round]:
    """
    Generate both legs: the first leg followed by its home/away-swapped mirror.

    Byes are repeated as-is in the second leg; all scores start as None.
    """
    first_leg = generate_round_robin_rounds(team_ids, anchor_index)
    second_leg = [[fixture.reversed() for fixture in round_] for round_ in first_leg]
    return first_leg + second_leg


class FixtureScheduler:
    """
    Scheduler bound to one set of teams.

    Example:
        scheduler = FixtureScheduler(['Blue Lions', 'White Hawks', 'Green Foxes'])
        rounds, anchor = scheduler.generate_schedule()
        rounds = scheduler.extend_schedule(rounds, anchor)
    """

    def __init__(self, team_ids: Sequence[str]):
        self._teams = tuple(_check_teams(team_ids))

    @property
    def teams(self) -> tuple[str, ...]:
        return self._teams

    def generate_schedule(
        self,
        anchor_index: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> tuple[list[Round], int]:
        """
        Generate a full double round-robin.

        Args:
            anchor_index: Rotation offset; drawn uniformly from [0, team count) if None
            rng: Random source for the anchor draw (fresh generator if None)

        Returns:
            Tuple of (rounds, anchor_index used)
        """
        if anchor_index is None:
            rng = rng or random.Random()
            anchor_index = rng.randrange(len(self._teams))
            logger.debug(f'Drew anchor index {anchor_index} for {len(self._teams)} teams')

        rounds = generate_double_round_robin(self._teams, anchor_index)
        logger.debug(f'Generated {len(rounds)} rounds for {len(self._teams)} teams')
        return rounds, anchor_index

    def extend_schedule(self, existing_rounds: list[Round], anchor_index: int) -> list[Round]:
        """
        Append another full double round-robin cycle to an existing schedule.

        The existing rounds (and any scores in them) are carried over untouched;
        a new list is returned.
        """
        if existing_rounds is None or not isinstance(existing_rounds, (list, tuple)):
            raise SchedulingError('Existing rounds must be a list')

        additional = generate_double_round_robin(self._teams, anchor_index)
        logger.debug(f'Extending schedule of {len(existing_rounds)} rounds by {len(additional)}')
        return list(existing_rounds) + additional


def schedule_status(rounds: list[Round]) -> ScheduleStatus:
    """Count played fixtures against the total, ignoring byes."""
    if rounds is None:
        raise SchedulingError('Rounds must be a list')

    total = 0
    played = 0
    for round_ in rounds:
        for fixture in round_:
            if fixture.is_bye:
                continue
            total += 1
            if fixture.home_score is not None and fixture.away_score is not None:
                played += 1

    return ScheduleStatus(is_complete=total > 0 and played == total, played_count=played, total_count=total)


def completed_fixtures(rounds: list[Round]) -> list[Fixture]:
    """Played, non-bye fixtures in schedule order."""
    return [fixture for round_ in rounds for fixture in round_ if fixture.is_played]
