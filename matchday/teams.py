"""Team configuration enumeration and player allocation."""

import logging
import random
from itertools import combinations
from typing import Callable, Iterable, Mapping, Optional, Sequence

from .config import get_elo_settings, get_team_bounds
from .constants import (
    ALLOCATION_METHODS,
    PAIRING_LIMIT,
    POT_SIZE_FACTOR,
    SEEDED_CANDIDATES,
    TEAM_COLOURS,
    TEAM_NOUNS,
    TEAMMATE_HISTORY_SESSIONS,
)
from .errors import TeamError
from .models import Allocation, AllocationStep, Session, TeamConfiguration
from .schemas import TeamBounds
from .validators import validate_team_configuration

logger = logging.getLogger('matchday.teams')

QualityFn = Callable[[str], Optional[float]]
Pair = tuple[str, str]


def configurations_for(player_count: int, bounds: Optional[TeamBounds] = None) -> list[TeamConfiguration]:
    """
    Enumerate every valid way to split the eligible players into teams.

    For each team count t in [min_teams, max_teams] (stopping once t teams of
    the minimum size would need more players than are available), players are
    split as evenly as possible: floor(n / t) each, with the first n mod t
    teams taking one extra. A split is kept only if every size is within the
    per-team limits.

    Args:
        player_count: Number of eligible players
        bounds: Team limits (default: league config)

    Returns:
        Configurations in ascending team-count order (possibly empty)

    Example:
        >>> configurations_for(13, TeamBounds(min_teams=2, max_teams=4))
        [TeamConfiguration(team_count=2, team_sizes=(7, 6))]
    """
    if isinstance(player_count, bool) or not isinstance(player_count, int) or player_count < 0:
        raise TeamError(f'Player count must be a non-negative integer, got {player_count!r}')

    bounds = bounds or get_team_bounds()
    configurations = []

    team_count = bounds.min_teams
    while team_count <= bounds.max_teams and team_count * bounds.min_players_per_team <= player_count:
        base, extra = divmod(player_count, team_count)
        sizes = tuple(base + 1 if i < extra else base for i in range(team_count))

        if all(bounds.min_players_per_team <= size <= bounds.max_players_per_team for size in sizes):
            configurations.append(TeamConfiguration(team_count=team_count, team_sizes=sizes))
        team_count += 1

    logger.debug(f'{len(configurations)} configurations for {player_count} players')
    return configurations


def generate_team_names(count: int, rng: Optional[random.Random] = None) -> list[str]:
    """
    Generate `count` unique "Colour Noun" names.

    Colours are shuffled and reused once every colour has been taken; nouns
    never repeat, so names stay unique.
    """
    if count < 1:
        raise TeamError(f'Team count must be positive, got {count}')
    if count > len(TEAM_NOUNS):
        raise TeamError(f'Cannot name {count} teams: only {len(TEAM_NOUNS)} team nouns available')

    rng = rng or random.Random()
    colours = rng.sample(TEAM_COLOURS, len(TEAM_COLOURS))
    nouns = rng.sample(TEAM_NOUNS, count)
    return [f'{colours[i % len(colours)]} {noun}' for i, noun in enumerate(nouns)]


def _check_players(players: Sequence[str]) -> list[str]:
    if players is None or isinstance(players, str):
        raise TeamError('Players must be a list of player ids')

    roster = list(players)
    errors = []
    seen = set()
    for player in roster:
        if not isinstance(player, str) or not player.strip():
            errors.append(f'Invalid player id: {player!r}')
        elif player in seen:
            errors.append(f'Duplicate player: {player}')
        seen.add(player)

    if errors:
        raise TeamError('; '.join(errors))
    return roster


def _resolve_team_names(
    config: TeamConfiguration,
    team_names: Optional[Sequence[str]],
    rng: random.Random,
) -> list[str]:
    if team_names is None:
        return generate_team_names(config.team_count, rng)

    names = list(team_names)
    if len(names) != config.team_count:
        raise TeamError(f'Expected {config.team_count} team names, got {len(names)}')
    if len(set(names)) != len(names):
        raise TeamError('Team names must be unique')
    if any(not isinstance(name, str) or not name.strip() for name in names):
        raise TeamError('Team names must be non-empty strings')
    return names


def _draft_order(sizes: Sequence[int]) -> list[int]:
    """Team index for each pick of a snake draft, skipping teams already full."""
    filled = [0] * len(sizes)
    order = []
    forward = True

    while len(order) < sum(sizes):
        indices = range(len(sizes)) if forward else reversed(range(len(sizes)))
        for index in indices:
            if filled[index] < sizes[index]:
                order.append(index)
                filled[index] += 1
        forward = not forward

    return order


def _pair(a: str, b: str) -> Pair:
    return (a, b) if a <= b else (b, a)


def teammate_pair_counts(
    sessions: Iterable[Session],
    session_limit: Optional[int] = TEAMMATE_HISTORY_SESSIONS,
) -> dict[Pair, int]:
    """
    Count how often each pair of players has shared a team.

    Only the most recent session_limit sessions (by date) are counted; None
    counts them all. Blank roster entries are ignored.

    Returns:
        Sorted (player, player) pair -> number of sessions as teammates
    """
    ordered = sorted(sessions, key=lambda s: s.date, reverse=True)
    if session_limit is not None:
        ordered = ordered[:session_limit]

    counts: dict[Pair, int] = {}
    for session in ordered:
        for members in session.teams.values():
            present = [player for player in members if player]
            for a, b in combinations(present, 2):
                key = _pair(a, b)
                counts[key] = counts.get(key, 0) + 1
    return counts


def repeat_pairings(teams: Mapping[str, Sequence[str]], pair_counts: Mapping[Pair, int]) -> int:
    """Total earlier pairings among players now on the same team."""
    return sum(
        pair_counts.get(_pair(a, b), 0)
        for members in teams.values()
        for a, b in combinations(members, 2)
    )


def _over_limit(teams: Mapping[str, Sequence[str]], pair_counts: Mapping[Pair, int], limit: int) -> int:
    return sum(
        1
        for members in teams.values()
        for a, b in combinations(members, 2)
        if pair_counts.get(_pair(a, b), 0) >= limit
    )


def _draft(players: Sequence[str], order: Sequence[int], names: Sequence[str]) -> dict[str, list[str]]:
    teams: dict[str, list[str]] = {name: [] for name in names}
    for player, index in zip(players, order):
        teams[names[index]].append(player)
    return teams


def _spread(teams: Mapping[str, Sequence[str]], scores: Mapping[str, float]) -> float:
    totals = [sum(scores[player] for player in members) for members in teams.values()]
    return max(totals) - min(totals)


def _vary_teammates(
    ranked: list[str],
    order: list[int],
    names: list[str],
    scores: dict[str, float],
    pair_counts: Mapping[Pair, int],
    pairing_limit: int,
    rng: random.Random,
) -> list[str]:
    """
    Choose the pick order with the freshest teammate pairings.

    Candidates shuffle players within pots of POT_SIZE_FACTOR x team count
    consecutive seeds and keep the same snake draft. A candidate is eligible
    when its quality spread stays below the best player's quality, or is no
    worse than the plain draft. Candidates are compared by pairs at or over
    pairing_limit, then total repeat pairings, then spread; the plain draft
    wins ties.
    """
    def key(players):
        teams = _draft(players, order, names)
        return (
            _over_limit(teams, pair_counts, pairing_limit),
            repeat_pairings(teams, pair_counts),
            _spread(teams, scores),
        )

    bound = max(scores.values())
    best, best_key = ranked, key(ranked)
    plain_spread = best_key[2]
    pot_size = POT_SIZE_FACTOR * len(names)

    for _ in range(SEEDED_CANDIDATES):
        candidate = []
        for start in range(0, len(ranked), pot_size):
            pot = ranked[start:start + pot_size]
            rng.shuffle(pot)
            candidate.extend(pot)

        candidate_key = key(candidate)
        if candidate_key[2] >= bound and candidate_key[2] > plain_spread:
            continue
        if candidate_key < best_key:
            best, best_key = candidate, candidate_key

    logger.debug(
        f'Seeded draft: {best_key[1]} repeat pairing(s), {best_key[0]} at limit, spread {best_key[2]:.1f}'
    )
    return best


def allocate(
    players: Sequence[str],
    config: TeamConfiguration,
    method: str = 'random',
    quality_of: Optional[QualityFn] = None,
    bounds: Optional[TeamBounds] = None,
    record_history: bool = False,
    rng: Optional[random.Random] = None,
    team_names: Optional[Sequence[str]] = None,
    teammate_counts: Optional[Mapping[Pair, int]] = None,
    pairing_limit: int = PAIRING_LIMIT,
) -> Allocation:
    """
    Partition players into teams sized per the configuration.

    Methods:
    - random: shuffle, then fill teams with contiguous slices
    - seeded: order by descending quality (unrated players at the ELO
      baseline, ties in roster order), then snake draft. With
      teammate_counts, players are also shuffled within pots of nearby seeds
      and the draft with the fewest repeat teammate pairings is kept, as long
      as the team quality spread stays below the best player's quality

    Args:
        players: Eligible player ids (unique, non-blank)
        config: Chosen team configuration
        method: 'random' or 'seeded'
        quality_of: Player -> quality score (usually ELO); None means unrated
        bounds: Team limits (default: league config)
        record_history: Return one AllocationStep per assignment
        rng: Random source for shuffling and team names
        team_names: Use these names instead of generating them
        teammate_counts: Earlier pairings from teammate_pair_counts() (seeded only)
        pairing_limit: Pairings at or above this count are avoided first

    Returns:
        Allocation with teams in configuration order

    Raises:
        TeamError: For an unknown method or a configuration that does not fit
            the bounds or the roster
    """
    if method not in ALLOCATION_METHODS:
        raise TeamError(f'Unknown allocation method: {method!r} (expected one of {", ".join(ALLOCATION_METHODS)})')

    roster = _check_players(players)
    bounds = bounds or get_team_bounds()

    errors = validate_team_configuration(config, len(roster), bounds)
    if errors:
        raise TeamError('Invalid team configuration: ' + '; '.join(errors))

    rng = rng or random.Random()
    names = _resolve_team_names(config, team_names, rng)
    teams: dict[str, list[str]] = {name: [] for name in names}
    history: list[AllocationStep] = []

    def quality(player: str) -> Optional[float]:
        return quality_of(player) if quality_of is not None else None

    if method == 'random':
        shuffled = list(roster)
        rng.shuffle(shuffled)
        start = 0
        for name, size in zip(names, config.team_sizes):
            for player in shuffled[start:start + size]:
                teams[name].append(player)
                if record_history:
                    history.append(AllocationStep(len(history), player, name, quality(player)))
            start += size
    else:
        baseline = get_elo_settings().baseline
        scores = {}
        for player in roster:
            score = quality(player)
            scores[player] = baseline if score is None else score

        # sorted() is stable, so equal scores keep roster order
        ranked = sorted(roster, key=lambda p: -scores[p])
        order = _draft_order(config.team_sizes)
        if teammate_counts:
            ranked = _vary_teammates(ranked, order, names, scores, teammate_counts, pairing_limit, rng)

        for player, index in zip(ranked, order):
            name = names[index]
            teams[name].append(player)
            if record_history:
                history.append(AllocationStep(len(history), player, name, scores[player]))

    logger.debug(
        f'Allocated {len(roster)} players into {config.team_count} teams ({method}): '
        f'{", ".join(f"{name}={len(members)}" for name, members in teams.items())}'
    )

    return Allocation(teams=teams, method=method, history=history if record_history else None)


def team_quality_totals(teams: dict[str, list[str]], quality_of: QualityFn) -> dict[str, float]:
    """Summed quality per team (unrated players at the ELO baseline)."""
    baseline = get_elo_settings().baseline
    totals = {}
    for name, members in teams.items():
        total = 0.0
        for player in members:
            score = quality_of(player)
            total += baseline if score is None else score
        totals[name] = total
    return totals
