"""Confidence-weighted ranking points, provisional seeding and full-history replay."""

import datetime
import logging
from collections import Counter
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from .config import get_config, get_elo_settings, get_ranking_settings
from .elo import decay_ratings, update_elo
from .errors import RankingError
from .models import (
    LeagueRankings,
    PlayerRankingSnapshot,
    PlayerSessionRecord,
    RankingMetadata,
    Session,
)
from .schemas import LeagueConfig, RankingSettings
from .scoring import score_session
from .utils import round_half_up

logger = logging.getLogger('matchday.rankings')


def _appearances(records: Iterable[PlayerSessionRecord]) -> List[PlayerSessionRecord]:
    return [record for record in records if record.team]


def _confidence_threshold(max_appearances: int, settings: RankingSettings) -> int:
    if settings.confidence_threshold is not None:
        return settings.confidence_threshold
    return max(1, round_half_up(max_appearances * settings.confidence_fraction))


def ranking_metadata(
    histories: Dict[str, List[PlayerSessionRecord]],
    settings: Optional[RankingSettings] = None,
) -> RankingMetadata:
    """
    League-wide figures used to weight ranking points.

    global_average is total points over total appearances across all players
    (not a mean of player averages). Players without an appearance are not
    counted.
    """
    settings = settings or get_ranking_settings()

    total_points = 0
    total_appearances = 0
    max_appearances = 0
    players = 0

    for records in histories.values():
        played = _appearances(records)
        if not played:
            continue
        players += 1
        total_points += sum(record.total_points for record in played)
        total_appearances += len(played)
        max_appearances = max(max_appearances, len(played))

    if not players:
        return RankingMetadata(global_average=0.0, max_appearances=0, confidence_threshold=0, total_players=0)

    return RankingMetadata(
        global_average=total_points / total_appearances,
        max_appearances=max_appearances,
        confidence_threshold=_confidence_threshold(max_appearances, settings),
        total_players=players,
    )


def compute_rankings(
    histories: Dict[str, List[PlayerSessionRecord]],
    settings: Optional[RankingSettings] = None,
    elo_ratings: Optional[Dict[str, float]] = None,
) -> Dict[str, PlayerRankingSnapshot]:
    """
    Rank players from their complete session history.

    Below the confidence threshold a player's average is pulled toward the
    league's global average:

        pull = clamp((threshold - appearances) / threshold * pull_strength, 0, 1)
        weighted = raw - pull * (raw - global_average)

    and ranking_points = weighted * max appearances in the league.

    Args:
        histories: Player -> session records (records without a team are
            non-appearances and ignored)
        settings: Ranking settings (default: league config)
        elo_ratings: Current ratings; falls back to each player's last
            recorded rating

    Returns:
        Dict of player -> snapshot, ordered by rank (ranking points desc,
        total points desc, name asc)

    Example:
        >>> snapshots = compute_rankings(histories)
        >>> next(iter(snapshots))  # leader
        'alice'
    """
    settings = settings or get_ranking_settings()
    elo_ratings = elo_ratings or {}
    baseline = get_elo_settings().baseline
    metadata = ranking_metadata(histories, settings)
    threshold = metadata.confidence_threshold

    unranked = []
    for player, records in histories.items():
        played = _appearances(records)
        if not played:
            continue

        appearances = len(played)
        total_points = sum(record.total_points for record in played)
        raw_average = total_points / appearances

        if appearances >= threshold:
            pull = 0.0
            weighted = raw_average
        else:
            pull = (threshold - appearances) / threshold * settings.pull_strength
            pull = max(0.0, min(1.0, pull))
            weighted = raw_average - pull * (raw_average - metadata.global_average)

        if player in elo_ratings:
            elo_rating = elo_ratings[player]
        else:
            elo_rating = played[-1].elo_rating_after if played[-1].elo_rating_after is not None else baseline

        unranked.append(
            (
                player,
                PlayerRankingSnapshot(
                    appearances=appearances,
                    total_points=total_points,
                    raw_average=raw_average,
                    weighted_average=weighted,
                    ranking_points=weighted * metadata.max_appearances,
                    elo_rating=elo_rating,
                    rank=0,
                    pull_factor=pull,
                    has_full_confidence=appearances >= threshold,
                    games_until_full_confidence=max(0, threshold - appearances),
                    last_appearance=played[-1].date,
                    league_wins=sum(1 for record in played if record.league_winner),
                    cup_wins=sum(1 for record in played if record.cup_winner),
                ),
            )
        )

    unranked.sort(key=lambda item: (-item[1].ranking_points, -item[1].total_points, item[0]))
    return {player: replace(snapshot, rank=index + 1) for index, (player, snapshot) in enumerate(unranked)}


def rank_movement(previous_rank: Optional[int], current_rank: int) -> int:
    """Places moved since the previous calculation (positive = moved up)."""
    if previous_rank is None:
        return 0
    return previous_rank - current_rank


def provisional_rating(actual: float, appearances: int, anchor: float, threshold: int) -> float:
    """
    Blend a newcomer's rating from the anchor toward their actual rating.

    Moves linearly from anchor (0 appearances) to actual (threshold
    appearances or more).
    """
    if appearances >= threshold:
        return actual
    return anchor + (actual - anchor) * (appearances / threshold)


def seeding_qualities(
    players: Iterable[str],
    snapshots: Dict[str, PlayerRankingSnapshot],
    settings: Optional[RankingSettings] = None,
) -> Dict[str, float]:
    """
    Quality scores for seeded allocation, with provisional ratings for newcomers.

    Established players (at least provisional_threshold appearances) use
    their ELO rating. Everyone else starts at provisional_anchor_factor times
    the weakest established rating (the ELO baseline if nobody is established
    yet) and converges on their own rating as they play.
    """
    settings = settings or get_ranking_settings()
    baseline = get_elo_settings().baseline
    threshold = settings.provisional_threshold

    established = [s.elo_rating for s in snapshots.values() if s.appearances >= threshold]
    anchor = min(established) * settings.provisional_anchor_factor if established else baseline

    qualities = {}
    for player in players:
        snapshot = snapshots.get(player)
        appearances = snapshot.appearances if snapshot else 0
        actual = snapshot.elo_rating if snapshot else baseline
        qualities[player] = provisional_rating(actual, appearances, anchor, threshold)
    return qualities


def rebuild_rankings(
    sessions: Iterable[Session],
    config: Optional[LeagueConfig] = None,
    as_of: Optional[datetime.date] = None,
) -> LeagueRankings:
    """
    Replay a league's complete session history into rankings.

    Sessions are processed by date. A session without teams, without league
    rounds, or without any completed fixture is skipped. For each processed
    session:
    - ratings decay for inactive weeks
    - league fixtures update ELO (K league), then knockout fixtures (K cup)
    - every rostered player gets a session record
    - every player seen so far is ranked for that date

    Args:
        sessions: All sessions of the league, in any order
        config: League configuration (default: get_config())
        as_of: Apply inactivity decay up to this date at the end

    Returns:
        LeagueRankings with final snapshots, per-player history and rank
        history

    Raises:
        RankingError: If two sessions share a date
    """
    config = config or get_config()
    ordered = sorted(sessions, key=lambda s: s.date)

    dates = [session.date for session in ordered]
    duplicates = sorted(d for d, count in Counter(dates).items() if count > 1)
    if duplicates:
        raise RankingError(f'Duplicate session dates: {", ".join(d.isoformat() for d in duplicates)}')

    ratings: Dict[str, float] = {}
    last_appearances: Dict[str, datetime.date] = {}
    applied_weeks: Dict[str, int] = {}
    history: Dict[str, List[PlayerSessionRecord]] = {}
    rank_history: Dict[str, Dict[datetime.date, int]] = {}
    calculated_dates: List[datetime.date] = []
    warnings: List[str] = []

    for session in ordered:
        if not session.teams or not session.rounds or not session.has_completed_fixtures():
            logger.debug(f'Skipping {session.date}: no completed fixtures')
            continue

        ratings, applied_weeks = decay_ratings(ratings, last_appearances, session.date, applied_weeks, config.elo)

        league = update_elo(ratings, session.league_fixtures(), session.teams, 'league', config.elo)
        cup = update_elo(league.ratings, session.knockout, session.teams, 'cup', config.elo)
        warnings.extend(f'{session.date}: {warning}' for warning in league.warnings + cup.warnings)

        ratings = cup.ratings
        for players in session.teams.values():
            for player in players:
                if player:
                    ratings.setdefault(player, config.elo.baseline)

        records = score_session(
            session.league_fixtures(),
            session.teams,
            knockout=session.knockout,
            session_date=session.date,
            elo_ratings=ratings,
            settings=config.rankings,
        )
        for player, record in records.items():
            history.setdefault(player, []).append(record)
            last_appearances[player] = session.date
            applied_weeks[player] = 0

        for player, snapshot in compute_rankings(history, config.rankings, ratings).items():
            rank_history.setdefault(player, {})[session.date] = snapshot.rank

        calculated_dates.append(session.date)
        logger.debug(f'Processed {session.date}: {len(records)} players')

    if as_of is not None:
        ratings, applied_weeks = decay_ratings(ratings, last_appearances, as_of, applied_weeks, config.elo)

    players = {}
    for player, snapshot in compute_rankings(history, config.rankings, ratings).items():
        ranked_dates = sorted(rank_history.get(player, {}))
        previous = rank_history[player][ranked_dates[-2]] if len(ranked_dates) >= 2 else None
        players[player] = replace(
            snapshot,
            previous_rank=previous,
            rank_movement=rank_movement(previous, snapshot.rank),
        )

    logger.info(f'Rebuilt rankings for {len(players)} players over {len(calculated_dates)} sessions')

    return LeagueRankings(
        players=players,
        history=history,
        rank_history=rank_history,
        calculated_dates=calculated_dates,
        metadata=ranking_metadata(history, config.rankings),
        warnings=warnings,
    )
