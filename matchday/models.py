"""Data models for the matchday engine."""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple


@dataclass
class Fixture:
    """A single fixture between two teams, or a bye for one team."""
    home: Optional[str]
    away: Optional[str]
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    home_scorers: Optional[Dict[str, int]] = None
    away_scorers: Optional[Dict[str, int]] = None
    is_bye: bool = False
    stage: Optional[str] = None  # None for league fixtures, else 'quarter'/'semi'/'final'

    @classmethod
    def bye(cls, team: str, stage: Optional[str] = None) -> 'Fixture':
        return cls(home=team, away=None, is_bye=True, stage=stage)

    @property
    def is_played(self) -> bool:
        """True when a non-bye fixture has both scores recorded."""
        return not self.is_bye and self.home_score is not None and self.away_score is not None

    @property
    def teams(self) -> Tuple[str, ...]:
        return tuple(team for team in (self.home, self.away) if team is not None)

    @property
    def bye_team(self) -> Optional[str]:
        if not self.is_bye:
            return None
        return self.home if self.home is not None else self.away

    def winner(self) -> Optional[str]:
        """Winning team of a played fixture; None for draws and unplayed fixtures."""
        if not self.is_played:
            return None
        if self.home_score > self.away_score:
            return self.home
        if self.away_score > self.home_score:
            return self.away
        return None

    def reversed(self) -> 'Fixture':
        """Return-leg copy: home and away swapped, scores cleared."""
        if self.is_bye:
            return Fixture(home=self.home, away=self.away, is_bye=True, stage=self.stage)
        return Fixture(home=self.away, away=self.home, stage=self.stage)


Round = List[Fixture]


@dataclass(frozen=True)
class TeamConfiguration:
    """A candidate partition of the eligible players into teams."""
    team_count: int
    team_sizes: Tuple[int, ...]

    @property
    def total_players(self) -> int:
        return sum(self.team_sizes)


@dataclass(frozen=True)
class AllocationStep:
    """One draft decision, recorded for replay by the caller."""
    step_index: int
    player_id: str
    team_name: str
    quality_score: Optional[float] = None


@dataclass
class Allocation:
    """Result of a team allocation."""
    teams: Dict[str, List[str]]
    method: str
    history: Optional[List[AllocationStep]] = None


@dataclass(frozen=True)
class ScheduleStatus:
    """Completion state of a schedule (byes excluded)."""
    is_complete: bool
    played_count: int
    total_count: int


@dataclass
class Standing:
    """League table row for one team."""
    team: str
    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    points: int = 0

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against


@dataclass(frozen=True)
class PlayerSessionRecord:
    """Points earned by one player on one session date."""
    date: Optional[date]
    team: str
    appearance_points: int
    match_points: int
    bonus_points: int
    knockout_points: int
    total_points: int
    elo_rating_after: float
    league_winner: bool = False
    cup_winner: bool = False


@dataclass(frozen=True)
class RankingMetadata:
    """League-wide figures the ranking points were derived from."""
    global_average: float
    max_appearances: int
    confidence_threshold: int
    total_players: int


@dataclass(frozen=True)
class PlayerRankingSnapshot:
    """Derived ranking figures for one player, rebuilt from full history."""
    appearances: int
    total_points: int
    raw_average: float
    weighted_average: float
    ranking_points: float
    elo_rating: float
    rank: int
    pull_factor: float = 0.0
    has_full_confidence: bool = True
    games_until_full_confidence: int = 0
    last_appearance: Optional[date] = None
    league_wins: int = 0
    cup_wins: int = 0
    previous_rank: Optional[int] = None
    rank_movement: int = 0


@dataclass
class EloUpdate:
    """Ratings after a batch of fixtures, plus any skipped-fixture warnings."""
    ratings: Dict[str, float]
    warnings: List[str] = field(default_factory=list)


@dataclass
class Session:
    """Everything recorded for one competition date."""
    date: date
    teams: Dict[str, List[str]]
    rounds: List[Round] = field(default_factory=list)
    knockout: List[Fixture] = field(default_factory=list)

    def league_fixtures(self) -> List[Fixture]:
        return [fixture for round_ in self.rounds for fixture in round_]

    def has_completed_fixtures(self) -> bool:
        return any(f.is_played for f in self.league_fixtures()) or any(
            f.is_played for f in self.knockout
        )


@dataclass
class LeagueRankings:
    """Result of replaying a league's complete session history."""
    players: Dict[str, PlayerRankingSnapshot]
    history: Dict[str, List[PlayerSessionRecord]]
    rank_history: Dict[str, Dict[date, int]]
    calculated_dates: List[date]
    metadata: RankingMetadata
    warnings: List[str] = field(default_factory=list)
