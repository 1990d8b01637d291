from .errors import EngineError, SchedulingError, TeamError, RankingError
from .models import (
    Fixture,
    TeamConfiguration,
    AllocationStep,
    Allocation,
    ScheduleStatus,
    Standing,
    PlayerSessionRecord,
    PlayerRankingSnapshot,
    RankingMetadata,
    EloUpdate,
    Session,
    LeagueRankings,
)
from .schemas import FixtureSchema, SessionSchema, LeagueConfig
from .schedule import (
    generate_round_robin_rounds,
    generate_double_round_robin,
    FixtureScheduler,
    schedule_status,
    completed_fixtures,
)
from .teams import (
    configurations_for,
    generate_team_names,
    allocate,
    team_quality_totals,
    teammate_pair_counts,
    repeat_pairings,
)
from .standings import (
    calculate_standings,
    standings_positions,
    league_winner,
    cup_winner,
    knockout_bracket,
    advance_winners,
    goal_tally,
)
from .scoring import match_points, bonus_points, knockout_wins, score_session
from .elo import (
    expected_score,
    actual_score,
    team_rating,
    update_elo,
    inactive_weeks,
    apply_decay,
    decay_ratings,
)
from .rankings import (
    compute_rankings,
    ranking_metadata,
    rank_movement,
    provisional_rating,
    seeding_qualities,
    rebuild_rankings,
)

__all__ = [
    # Errors
    'EngineError',
    'SchedulingError',
    'TeamError',
    'RankingError',
    # Models
    'Fixture',
    'TeamConfiguration',
    'AllocationStep',
    'Allocation',
    'ScheduleStatus',
    'Standing',
    'PlayerSessionRecord',
    'PlayerRankingSnapshot',
    'RankingMetadata',
    'EloUpdate',
    'Session',
    'LeagueRankings',
    # Schemas
    'FixtureSchema',
    'SessionSchema',
    'LeagueConfig',
    # Scheduling
    'generate_round_robin_rounds',
    'generate_double_round_robin',
    'FixtureScheduler',
    'schedule_status',
    'completed_fixtures',
    # Team allocation
    'configurations_for',
    'generate_team_names',
    'allocate',
    'team_quality_totals',
    'teammate_pair_counts',
    'repeat_pairings',
    # Standings
    'calculate_standings',
    'standings_positions',
    'league_winner',
    'cup_winner',
    'knockout_bracket',
    'advance_winners',
    'goal_tally',
    # Session points
    'match_points',
    'bonus_points',
    'knockout_wins',
    'score_session',
    # ELO
    'expected_score',
    'actual_score',
    'team_rating',
    'update_elo',
    'inactive_weeks',
    'apply_decay',
    'decay_ratings',
    # Rankings
    'compute_rankings',
    'ranking_metadata',
    'rank_movement',
    'provisional_rating',
    'seeding_qualities',
    'rebuild_rankings',
]
