"""Constants and defaults for the matchday engine."""

# ELO rating defaults
ELO_BASELINE_RATING = 1000.0
ELO_K_LEAGUE = 10
ELO_K_CUP = 7
ELO_DECAY_RATE = 0.02  # 2% closer to baseline per inactive week
DAYS_PER_WEEK = 7

# Match types accepted by the ELO engine
MATCH_TYPES = ('league', 'cup')

# Session points
APPEARANCE_POINTS = 1
WIN_POINTS = 3
DRAW_POINTS = 1
BONUS_MULTIPLIER = 2
KNOCKOUT_POINTS = 3

# Ranking points confidence weighting
CONFIDENCE_FRACTION = 0.66  # Full confidence at 66% of max appearances
PULL_STRENGTH = 1.0

# Provisional seeding ratings for newcomers
PROVISIONAL_THRESHOLD = 5
PROVISIONAL_ANCHOR_FACTOR = 0.99

# Default team generation bounds
DEFAULT_TEAM_BOUNDS = {
    'min_teams': 2,
    'max_teams': 5,
    'min_players_per_team': 5,
    'max_players_per_team': 7,
}

# Allocation methods
ALLOCATION_METHODS = ('random', 'seeded')

# Teammate variety for seeded allocation
TEAMMATE_HISTORY_SESSIONS = 12  # Recent sessions counted for pairings
SEEDED_CANDIDATES = 50  # Pot-shuffled drafts tried per allocation
POT_SIZE_FACTOR = 2  # Pot holds 2x team count players
PAIRING_LIMIT = 3  # Pairs teamed this often are avoided

# Knockout stages, in bracket order
KNOCKOUT_STAGES = ('quarter', 'semi', 'final')

# Team name parts (colour + noun)
TEAM_COLOURS = [
    'Blue',
    'White',
    'Orange',
    'Green',
    'Black',
    'Red',
    'Yellow',
    'Purple',
]

TEAM_NOUNS = [
    'Badgers',
    'Comets',
    'Foxes',
    'Falcons',
    'Hornets',
    'Lions',
    'Otters',
    'Panthers',
    'Ravens',
    'Rockets',
    'Sharks',
    'Stags',
    'Tigers',
    'Vipers',
    'Wolves',
    'Wasps',
]
