"""League configuration management."""

import logging
from functools import lru_cache
from pathlib import Path

from .schemas import EloSettings, LeagueConfig, RankingSettings, TeamBounds
from .utils import load_json

logger = logging.getLogger('matchday.config')

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / 'data' / 'league_config.json'


@lru_cache(maxsize=4)
def get_config(path: Path | str | None = None) -> LeagueConfig:
    """
    Load league configuration.

    Reads data/league_config.json by default. When no path is given and the
    default file is absent (e.g. an installed package), the built-in defaults
    are used. An explicit path must exist.

    Configuration is cached per path after first load.

    Returns:
        LeagueConfig object with validated settings

    Raises:
        FileNotFoundError: If an explicit config path doesn't exist
        ValueError: If the config file has invalid structure

    Example:
        from matchday.config import get_config
        config = get_config()
        print(f"Max teams: {config.team_generation.max_teams}")
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            logger.debug('No league_config.json found, using defaults')
            return LeagueConfig()
        path = DEFAULT_CONFIG_PATH
    return load_json(path, schema=LeagueConfig)


def get_team_bounds() -> TeamBounds:
    """Get team count/size limits from config."""
    return get_config().team_generation


def get_ranking_settings() -> RankingSettings:
    """Get points and ranking settings from config."""
    return get_config().rankings


def get_elo_settings() -> EloSettings:
    """Get ELO settings from config."""
    return get_config().elo


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if the config file is modified during runtime
    and you need to reload it.
    """
    get_config.cache_clear()
