"""Pydantic schemas for league configuration and caller-supplied session data."""

import datetime

from pydantic import BaseModel, Field, field_validator

from .constants import (
    APPEARANCE_POINTS,
    BONUS_MULTIPLIER,
    CONFIDENCE_FRACTION,
    DEFAULT_TEAM_BOUNDS,
    DRAW_POINTS,
    ELO_BASELINE_RATING,
    ELO_DECAY_RATE,
    ELO_K_CUP,
    ELO_K_LEAGUE,
    KNOCKOUT_POINTS,
    PROVISIONAL_ANCHOR_FACTOR,
    PROVISIONAL_THRESHOLD,
    PULL_STRENGTH,
    TEAM_NOUNS,
    WIN_POINTS,
)
from .models import Fixture, Session


class TeamBounds(BaseModel):
    """League limits on team count and team size."""

    min_teams: int = Field(DEFAULT_TEAM_BOUNDS['min_teams'], ge=2, le=len(TEAM_NOUNS))
    max_teams: int = Field(DEFAULT_TEAM_BOUNDS['max_teams'], ge=2, le=len(TEAM_NOUNS))
    min_players_per_team: int = Field(DEFAULT_TEAM_BOUNDS['min_players_per_team'], ge=1, le=50)
    max_players_per_team: int = Field(DEFAULT_TEAM_BOUNDS['max_players_per_team'], ge=1, le=50)

    @field_validator('max_teams')
    @classmethod
    def validate_team_range(cls, v, info):
        """Ensure max_teams is not below min_teams."""
        min_teams = info.data.get('min_teams')
        if min_teams is not None and v < min_teams:
            raise ValueError(f'max_teams ({v}) must be >= min_teams ({min_teams})')
        return v

    @field_validator('max_players_per_team')
    @classmethod
    def validate_size_range(cls, v, info):
        """Ensure max_players_per_team is not below min_players_per_team."""
        min_size = info.data.get('min_players_per_team')
        if min_size is not None and v < min_size:
            raise ValueError(
                f'max_players_per_team ({v}) must be >= min_players_per_team ({min_size})'
            )
        return v

    class Config:
        extra = 'forbid'


class RankingSettings(BaseModel):
    """Points accounting and ranking-point weighting."""

    appearance_points: int = Field(APPEARANCE_POINTS, ge=0)
    win_points: int = Field(WIN_POINTS, ge=0)
    draw_points: int = Field(DRAW_POINTS, ge=0)
    bonus_multiplier: int = Field(BONUS_MULTIPLIER, ge=0)
    knockout_points: int = Field(KNOCKOUT_POINTS, ge=0)
    confidence_fraction: float = Field(CONFIDENCE_FRACTION, gt=0, le=1)
    confidence_threshold: int | None = Field(None, ge=1)
    pull_strength: float = Field(PULL_STRENGTH, ge=0)
    provisional_threshold: int = Field(PROVISIONAL_THRESHOLD, ge=1)
    provisional_anchor_factor: float = Field(PROVISIONAL_ANCHOR_FACTOR, gt=0, le=1)

    class Config:
        extra = 'forbid'


class EloSettings(BaseModel):
    """ELO model parameters."""

    baseline: float = Field(ELO_BASELINE_RATING, gt=0)
    k_league: float = Field(ELO_K_LEAGUE, gt=0)
    k_cup: float = Field(ELO_K_CUP, gt=0)
    decay_rate: float = Field(ELO_DECAY_RATE, ge=0, lt=1)

    class Config:
        extra = 'forbid'


class LeagueConfig(BaseModel):
    """League configuration settings."""

    team_generation: TeamBounds = Field(default_factory=TeamBounds)
    rankings: RankingSettings = Field(default_factory=RankingSettings)
    elo: EloSettings = Field(default_factory=EloSettings)

    class Config:
        extra = 'forbid'


class FixtureSchema(BaseModel):
    """Fixture as stored by the caller."""

    home: str | None = None
    away: str | None = None
    home_score: int | None = Field(None, ge=0)
    away_score: int | None = Field(None, ge=0)
    home_scorers: dict[str, int] | None = None
    away_scorers: dict[str, int] | None = None
    is_bye: bool = False
    stage: str | None = Field(None, pattern=r'^(quarter|semi|final)$')

    @field_validator('home_scorers', 'away_scorers')
    @classmethod
    def validate_scorers(cls, v):
        """Ensure goal counts are positive."""
        if v is None:
            return v
        for player, goals in v.items():
            if goals < 1:
                raise ValueError(f'Invalid goal count for {player}: {goals}')
        return v

    def to_fixture(self) -> Fixture:
        return Fixture(
            home=self.home,
            away=self.away,
            home_score=self.home_score,
            away_score=self.away_score,
            home_scorers=dict(self.home_scorers) if self.home_scorers is not None else None,
            away_scorers=dict(self.away_scorers) if self.away_scorers is not None else None,
            is_bye=self.is_bye,
            stage=self.stage,
        )

    class Config:
        extra = 'forbid'


class SessionSchema(BaseModel):
    """One competition date: teams, league rounds and knockout fixtures."""

    date: datetime.date
    teams: dict[str, list[str]]
    rounds: list[list[FixtureSchema]] = Field(default_factory=list)
    knockout: list[FixtureSchema] = Field(default_factory=list)

    @field_validator('teams')
    @classmethod
    def validate_teams(cls, v):
        """Ensure no player is listed on two teams."""
        seen = set()
        duplicates = set()
        for players in v.values():
            for player in players:
                if player in seen:
                    duplicates.add(player)
                seen.add(player)
        if duplicates:
            raise ValueError(f'Players on more than one team: {", ".join(sorted(duplicates))}')
        return v

    def to_session(self) -> Session:
        return Session(
            date=self.date,
            teams={name: list(players) for name, players in self.teams.items()},
            rounds=[[f.to_fixture() for f in round_] for round_ in self.rounds],
            knockout=[f.to_fixture() for f in self.knockout],
        )

    class Config:
        extra = 'forbid'
