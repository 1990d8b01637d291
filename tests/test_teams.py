"""Unit tests for team configurations and allocation."""

import random
from datetime import date
from itertools import combinations

import pytest

from matchday.constants import TEAM_COLOURS, TEAM_NOUNS
from matchday.errors import TeamError
from matchday.models import Session, TeamConfiguration
from matchday.schemas import TeamBounds
from matchday.teams import (
    allocate,
    configurations_for,
    generate_team_names,
    repeat_pairings,
    team_quality_totals,
    teammate_pair_counts,
)

BOUNDS = TeamBounds(min_teams=2, max_teams=4, min_players_per_team=5, max_players_per_team=7)


def roster(count):
    return [f'player{i:02d}' for i in range(count)]


class TestConfigurations:
    """Tests for enumerating valid team configurations."""

    def test_thirteen_players(self):
        """Test that 13 players only split as 7 + 6."""
        assert configurations_for(13, BOUNDS) == [TeamConfiguration(team_count=2, team_sizes=(7, 6))]

    def test_fifteen_players(self):
        """Test that multiple configurations are returned in team-count order."""
        configs = configurations_for(15, BOUNDS)
        assert [c.team_sizes for c in configs] == [(5, 5, 5)]

    def test_twenty_players(self):
        """Test 20 players: 2x10 too big, 3 teams and 4 teams fit."""
        configs = configurations_for(20, BOUNDS)
        assert [(c.team_count, c.team_sizes) for c in configs] == [(3, (7, 7, 6)), (4, (5, 5, 5, 5))]

    def test_sizes_non_increasing_and_sum(self):
        """Test extra players go to the first teams and sizes add up."""
        for count in range(0, 40):
            for config in configurations_for(count, BOUNDS):
                assert list(config.team_sizes) == sorted(config.team_sizes, reverse=True)
                assert config.total_players == count
                assert max(config.team_sizes) - min(config.team_sizes) <= 1

    def test_too_few_players(self):
        """Test that nine players cannot form two teams of five."""
        assert configurations_for(9, BOUNDS) == []

    def test_default_bounds_from_config(self):
        """Test that league config bounds are used when none are given."""
        configs = configurations_for(10)
        assert configs[0] == TeamConfiguration(team_count=2, team_sizes=(5, 5))

    @pytest.mark.parametrize('count', [-1, 2.5, '10'])
    def test_invalid_player_count(self, count):
        """Test that the player count must be a non-negative integer."""
        with pytest.raises(TeamError):
            configurations_for(count, BOUNDS)


class TestTeamNames:
    """Tests for colour + noun team names."""

    def test_names_unique(self):
        """Test that colours and nouns are not repeated."""
        names = generate_team_names(5, random.Random(1))
        colours = [name.split()[0] for name in names]
        nouns = [name.split()[1] for name in names]
        assert len(set(colours)) == 5
        assert len(set(nouns)) == 5

    def test_colours_cycle_past_palette(self):
        """Test that colours repeat once the palette is used up but names stay unique."""
        count = len(TEAM_COLOURS) + 3
        names = generate_team_names(count, random.Random(7))
        colours = [name.split()[0] for name in names]
        assert len(set(names)) == count
        assert len({name.split()[1] for name in names}) == count
        assert set(colours) == set(TEAM_COLOURS)
        assert colours[len(TEAM_COLOURS):] == colours[:3]

    def test_too_many_teams(self):
        """Test that requesting more teams than nouns fails."""
        with pytest.raises(TeamError, match='team nouns'):
            generate_team_names(len(TEAM_NOUNS) + 1)

    def test_bounds_capped_at_nameable_teams(self):
        """Test that team bounds cannot allow more teams than can be named."""
        with pytest.raises(ValueError):
            TeamBounds(max_teams=len(TEAM_NOUNS) + 1)

    def test_nine_team_allocation(self):
        """Test that a listed nine-team configuration can be allocated and named."""
        bounds = TeamBounds(max_teams=10, min_players_per_team=2, max_players_per_team=3)
        nine = configurations_for(18, bounds)[-1]
        assert nine.team_count == 9

        allocation = allocate(roster(18), nine, 'random', bounds=bounds, rng=random.Random(3))
        assert len(allocation.teams) == 9
        assert all(len(members) == 2 for members in allocation.teams.values())


class TestAllocationConservation:
    """Allocated teams partition the roster exactly."""

    @pytest.mark.parametrize('method', ['random', 'seeded'])
    @pytest.mark.parametrize('count', [10, 13, 17, 20, 28])
    def test_partition(self, method, count):
        """Test sizes match the configuration with no duplicates or omissions."""
        players = roster(count)
        quality = {p: 900 + i * 7 for i, p in enumerate(players)}
        for config in configurations_for(count, BOUNDS):
            allocation = allocate(
                players, config, method=method, quality_of=quality.get, bounds=BOUNDS, rng=random.Random(count)
            )
            sizes = [len(members) for members in allocation.teams.values()]
            assigned = [p for members in allocation.teams.values() for p in members]
            assert sizes == list(config.team_sizes)
            assert sorted(assigned) == sorted(players)
            assert allocation.method == method

    def test_input_not_mutated(self):
        """Test that the caller's roster is left alone."""
        players = roster(10)
        original = list(players)
        allocate(players, TeamConfiguration(2, (5, 5)), bounds=BOUNDS, rng=random.Random(3))
        assert players == original

    def test_random_is_reproducible(self):
        """Test that a seeded rng gives the same teams."""
        config = TeamConfiguration(2, (7, 6))
        first = allocate(roster(13), config, bounds=BOUNDS, rng=random.Random(5))
        second = allocate(roster(13), config, bounds=BOUNDS, rng=random.Random(5))
        assert first.teams == second.teams

    def test_supplied_team_names(self):
        """Test that caller-supplied names are used in order."""
        allocation = allocate(
            roster(10), TeamConfiguration(2, (5, 5)), bounds=BOUNDS, team_names=['Bibs', 'Skins']
        )
        assert list(allocation.teams) == ['Bibs', 'Skins']


class TestSeededAllocation:
    """Tests for snake-draft seeding."""

    def test_snake_order(self):
        """Test picks go 1..t then t..1."""
        players = roster(10)
        quality = {p: 2000 - i for i, p in enumerate(players)}
        allocation = allocate(
            players, TeamConfiguration(2, (5, 5)), method='seeded', quality_of=quality.get,
            bounds=BOUNDS, team_names=['A', 'B'],
        )
        assert allocation.teams['A'] == ['player00', 'player03', 'player04', 'player07', 'player08']
        assert allocation.teams['B'] == ['player01', 'player02', 'player05', 'player06', 'player09']

    def test_full_team_skipped(self):
        """Test that a smaller team stops receiving picks once full."""
        players = roster(13)
        quality = {p: 2000 - i for i, p in enumerate(players)}
        allocation = allocate(
            players, TeamConfiguration(2, (7, 6)), method='seeded', quality_of=quality.get,
            bounds=BOUNDS, team_names=['A', 'B'],
        )
        assert len(allocation.teams['A']) == 7
        assert allocation.teams['A'][-1] == 'player12'

    @pytest.mark.parametrize('seed', range(10))
    @pytest.mark.parametrize('config', [TeamConfiguration(2, (6, 6)), TeamConfiguration(3, (5, 5, 5)), TeamConfiguration(4, (5, 5, 5, 5))])
    def test_balance_bound(self, seed, config):
        """Test the spread of team totals is below the best player's quality."""
        rng = random.Random(seed)
        players = roster(config.total_players)
        quality = {p: rng.uniform(800, 1300) for p in players}
        allocation = allocate(players, config, method='seeded', quality_of=quality.get, bounds=BOUNDS, rng=rng)
        totals = team_quality_totals(allocation.teams, quality.get).values()
        assert max(totals) - min(totals) < max(quality.values())

    def test_unrated_players_at_baseline(self):
        """Test that players without a rating are ranked at 1000."""
        players = roster(10)
        quality = {'player00': 1200, 'player01': 900}
        allocation = allocate(
            players, TeamConfiguration(2, (5, 5)), method='seeded', quality_of=quality.get,
            bounds=BOUNDS, team_names=['A', 'B'], record_history=True,
        )
        picks = [step.player_id for step in allocation.history]
        assert picks[0] == 'player00'
        assert picks[-1] == 'player01'
        # Ties keep roster order
        assert picks[1:-1] == [f'player{i:02d}' for i in range(2, 10)]
        assert allocation.history[1].quality_score == 1000

    def test_without_quality_function(self):
        """Test seeded mode with no ratings falls back to roster order."""
        allocation = allocate(
            roster(10), TeamConfiguration(2, (5, 5)), method='seeded', bounds=BOUNDS, team_names=['A', 'B']
        )
        assert allocation.teams['A'][0] == 'player00'
        assert allocation.teams['B'][0] == 'player01'


class TestTeammateVariety:
    """Tests for steering seeded drafts away from repeat teammates."""

    SMALL = TeamBounds(min_players_per_team=2, max_players_per_team=3)

    def test_pair_counts(self):
        """Test pairings are counted per session from the most recent sessions."""
        sessions = [
            Session(date=date(2025, 1, 4), teams={'Blue': ['ann', 'bob', 'cat'], 'White': ['dan', '']}),
            Session(date=date(2025, 1, 11), teams={'Blue': ['bob', 'ann'], 'White': ['cat', 'dan']}),
            Session(date=date(2024, 12, 28), teams={'Blue': ['cat', 'dan']}),
        ]
        counts = teammate_pair_counts(sessions)
        assert counts == {('ann', 'bob'): 2, ('ann', 'cat'): 1, ('bob', 'cat'): 1, ('cat', 'dan'): 2}

        recent = teammate_pair_counts(sessions, session_limit=1)
        assert recent == {('ann', 'bob'): 1, ('cat', 'dan'): 1}

    def test_repeat_pairings(self):
        """Test earlier pairings are summed over every pair on each team."""
        counts = {('ann', 'bob'): 2, ('cat', 'dan'): 1, ('ann', 'cat'): 5}
        assert repeat_pairings({'Blue': ['bob', 'ann', 'dan'], 'White': ['cat']}, counts) == 2
        assert repeat_pairings({'Blue': ['ann', 'cat'], 'White': ['dan', 'cat']}, counts) == 6

    def test_avoids_repeat_pairs_within_bound(self):
        """Test the draft splits stale pairs without breaking the balance bound."""
        quality = {'ann': 400, 'bob': 300, 'cat': 200, 'dan': 100}
        counts = {('ann', 'dan'): 4, ('bob', 'cat'): 4}
        config = TeamConfiguration(2, (2, 2))

        plain = allocate(list(quality), config, 'seeded', quality.get, bounds=self.SMALL, team_names=['A', 'B'])
        assert repeat_pairings(plain.teams, counts) == 8

        allocation = allocate(
            list(quality), config, 'seeded', quality.get, bounds=self.SMALL,
            team_names=['A', 'B'], rng=random.Random(5), teammate_counts=counts,
        )
        # ann+bob vs cat+dan would be fresh but spreads 400, not below the best quality
        assert {frozenset(team) for team in allocation.teams.values()} == {
            frozenset({'ann', 'cat'}),
            frozenset({'bob', 'dan'}),
        }
        assert repeat_pairings(allocation.teams, counts) == 0

    @pytest.mark.parametrize('seed', range(10))
    @pytest.mark.parametrize('config', [TeamConfiguration(2, (6, 6)), TeamConfiguration(3, (5, 5, 5)), TeamConfiguration(4, (5, 5, 5, 5))])
    def test_balance_bound_with_history(self, seed, config):
        """Test varied drafts keep the bound and never add repeat pairings."""
        rng = random.Random(seed)
        players = roster(config.total_players)
        quality = {p: rng.uniform(800, 1300) for p in players}
        counts = {pair: rng.randint(0, 2) for pair in combinations(players, 2)}
        names = [f'Team {i}' for i in range(config.team_count)]

        plain = allocate(players, config, 'seeded', quality.get, bounds=BOUNDS, team_names=names)
        allocation = allocate(
            players, config, 'seeded', quality.get, bounds=BOUNDS, team_names=names,
            rng=rng, teammate_counts=counts,
        )

        totals = team_quality_totals(allocation.teams, quality.get).values()
        assert max(totals) - min(totals) < max(quality.values())
        assert repeat_pairings(allocation.teams, counts) <= repeat_pairings(plain.teams, counts)
        assert sorted(p for team in allocation.teams.values() for p in team) == players

    def test_history_follows_varied_draft(self):
        """Test the audit trail matches the teams chosen with teammate counts."""
        players = roster(12)
        quality = {p: 1300 - i * 10 for i, p in enumerate(players)}
        counts = {pair: 3 for pair in combinations(players[:6], 2)}
        allocation = allocate(
            players, TeamConfiguration(2, (6, 6)), 'seeded', quality.get, bounds=BOUNDS,
            record_history=True, rng=random.Random(2), teammate_counts=counts,
        )

        rebuilt = {name: [] for name in allocation.teams}
        for step in allocation.history:
            rebuilt[step.team_name].append(step.player_id)
        assert rebuilt == allocation.teams
        assert [step.step_index for step in allocation.history] == list(range(12))


class TestAllocationHistory:
    """Tests for the draft audit trail."""

    def test_history_off_by_default(self):
        """Test that no history is returned unless requested."""
        allocation = allocate(roster(10), TeamConfiguration(2, (5, 5)), bounds=BOUNDS)
        assert allocation.history is None

    @pytest.mark.parametrize('method', ['random', 'seeded'])
    def test_history_matches_teams(self, method):
        """Test one step per assignment, indexed in order."""
        players = roster(12)
        allocation = allocate(
            players, TeamConfiguration(2, (6, 6)), method=method, bounds=BOUNDS,
            record_history=True, rng=random.Random(9),
        )
        history = allocation.history
        assert [step.step_index for step in history] == list(range(12))

        rebuilt = {name: [] for name in allocation.teams}
        for step in history:
            rebuilt[step.team_name].append(step.player_id)
        assert rebuilt == allocation.teams

    def test_random_history_quality_unknown(self):
        """Test that random mode records no quality without a quality function."""
        allocation = allocate(roster(10), TeamConfiguration(2, (5, 5)), bounds=BOUNDS, record_history=True)
        assert all(step.quality_score is None for step in allocation.history)


class TestAllocationErrors:
    """Tests for invalid allocation requests."""

    def test_unknown_method(self):
        """Test that only random and seeded are accepted."""
        with pytest.raises(TeamError, match='Unknown allocation method'):
            allocate(roster(10), TeamConfiguration(2, (5, 5)), method='balanced', bounds=BOUNDS)

    def test_sizes_do_not_sum(self):
        """Test that sizes must add up to the roster."""
        with pytest.raises(TeamError, match='sum to 10 but 11'):
            allocate(roster(11), TeamConfiguration(2, (5, 5)), bounds=BOUNDS)

    def test_team_count_out_of_bounds(self):
        """Test that too many teams are rejected."""
        with pytest.raises(TeamError, match='Team count 5'):
            allocate(roster(25), TeamConfiguration(5, (5, 5, 5, 5, 5)), bounds=BOUNDS)

    def test_single_team(self):
        """Test that at least two teams are required."""
        loose = TeamBounds(min_teams=2, max_teams=4, min_players_per_team=1, max_players_per_team=10)
        with pytest.raises(TeamError, match='At least 2 teams'):
            allocate(roster(5), TeamConfiguration(1, (5,)), bounds=loose)

    def test_size_out_of_bounds(self):
        """Test that a team below the minimum size is rejected."""
        with pytest.raises(TeamError, match='size 4'):
            allocate(roster(13), TeamConfiguration(3, (5, 4, 4)), bounds=BOUNDS)

    def test_sizes_length_mismatch(self):
        """Test that the size list must match the team count."""
        with pytest.raises(TeamError, match='3 team sizes given for 2 teams'):
            allocate(roster(15), TeamConfiguration(2, (5, 5, 5)), bounds=BOUNDS)

    def test_duplicate_players(self):
        """Test that a player cannot be listed twice."""
        players = roster(9) + ['player00']
        with pytest.raises(TeamError, match='Duplicate player: player00'):
            allocate(players, TeamConfiguration(2, (5, 5)), bounds=BOUNDS)

    def test_duplicate_team_names(self):
        """Test that supplied team names must be unique."""
        with pytest.raises(TeamError, match='unique'):
            allocate(roster(10), TeamConfiguration(2, (5, 5)), bounds=BOUNDS, team_names=['A', 'A'])

    def test_status_code(self):
        """Test that team errors carry a 400 status hint."""
        with pytest.raises(TeamError) as exc_info:
            allocate(roster(10), TeamConfiguration(2, (5, 5)), method='draft', bounds=BOUNDS)
        assert exc_info.value.status_code == 400
