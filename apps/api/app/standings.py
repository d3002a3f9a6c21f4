"""
Standings Engine
================

Derives a ranked league table from a season's teams, matches and fair-play
records. Pure computation over snapshots: no database access.

Ranking precedence (first difference decides):
1. Points (desc)
2. Goal difference (desc)
3. Goals for (desc)
4. Goals against (asc)
5. Head-to-head between the two tied teams (points, then goal difference)
6. Fair-play points (asc, fewer is better)
7. Team name, case-insensitive (asc), then team id

Only valid matches count: completed, both scores present and non-negative,
both teams in the table and the season resolvable. Anything else is
excluded without failing the computation.
"""

import logging
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

from app.domain import (
    COUNTED_FAIR_PLAY_STATUSES,
    FairPlayEntry,
    MatchResult,
    MatchStatus,
    TeamRef,
)

logger = logging.getLogger(__name__)


POINTS_FOR_WIN = 3
POINTS_FOR_DRAW = 1


@dataclass(frozen=True)
class TeamStanding:
    """One row of the league table."""
    team: TeamRef
    matches_played: int
    wins: int
    draws: int
    losses: int
    goals_for: int
    goals_against: int
    goal_difference: int
    fair_play_points: int
    points: int
    position: int


@dataclass
class _HeadToHead:
    points: int = 0
    goals_for: int = 0
    goals_against: int = 0

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against


@dataclass
class _TeamTally:
    matches_played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    fair_play_points: int = 0
    head_to_head: Dict[UUID, _HeadToHead] = field(default_factory=dict)

    @property
    def points(self) -> int:
        return POINTS_FOR_WIN * self.wins + POINTS_FOR_DRAW * self.draws

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against

    def record(self, opponent_id: UUID, scored: int, conceded: int) -> None:
        self.matches_played += 1
        self.goals_for += scored
        self.goals_against += conceded

        h2h = self.head_to_head.setdefault(opponent_id, _HeadToHead())
        h2h.goals_for += scored
        h2h.goals_against += conceded

        if scored > conceded:
            self.wins += 1
            h2h.points += POINTS_FOR_WIN
        elif scored == conceded:
            self.draws += 1
            h2h.points += POINTS_FOR_DRAW
        else:
            self.losses += 1


# =============================================================================
# MATCH FILTER
# =============================================================================

def _is_score(value) -> bool:
    # bool is an int subclass; True is not a score
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def exclusion_reason(
    match: MatchResult,
    team_ids: Iterable[UUID],
    season_ids: Iterable[UUID],
) -> Optional[str]:
    """
    Return why a match does not count toward standings, or None if it does.
    """
    team_ids = set(team_ids)
    season_ids = set(season_ids)

    if match.status != MatchStatus.COMPLETED:
        return f"status is {getattr(match.status, 'value', match.status)}"
    if not _is_score(match.home_score) or not _is_score(match.away_score):
        return "score missing or negative"
    if match.home_team_id not in team_ids or match.away_team_id not in team_ids:
        return "team reference does not resolve"
    if match.home_team_id == match.away_team_id:
        return "home and away team are the same"
    if match.season_id is None:
        return "season reference missing"
    if season_ids and match.season_id not in season_ids:
        return "season reference does not resolve"
    return None


def partition_matches(
    teams: Sequence[TeamRef],
    matches: Iterable[MatchResult],
) -> Tuple[List[MatchResult], List[Tuple[MatchResult, str]]]:
    """Split matches into (valid, [(excluded, reason), ...])."""
    team_ids = {team.id for team in teams}
    season_ids = {team.season_id for team in teams if team.season_id is not None}

    valid: List[MatchResult] = []
    excluded: List[Tuple[MatchResult, str]] = []
    for match in matches:
        reason = exclusion_reason(match, team_ids, season_ids)
        if reason is None:
            valid.append(match)
        else:
            excluded.append((match, reason))
    return valid, excluded


# =============================================================================
# RANKING
# =============================================================================

def _canonical_teams(teams: Iterable[TeamRef]) -> List[TeamRef]:
    """De-duplicate by id and put teams in a fixed, input-independent order."""
    unique: Dict[UUID, TeamRef] = {}
    for team in teams:
        unique.setdefault(team.id, team)
    return sorted(unique.values(), key=lambda t: (t.name.casefold(), t.name, str(t.id)))


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def _make_comparator(tallies: Dict[UUID, _TeamTally]):
    def compare(a: TeamRef, b: TeamRef) -> int:
        ta, tb = tallies[a.id], tallies[b.id]

        if ta.points != tb.points:
            return tb.points - ta.points
        if ta.goal_difference != tb.goal_difference:
            return tb.goal_difference - ta.goal_difference
        if ta.goals_for != tb.goals_for:
            return tb.goals_for - ta.goals_for
        if ta.goals_against != tb.goals_against:
            return ta.goals_against - tb.goals_against

        h2h_a = ta.head_to_head.get(b.id)
        h2h_b = tb.head_to_head.get(a.id)
        if h2h_a is not None and h2h_b is not None:
            if h2h_a.points != h2h_b.points:
                return h2h_b.points - h2h_a.points
            if h2h_a.goal_difference != h2h_b.goal_difference:
                return h2h_b.goal_difference - h2h_a.goal_difference

        if ta.fair_play_points != tb.fair_play_points:
            return ta.fair_play_points - tb.fair_play_points

        name_a, name_b = a.name.casefold(), b.name.casefold()
        if name_a != name_b:
            return -1 if name_a < name_b else 1

        # Identical names: fall back to the id so the order stays total
        id_a, id_b = str(a.id), str(b.id)
        return _sign((id_a > id_b) - (id_a < id_b))

    return compare


def compute_standings(
    teams: Iterable[TeamRef],
    matches: Iterable[MatchResult],
    fair_play_records: Iterable[FairPlayEntry],
) -> List[TeamStanding]:
    """
    Compute the ranked table for one season.

    Teams with no valid matches are included with zero statistics.
    The result does not depend on the order of any input.
    """
    canonical = _canonical_teams(teams)
    valid, excluded = partition_matches(canonical, matches)

    for match, reason in excluded:
        logger.debug(f"Excluding match {match.id} from standings: {reason}")

    tallies: Dict[UUID, _TeamTally] = {team.id: _TeamTally() for team in canonical}

    for match in valid:
        tallies[match.home_team_id].record(match.away_team_id, match.home_score, match.away_score)
        tallies[match.away_team_id].record(match.home_team_id, match.away_score, match.home_score)

    for entry in fair_play_records:
        tally = tallies.get(entry.team_id)
        if tally is None:
            continue
        if entry.status in COUNTED_FAIR_PLAY_STATUSES:
            tally.fair_play_points += entry.points

    ordered = sorted(canonical, key=cmp_to_key(_make_comparator(tallies)))

    standings = []
    for position, team in enumerate(ordered, start=1):
        tally = tallies[team.id]
        standings.append(TeamStanding(
            team=team,
            matches_played=tally.matches_played,
            wins=tally.wins,
            draws=tally.draws,
            losses=tally.losses,
            goals_for=tally.goals_for,
            goals_against=tally.goals_against,
            goal_difference=tally.goal_difference,
            fair_play_points=tally.fair_play_points,
            points=tally.points,
            position=position,
        ))

    logger.debug(
        f"Computed standings for {len(standings)} teams "
        f"({len(valid)} valid matches, {len(excluded)} excluded)"
    )
    return standings
