"""
Condorcet tabulation with Schulze-method cycle resolution.

The count builds a pairwise preference matrix from the ballots. A candidate
who beats every rival head-to-head is the Condorcet winner. When preferences
are cyclic, the Schulze method picks the candidate whose strongest paths beat
the most rivals.

A candidate left off a ballot counts as that voter's least preferred option:
every ranked candidate on the ballot beats it, and two unranked candidates
stay unordered.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from .common import check_candidates, convert_numpy_types

logger = logging.getLogger(__name__)

Matrix = Dict[str, Dict[str, int]]

TIE = "Tie"


@dataclass(frozen=True)
class PairwiseResult:
    """Head-to-head counts for one pair of candidates."""

    candidate_a: str
    candidate_b: str
    wins_a: int
    wins_b: int

    @property
    def head_to_head_winner(self) -> str:
        if self.wins_a > self.wins_b:
            return self.candidate_a
        elif self.wins_b > self.wins_a:
            return self.candidate_b
        return TIE

    def to_dict(self) -> Dict:
        return {
            "candidateA": self.candidate_a,
            "candidateB": self.candidate_b,
            "winsA": self.wins_a,
            "winsB": self.wins_b,
        }


@dataclass(frozen=True)
class CondorcetStep:
    """One human-readable step of the count."""

    step: int
    description: str
    winner: Optional[str] = None
    pairwise: List[PairwiseResult] = field(default_factory=list)

    def to_dict(self) -> Dict:
        data = {"step": self.step, "description": self.description, "winner": self.winner}
        if self.pairwise:
            data["pairwise"] = [p.to_dict() for p in self.pairwise]
        return data


@dataclass(frozen=True)
class CandidateRecord:
    """Head-to-head record of a candidate against all others."""

    candidate: str
    wins: int
    losses: int
    ties: int

    def to_dict(self) -> Dict:
        return {
            "candidate": self.candidate,
            "wins": self.wins,
            "losses": self.losses,
            "ties": self.ties,
        }


@dataclass(frozen=True)
class CondorcetResult:
    """Outcome of a Condorcet count."""

    winner: Optional[str]
    condorcet_winner: bool
    method: str  # "condorcet" or "schulze"
    pairwise_matrix: Matrix
    rounds: List[CondorcetStep]
    total_votes: int
    rankings: List[CandidateRecord]
    strongest_paths: Optional[Matrix] = None
    schulze_ranking: List[str] = field(default_factory=list)

    @property
    def pairwise(self) -> List[PairwiseResult]:
        """Pair list recorded on the comparison step."""
        return self.rounds[0].pairwise if self.rounds else []

    def to_dict(self) -> Dict:
        return {
            "winner": self.winner,
            "condorcetWinner": self.condorcet_winner,
            "method": self.method,
            "pairwiseMatrix": {a: dict(row) for a, row in self.pairwise_matrix.items()},
            "rounds": [r.to_dict() for r in self.rounds],
            "totalVotes": self.total_votes,
            "rankings": [r.to_dict() for r in self.rankings],
            "strongestPaths": (
                {a: dict(row) for a, row in self.strongest_paths.items()}
                if self.strongest_paths is not None
                else None
            ),
            "schulzeRanking": list(self.schulze_ranking),
        }


def _to_matrix(array: np.ndarray, candidates: List[str]) -> Matrix:
    return convert_numpy_types(
        {a: {b: array[i, j] for j, b in enumerate(candidates)} for i, a in enumerate(candidates)}
    )


def _to_array(matrix: Matrix, candidates: List[str]) -> np.ndarray:
    return np.array(
        [[matrix[a][b] for b in candidates] for a in candidates], dtype=np.int64
    ).reshape(len(candidates), len(candidates))


def _pairwise_counts(ballots: Sequence[Sequence[str]], candidates: List[str]) -> np.ndarray:
    index = {c: i for i, c in enumerate(candidates)}
    n = len(candidates)
    counts = np.zeros((n, n), dtype=np.int64)

    for ballot in ballots:
        ranked = [index[c] for c in ballot if c in index]
        if not ranked:
            continue
        unranked = np.ones(n, dtype=bool)
        unranked[ranked] = False
        for position, i in enumerate(ranked):
            later = np.array(ranked[position + 1 :], dtype=np.intp)
            counts[i, later] += 1
            counts[i, unranked] += 1

    return counts


def build_pairwise_matrix(
    ballots: Sequence[Sequence[str]], candidates: Sequence[str]
) -> Matrix:
    """
    Count head-to-head preferences.

    ``matrix[a][b]`` is the number of ballots ranking ``a`` strictly ahead of
    ``b``, including ballots that rank ``a`` and leave ``b`` off.
    """
    candidate_list = check_candidates(candidates)
    return _to_matrix(_pairwise_counts(ballots, candidate_list), candidate_list)


def find_condorcet_winner(matrix: Matrix, candidates: Sequence[str]) -> Optional[str]:
    """First candidate, in caller order, beating every other one head-to-head."""
    for a in candidates:
        if all(matrix[a][b] > matrix[b][a] for b in candidates if b != a):
            return a
    return None


def _strongest_path_array(d: np.ndarray) -> np.ndarray:
    p = np.where(d > d.T, d, 0)
    np.fill_diagonal(p, 0)
    for k in range(len(d)):
        p = np.maximum(p, np.minimum(p[:, k][:, np.newaxis], p[k, :][np.newaxis, :]))
        np.fill_diagonal(p, 0)
    return p


def schulze_strongest_paths(matrix: Matrix, candidates: Sequence[str]) -> Matrix:
    """
    Strength of the strongest path between every ordered pair.

    A direct link ``i -> j`` has strength ``matrix[i][j]`` when ``i`` beats
    ``j`` head-to-head and 0 otherwise; a path is as strong as its weakest link.
    """
    candidate_list = list(candidates)
    p = _strongest_path_array(_to_array(matrix, candidate_list))
    return _to_matrix(p, candidate_list)


def _rank_by_path_wins(p: np.ndarray, candidates: List[str]) -> List[str]:
    wins = (p > p.T).sum(axis=1)
    order = sorted(range(len(candidates)), key=lambda i: -int(wins[i]))
    return [candidates[i] for i in order]


def schulze_ranking(matrix: Matrix, candidates: Sequence[str]) -> List[str]:
    """
    Order candidates by how many rivals they beat via strongest paths.

    Candidates with the same number of wins keep their caller order.
    """
    candidate_list = list(candidates)
    p = _strongest_path_array(_to_array(matrix, candidate_list))
    return _rank_by_path_wins(p, candidate_list)


def head_to_head_records(matrix: Matrix, candidates: Sequence[str]) -> List[CandidateRecord]:
    """Win/loss/tie record of every candidate, best record first."""
    records = []
    for a in candidates:
        wins = losses = ties = 0
        for b in candidates:
            if a == b:
                continue
            if matrix[a][b] > matrix[b][a]:
                wins += 1
            elif matrix[a][b] < matrix[b][a]:
                losses += 1
            else:
                ties += 1
        records.append(CandidateRecord(candidate=a, wins=wins, losses=losses, ties=ties))

    return sorted(records, key=lambda r: (-r.wins, r.losses))


def tabulate_condorcet(
    ballots: Sequence[Sequence[str]], candidates: Sequence[str]
) -> CondorcetResult:
    """
    Run a Condorcet count, resolving cycles with the Schulze method.

    Args:
        ballots: Accepted rankings, most preferred first; partial rankings allowed
        candidates: Unique candidate identifiers in a stable order

    Returns:
        CondorcetResult with the winner, the matrix and the step trace

    Raises:
        ValueError: If the candidate list is empty or has duplicates
    """
    candidate_list = check_candidates(candidates)

    if len(ballots) == 0:
        logger.info("No ballots cast, Condorcet count has no winner")
        return CondorcetResult(
            winner=None,
            condorcet_winner=False,
            method="condorcet",
            pairwise_matrix={},
            rounds=[],
            total_votes=0,
            rankings=[],
        )

    logger.info(
        f"Starting Condorcet tabulation: {len(ballots)} ballots, "
        f"{len(candidate_list)} candidates"
    )

    counts = _pairwise_counts(ballots, candidate_list)
    matrix = _to_matrix(counts, candidate_list)

    pairwise = [
        PairwiseResult(
            candidate_a=a,
            candidate_b=b,
            wins_a=matrix[a][b],
            wins_b=matrix[b][a],
        )
        for i, a in enumerate(candidate_list)
        for b in candidate_list[i + 1 :]
    ]

    steps = [
        CondorcetStep(
            step=1,
            description=(
                "Pairwise comparison: each candidate is compared head-to-head "
                "against every other candidate."
            ),
            pairwise=pairwise,
        )
    ]
    rankings = head_to_head_records(matrix, candidate_list)

    winner = find_condorcet_winner(matrix, candidate_list)
    if winner is not None:
        steps.append(
            CondorcetStep(
                step=2,
                description=(
                    f"{winner} is the Condorcet winner: they beat every other "
                    "candidate in head-to-head comparison."
                ),
                winner=winner,
            )
        )
        logger.info(f"Condorcet tabulation complete: {winner} is the Condorcet winner")
        return CondorcetResult(
            winner=winner,
            condorcet_winner=True,
            method="condorcet",
            pairwise_matrix=matrix,
            rounds=steps,
            total_votes=len(ballots),
            rankings=rankings,
        )

    logger.info("No Condorcet winner, resolving cycle with the Schulze method")
    steps.append(
        CondorcetStep(
            step=2,
            description=(
                "No candidate beats all others head-to-head (cyclical preferences "
                "detected). Resolving via the Schulze method, which finds the "
                "strongest paths of preference through all candidates."
            ),
        )
    )

    p = _strongest_path_array(counts)
    ranking = _rank_by_path_wins(p, candidate_list)
    winner = ranking[0]

    logger.debug(f"Schulze ranking: {', '.join(ranking)}")

    steps.append(
        CondorcetStep(
            step=3,
            description=f"{winner} wins via the Schulze method (strongest path resolution).",
            winner=winner,
        )
    )
    logger.info(f"Condorcet tabulation complete: {winner} wins via Schulze")

    return CondorcetResult(
        winner=winner,
        condorcet_winner=False,
        method="schulze",
        pairwise_matrix=matrix,
        rounds=steps,
        total_votes=len(ballots),
        rankings=rankings,
        strongest_paths=_to_matrix(p, candidate_list),
        schulze_ranking=ranking,
    )
