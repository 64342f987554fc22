"""
Instant-Runoff Voting tabulation.

Every round counts each ballot for its highest-ranked candidate still in the
race. A candidate holding a majority of the round's active votes wins;
otherwise every candidate tied at the lowest count is eliminated at once and
their ballots move to the next surviving preference. Ties that would stop the
count are broken alphabetically by candidate identifier.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

from .common import check_candidates

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VoteTransfer:
    """Where the ballots of the candidates eliminated in one round went."""

    from_candidates: List[str]
    to_counts: Dict[str, int]  # survivor -> ballots received
    exhausted_count: int
    by_candidate: Dict[str, Dict[str, int]]  # eliminated -> {survivor: ballots}

    def to_dict(self) -> Dict:
        return {
            "from": list(self.from_candidates),
            "to": dict(self.to_counts),
            "exhaustedCount": self.exhausted_count,
            "byCandidate": {k: dict(v) for k, v in self.by_candidate.items()},
        }


@dataclass(frozen=True)
class IRVRound:
    """Represents one round of IRV tabulation."""

    round_number: int
    candidates: List[str]
    votes: Dict[str, int]
    eliminated: List[str]
    transfers: Optional[VoteTransfer]
    winner: Optional[str]
    exhausted_ballots: int  # cumulative, after this round's tally
    total_active_votes: int
    majority: int

    def to_dict(self) -> Dict:
        return {
            "round": self.round_number,
            "candidates": list(self.candidates),
            "votes": dict(self.votes),
            "eliminated": list(self.eliminated),
            "transfers": self.transfers.to_dict() if self.transfers else None,
            "winner": self.winner,
        }


@dataclass(frozen=True)
class IRVResult:
    """Outcome of an IRV count."""

    winner: Optional[str]
    rounds: List[IRVRound] = field(default_factory=list)
    total_votes: int = 0
    exhausted_ballots: int = 0

    def to_dict(self) -> Dict:
        return {
            "winner": self.winner,
            "rounds": [r.to_dict() for r in self.rounds],
            "totalVotes": self.total_votes,
            "exhaustedBallots": self.exhausted_ballots,
        }


def _next_preference(preferences: Sequence[str], active: Set[str]) -> Optional[str]:
    """Highest-ranked candidate on a ballot that is still in ``active``."""
    return next((choice for choice in preferences if choice in active), None)


def _transfer_votes(
    preferences: List[List[str]],
    holders: Dict[int, str],
    eliminated: List[str],
    survivors: List[str],
) -> VoteTransfer:
    """
    Follow the ballots of eliminated candidates to their next survivor.

    Args:
        preferences: Filtered ranking of every ballot
        holders: Ballot index -> candidate counting it this round
        eliminated: Candidates leaving the race this round
        survivors: Candidates remaining, in caller order

    Returns:
        Transfer record; ballots with no surviving preference only count
        towards ``exhausted_count`` here and are flagged by the next tally
    """
    survivor_set = set(survivors)
    eliminated_set = set(eliminated)
    received = {c: {s: 0 for s in survivors} for c in eliminated}
    exhausted_count = 0

    for index, holder in holders.items():
        if holder not in eliminated_set:
            continue
        next_choice = _next_preference(preferences[index], survivor_set)
        if next_choice is None:
            exhausted_count += 1
        else:
            received[holder][next_choice] += 1

    by_candidate = {
        c: {s: n for s, n in counts.items() if n > 0} for c, counts in received.items()
    }
    to_counts = {}
    for survivor in survivors:
        total = sum(received[c][survivor] for c in eliminated)
        if total > 0:
            to_counts[survivor] = total

    return VoteTransfer(
        from_candidates=list(eliminated),
        to_counts=to_counts,
        exhausted_count=exhausted_count,
        by_candidate=by_candidate,
    )


def tabulate_irv(
    ballots: Sequence[Sequence[str]], candidates: Sequence[str]
) -> IRVResult:
    """
    Run an Instant-Runoff count.

    Args:
        ballots: Accepted rankings, most preferred first; partial rankings allowed
        candidates: Unique candidate identifiers; their order fixes the order
            of every per-round mapping in the result

    Returns:
        IRVResult with the winner and the round-by-round trace

    Raises:
        ValueError: If the candidate list is empty or has duplicates
    """
    candidate_list = check_candidates(candidates)

    if len(ballots) == 0:
        logger.info("No ballots cast, IRV count has no winner")
        return IRVResult(winner=None, rounds=[], total_votes=0, exhausted_ballots=0)

    logger.info(
        f"Starting IRV tabulation: {len(ballots)} ballots, {len(candidate_list)} candidates"
    )

    known = set(candidate_list)
    preferences = [[choice for choice in ballot if choice in known] for ballot in ballots]
    exhausted = [False] * len(preferences)

    active = list(candidate_list)
    rounds: List[IRVRound] = []
    winner = None
    round_number = 1

    while len(active) > 1:
        active_set = set(active)
        votes = {c: 0 for c in active}
        holders: Dict[int, str] = {}

        for index, ballot_preferences in enumerate(preferences):
            if exhausted[index]:
                continue
            choice = _next_preference(ballot_preferences, active_set)
            if choice is None:
                exhausted[index] = True
            else:
                votes[choice] += 1
                holders[index] = choice

        total_active = sum(votes.values())
        majority = total_active // 2 + 1
        exhausted_so_far = sum(exhausted)
        leader = max(active, key=lambda c: votes[c])

        round_winner = None
        eliminated: List[str] = []
        transfers = None
        survivors = active

        if votes[leader] >= majority:
            round_winner = leader
        elif len(active) == 2:
            first, second = active
            round_winner = leader if votes[first] != votes[second] else min(active)
        else:
            lowest = min(votes.values())
            eliminated = [c for c in active if votes[c] == lowest]
            if len(eliminated) == len(active):
                # All tied: eliminating everyone would leave no one to win
                round_winner = min(active)
                eliminated = []
            else:
                survivors = [c for c in active if c not in eliminated]
                transfers = _transfer_votes(preferences, holders, eliminated, survivors)

        logger.debug(f"Round {round_number}: {votes} (majority {majority})")
        if eliminated:
            logger.debug(f"  Eliminated {', '.join(eliminated)}: {transfers.to_counts}")

        rounds.append(
            IRVRound(
                round_number=round_number,
                candidates=list(active),
                votes=votes,
                eliminated=eliminated,
                transfers=transfers,
                winner=round_winner,
                exhausted_ballots=exhausted_so_far,
                total_active_votes=total_active,
                majority=majority,
            )
        )

        if round_winner is not None:
            winner = round_winner
            break

        active = survivors
        round_number += 1

    if winner is None and len(active) == 1:
        winner = active[0]

    result = IRVResult(
        winner=winner,
        rounds=rounds,
        total_votes=len(ballots),
        exhausted_ballots=sum(exhausted),
    )

    logger.info(
        f"IRV tabulation complete: winner {winner} after {len(rounds)} rounds, "
        f"{result.exhausted_ballots} exhausted ballots"
    )
    return result
