"""
Ballot validation for ranked-choice questions.

A ranking is checked against the question's candidate list before it is
accepted. The tabulators in ``tabulation`` only ever see accepted ballots.
"""

import logging
from enum import Enum
from typing import Iterable, List, Sequence, Tuple

logger = logging.getLogger(__name__)


class PreferentialType(str, Enum):
    """Whether voters must rank every option of a question."""

    COMPULSORY = "compulsory"
    OPTIONAL = "optional"


def filter_ranking(ranking: Sequence[str], candidates: Iterable[str]) -> List[str]:
    """Drop identifiers that are not in the candidate list, keeping order."""
    known = set(candidates)
    return [choice for choice in ranking if choice in known]


def validate_ranking(ranking: Sequence[str], candidates: Iterable[str]) -> bool:
    """
    Check a single ranking against the candidate list.

    Unknown identifiers are ignored. The ranking is valid if what remains is
    non-empty and names no candidate twice. A partial ranking is valid.

    Args:
        ranking: Candidate identifiers, most preferred first
        candidates: The question's candidate identifiers

    Returns:
        True if the ranking can be accepted
    """
    filtered = filter_ranking(ranking, candidates)
    return len(filtered) >= 1 and len(filtered) == len(set(filtered))


def is_complete_ranking(ranking: Sequence[str], candidates: Sequence[str]) -> bool:
    """True if the ranking names every candidate exactly once and nothing else."""
    return len(ranking) == len(candidates) and set(ranking) == set(candidates)


def accept_ballot(
    ranking: Sequence[str],
    candidates: Sequence[str],
    preferential_type: PreferentialType = PreferentialType.OPTIONAL,
) -> bool:
    """
    Apply the submission rules of a question to one ranking.

    Compulsory questions additionally require a complete ranking. This is a
    caller-side rule; the tabulators accept partial rankings either way.
    """
    if preferential_type == PreferentialType.COMPULSORY and not is_complete_ranking(
        ranking, candidates
    ):
        return False
    return validate_ranking(ranking, candidates)


def filter_ballots(
    ballots: Iterable[Sequence[str]],
    candidates: Sequence[str],
    preferential_type: PreferentialType = PreferentialType.OPTIONAL,
) -> Tuple[List[Tuple[str, ...]], int]:
    """
    Split a batch of rankings into accepted ballots and a rejected count.

    Args:
        ballots: Raw rankings
        candidates: The question's candidate identifiers
        preferential_type: Submission rule to apply

    Returns:
        Tuple of (accepted ballots as tuples, number rejected)
    """
    accepted = []
    rejected = 0
    for ranking in ballots:
        if accept_ballot(ranking, candidates, preferential_type):
            accepted.append(tuple(ranking))
        else:
            rejected += 1

    if rejected > 0:
        logger.warning(
            f"Rejected {rejected} of {len(accepted) + rejected} ballots "
            f"({preferential_type.value} ranking)"
        )

    return accepted, rejected
