"""
Ballot-side helpers: validation of submitted rankings and loading ballot files.
"""

from .loader import BallotSet, load_ballots
from .validation import (
    PreferentialType,
    accept_ballot,
    filter_ballots,
    is_complete_ranking,
    validate_ranking,
)

__all__ = [
    "BallotSet",
    "load_ballots",
    "PreferentialType",
    "accept_ballot",
    "filter_ballots",
    "is_complete_ranking",
    "validate_ranking",
]
