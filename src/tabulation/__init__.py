"""
Ranked-ballot tabulation engine.

This module provides two stateless tabulators sharing one ballot contract:
- tabulate_irv: Instant-Runoff Voting with simultaneous elimination of tied-lowest candidates
- tabulate_condorcet: Condorcet pairwise comparison with Schulze cycle resolution

Results are frozen dataclasses; the export module renders them as CSV or text.
"""

from .condorcet import (
    CandidateRecord,
    CondorcetResult,
    CondorcetStep,
    PairwiseResult,
    tabulate_condorcet,
)
from .export import (
    export_condorcet_results_csv,
    export_irv_results_csv,
    format_condorcet_results,
    format_irv_results,
    write_results_csv,
)
from .irv import IRVResult, IRVRound, VoteTransfer, tabulate_irv
from .verification import IRVCrossChecker, check_condorcet_invariants, check_irv_invariants

__all__ = [
    "tabulate_irv",
    "tabulate_condorcet",
    "IRVResult",
    "IRVRound",
    "VoteTransfer",
    "CondorcetResult",
    "CondorcetStep",
    "PairwiseResult",
    "CandidateRecord",
    "export_irv_results_csv",
    "export_condorcet_results_csv",
    "format_irv_results",
    "format_condorcet_results",
    "write_results_csv",
    "IRVCrossChecker",
    "check_irv_invariants",
    "check_condorcet_invariants",
]
