import logging
from typing import Dict, List, Optional, Sequence

from pyrankvote import Ballot, Candidate, instant_runoff_voting

from .condorcet import CondorcetResult, find_condorcet_winner
from .irv import IRVResult

logger = logging.getLogger(__name__)


def check_irv_invariants(
    result: IRVResult, ballot_count: Optional[int] = None
) -> List[str]:
    """
    Check the properties every IRV result must satisfy.

    Args:
        result: Result of ``tabulate_irv``
        ballot_count: Number of ballots counted, if known independently

    Returns:
        List of violation messages; empty when the result is consistent
    """
    violations = []

    if ballot_count is not None and result.total_votes != ballot_count:
        violations.append(
            f"Total votes {result.total_votes} does not match ballot count {ballot_count}"
        )

    if result.total_votes == 0:
        if result.winner is not None or result.rounds:
            violations.append("Zero-ballot count must have no winner and no rounds")
        return violations

    previous_exhausted = 0
    previous_round = None
    for round_obj in result.rounds:
        if round_obj.exhausted_ballots < previous_exhausted:
            violations.append(
                f"Round {round_obj.round_number}: exhausted ballots decreased "
                f"from {previous_exhausted} to {round_obj.exhausted_ballots}"
            )
        previous_exhausted = round_obj.exhausted_ballots

        if previous_round is not None:
            expected = [
                c for c in previous_round.candidates if c not in previous_round.eliminated
            ]
            if round_obj.candidates != expected:
                violations.append(
                    f"Round {round_obj.round_number}: active candidates "
                    f"{round_obj.candidates} do not follow from round "
                    f"{previous_round.round_number} ({expected})"
                )
        previous_round = round_obj

        if round_obj.winner is not None:
            votes = round_obj.votes
            top = max(votes.values())
            leaders = [c for c in round_obj.candidates if votes[c] == top]
            won_by_majority = votes[round_obj.winner] >= round_obj.majority
            won_by_tie_break = (
                votes[round_obj.winner] == top and round_obj.winner == min(leaders)
            )
            if not (won_by_majority or won_by_tie_break):
                violations.append(
                    f"Round {round_obj.round_number}: {round_obj.winner} won with "
                    f"{votes[round_obj.winner]} votes, below majority {round_obj.majority}"
                )

    if result.exhausted_ballots < previous_exhausted:
        violations.append(
            f"Final exhausted ballots {result.exhausted_ballots} below last round's "
            f"{previous_exhausted}"
        )
    if result.exhausted_ballots > result.total_votes:
        violations.append(
            f"Exhausted ballots {result.exhausted_ballots} exceed total votes "
            f"{result.total_votes}"
        )

    if result.rounds:
        last = result.rounds[-1]
        if last.winner is not None:
            if result.winner != last.winner:
                violations.append(
                    f"Result winner {result.winner} differs from final round winner {last.winner}"
                )
        else:
            survivors = [c for c in last.candidates if c not in last.eliminated]
            if survivors != [result.winner]:
                violations.append(
                    f"Winner {result.winner} is neither declared nor the sole survivor"
                )
    elif result.winner is None:
        violations.append("Ballots were counted but no winner was reported")

    return violations


def check_condorcet_invariants(result: CondorcetResult) -> List[str]:
    """Check head-to-head strictness and that Schulze only ran on a cycle."""
    violations = []
    matrix = result.pairwise_matrix
    candidates = list(matrix)

    if result.total_votes == 0:
        if result.winner is not None:
            violations.append("Zero-ballot count must have no winner")
        return violations

    if result.condorcet_winner:
        for other in candidates:
            if other == result.winner:
                continue
            if matrix[result.winner][other] <= matrix[other][result.winner]:
                violations.append(
                    f"Condorcet winner {result.winner} does not beat {other}: "
                    f"{matrix[result.winner][other]}-{matrix[other][result.winner]}"
                )

    if result.method == "schulze":
        strict_winner = find_condorcet_winner(matrix, candidates)
        if strict_winner is not None:
            violations.append(
                f"Schulze resolution used although {strict_winner} is a Condorcet winner"
            )

    if result.winner is not None and result.winner not in matrix:
        violations.append(f"Winner {result.winner} is not a candidate")

    return violations


class IRVCrossChecker:
    """
    Verifies our IRV winner against the PyRankVote library's count.

    PyRankVote eliminates one candidate per round and breaks ties its own
    way, so only the winner is compared.
    """

    def __init__(self, ballots: Sequence[Sequence[str]], candidates: Sequence[str]):
        """
        Initialize cross-checker.

        Args:
            ballots: The rankings that were tabulated
            candidates: The candidate list that was tabulated
        """
        self.ballots = [tuple(b) for b in ballots]
        self.candidates = list(candidates)
        self.candidates_map: Dict[str, Candidate] = {}
        self.ballots_data: List[Ballot] = []
        self.pyrankvote_result = None

    def _prepare_pyrankvote_data(self):
        """Convert rankings to PyRankVote objects."""
        self.candidates_map = {name: Candidate(name) for name in self.candidates}
        self.ballots_data = []

        for ranking in self.ballots:
            ranked_candidates = [
                self.candidates_map[name] for name in ranking if name in self.candidates_map
            ]
            if ranked_candidates:
                self.ballots_data.append(Ballot(ranked_candidates=ranked_candidates))

        logger.debug(
            f"Prepared {len(self.ballots_data)} ballots for {len(self.candidates_map)} candidates"
        )

    def run_reference(self) -> Optional[str]:
        """
        Run PyRankVote's instant-runoff count.

        Returns:
            Name of the reference winner, or None if it elected nobody
        """
        self._prepare_pyrankvote_data()
        self.pyrankvote_result = instant_runoff_voting(
            candidates=list(self.candidates_map.values()),
            ballots=self.ballots_data,
        )
        winners = self.pyrankvote_result.get_winners()
        return winners[0].name if winners else None

    def verify(self, result: IRVResult) -> Dict:
        """
        Compare a result of ``tabulate_irv`` with the reference count.

        Returns:
            Verification report dictionary
        """
        violations = check_irv_invariants(result, ballot_count=len(self.ballots))

        report = {
            "our_winner": result.winner,
            "reference_winner": None,
            "winners_match": False,
            "invariant_violations": violations,
            "total_votes": result.total_votes,
            "skipped": False,
            "reference_error": None,
            "verification_passed": False,
        }

        if not self.ballots:
            logger.info("No ballots to cross-check, skipping reference count")
            report["skipped"] = True
            report["winners_match"] = result.winner is None
            report["verification_passed"] = report["winners_match"] and not violations
            return report

        try:
            reference_winner = self.run_reference()
        except Exception as e:
            logger.error(f"PyRankVote tabulation failed: {e}")
            report["reference_error"] = str(e)
            return report

        report["reference_winner"] = reference_winner
        report["winners_match"] = reference_winner == result.winner
        report["verification_passed"] = report["winners_match"] and not violations

        if not report["winners_match"]:
            logger.warning(
                f"Winner mismatch: ours {result.winner}, PyRankVote {reference_winner}"
            )

        return report

    def generate_verification_report(self, verification_results: Dict) -> str:
        """
        Generate a human-readable verification report.

        Args:
            verification_results: Results from verify()

        Returns:
            Formatted verification report string
        """
        report = []
        report.append("=" * 60)
        report.append("IRV RESULTS VERIFICATION REPORT")
        report.append("=" * 60)

        if verification_results["verification_passed"]:
            report.append("✅ VERIFICATION PASSED - Results match the reference count!")
        else:
            report.append("❌ VERIFICATION FAILED - Discrepancies found")

        report.append("")
        report.append("WINNER VERIFICATION:")
        if verification_results["skipped"]:
            report.append("Reference count skipped (no ballots)")
        elif verification_results["reference_error"]:
            report.append(
                f"❌ Reference count failed: {verification_results['reference_error']}"
            )
        elif verification_results["winners_match"]:
            report.append("✅ Winner matches PyRankVote")
        else:
            report.append("❌ Winner does not match PyRankVote")

        report.append(f"Our winner: {verification_results['our_winner']}")
        report.append(f"PyRankVote winner: {verification_results['reference_winner']}")
        report.append(f"Total votes: {verification_results['total_votes']}")

        report.append("")
        report.append("INVARIANT CHECKS:")
        violations = verification_results["invariant_violations"]
        if violations:
            for violation in violations:
                report.append(f"  ❌ {violation}")
        else:
            report.append("✅ All invariants hold")

        return "\n".join(report)
