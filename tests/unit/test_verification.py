import pytest

from tabulation.condorcet import CondorcetResult, tabulate_condorcet
from tabulation.irv import IRVResult, IRVRound, tabulate_irv
from tabulation.verification import (
    IRVCrossChecker,
    check_condorcet_invariants,
    check_irv_invariants,
)


def _round(number, votes, eliminated=(), winner=None, exhausted=0):
    total = sum(votes.values())
    return IRVRound(
        round_number=number,
        candidates=list(votes),
        votes=dict(votes),
        eliminated=list(eliminated),
        transfers=None,
        winner=winner,
        exhausted_ballots=exhausted,
        total_active_votes=total,
        majority=total // 2 + 1,
    )


class TestIRVInvariants:
    """Test IRV invariant checks."""

    def test_real_result_is_clean(self, majority_after_transfer_ballots):
        result = tabulate_irv(majority_after_transfer_ballots, ["A", "B", "C"])
        assert check_irv_invariants(result, ballot_count=6) == []

    def test_zero_ballot_result_is_clean(self):
        assert check_irv_invariants(tabulate_irv([], ["A"])) == []

    def test_plurality_winner_below_majority_is_flagged(self):
        result = IRVResult(
            winner="B",
            rounds=[_round(1, {"A": 3, "B": 2, "C": 2}, winner="B")],
            total_votes=7,
        )
        violations = check_irv_invariants(result)
        assert any("below majority" in v for v in violations)

    def test_decreasing_exhaustion_is_flagged(self):
        result = IRVResult(
            winner="A",
            rounds=[
                _round(1, {"A": 2, "B": 1, "C": 1}, eliminated=["C"], exhausted=2),
                _round(2, {"A": 3, "B": 1}, winner="A", exhausted=1),
            ],
            total_votes=6,
            exhausted_ballots=2,
        )
        violations = check_irv_invariants(result)
        assert any("decreased" in v for v in violations)

    def test_exhaustion_above_total_is_flagged(self):
        result = IRVResult(
            winner="A",
            rounds=[_round(1, {"A": 2, "B": 0}, winner="A")],
            total_votes=2,
            exhausted_ballots=5,
        )
        assert any("exceed" in v for v in check_irv_invariants(result))

    def test_active_set_must_follow_eliminations(self):
        result = IRVResult(
            winner="A",
            rounds=[
                _round(1, {"A": 2, "B": 1, "C": 1}, eliminated=["C"]),
                _round(2, {"A": 3, "C": 1}, winner="A"),
            ],
            total_votes=4,
        )
        assert any("do not follow" in v for v in check_irv_invariants(result))

    def test_ballot_count_mismatch_is_flagged(self, majority_after_transfer_ballots):
        result = tabulate_irv(majority_after_transfer_ballots, ["A", "B", "C"])
        assert check_irv_invariants(result, ballot_count=7) != []


class TestCondorcetInvariants:
    """Test Condorcet invariant checks."""

    def test_real_results_are_clean(self, cyclic_ballots):
        assert check_condorcet_invariants(tabulate_condorcet(cyclic_ballots, ["A", "B", "C"])) == []
        assert check_condorcet_invariants(tabulate_condorcet([["A", "B"]], ["A", "B"])) == []

    def test_false_condorcet_claim_is_flagged(self):
        result = CondorcetResult(
            winner="A",
            condorcet_winner=True,
            method="condorcet",
            pairwise_matrix={"A": {"A": 0, "B": 1}, "B": {"A": 1, "B": 0}},
            rounds=[],
            total_votes=2,
            rankings=[],
        )
        assert any("does not beat" in v for v in check_condorcet_invariants(result))

    def test_schulze_with_condorcet_winner_is_flagged(self):
        result = CondorcetResult(
            winner="B",
            condorcet_winner=False,
            method="schulze",
            pairwise_matrix={"A": {"A": 0, "B": 2}, "B": {"A": 1, "B": 0}},
            rounds=[],
            total_votes=3,
            rankings=[],
        )
        assert any("Schulze" in v for v in check_condorcet_invariants(result))


class TestIRVCrossChecker:
    """Test cross-checking against PyRankVote."""

    def test_clear_winner_matches(self, majority_after_transfer_ballots):
        candidates = ["A", "B", "C"]
        result = tabulate_irv(majority_after_transfer_ballots, candidates)

        checker = IRVCrossChecker(majority_after_transfer_ballots, candidates)
        report = checker.verify(result)

        assert report["reference_winner"] == "A"
        assert report["winners_match"] is True
        assert report["invariant_violations"] == []
        assert report["verification_passed"] is True
        assert report["skipped"] is False

    def test_mismatch_fails_verification(self, majority_after_transfer_ballots):
        candidates = ["A", "B", "C"]
        wrong = IRVResult(winner="B", rounds=[], total_votes=6)

        report = IRVCrossChecker(majority_after_transfer_ballots, candidates).verify(wrong)

        assert report["winners_match"] is False
        assert report["verification_passed"] is False

    def test_zero_ballots_are_skipped(self):
        result = tabulate_irv([], ["A", "B"])
        report = IRVCrossChecker([], ["A", "B"]).verify(result)

        assert report["skipped"] is True
        assert report["verification_passed"] is True

    def test_reference_failure_is_reported(self, monkeypatch, majority_after_transfer_ballots):
        candidates = ["A", "B", "C"]
        result = tabulate_irv(majority_after_transfer_ballots, candidates)
        checker = IRVCrossChecker(majority_after_transfer_ballots, candidates)

        def boom():
            raise RuntimeError("reference exploded")

        monkeypatch.setattr(checker, "run_reference", boom)
        report = checker.verify(result)

        assert report["reference_error"] == "reference exploded"
        assert report["verification_passed"] is False

    def test_report_text(self, majority_after_transfer_ballots):
        candidates = ["A", "B", "C"]
        result = tabulate_irv(majority_after_transfer_ballots, candidates)
        checker = IRVCrossChecker(majority_after_transfer_ballots, candidates)

        text = checker.generate_verification_report(checker.verify(result))

        assert "IRV RESULTS VERIFICATION REPORT" in text
        assert "VERIFICATION PASSED" in text
        assert "Our winner: A" in text
        assert "PyRankVote winner: A" in text
        assert "All invariants hold" in text

    def test_failed_report_lists_violations(self):
        checker = IRVCrossChecker([], ["A"])
        report = {
            "our_winner": "A",
            "reference_winner": "B",
            "winners_match": False,
            "invariant_violations": ["something broke"],
            "total_votes": 3,
            "skipped": False,
            "reference_error": None,
            "verification_passed": False,
        }
        text = checker.generate_verification_report(report)

        assert "VERIFICATION FAILED" in text
        assert "Winner does not match PyRankVote" in text
        assert "something broke" in text
