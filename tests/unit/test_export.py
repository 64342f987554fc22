"""
Unit tests for result export.

The exporter must reproduce what the result object holds: no extra
computation beyond one-decimal percentages.
"""

import io

import pandas as pd
import pytest

from tabulation.condorcet import tabulate_condorcet
from tabulation.export import (
    condorcet_pairwise_table,
    condorcet_rankings_table,
    export_condorcet_results_csv,
    export_irv_results_csv,
    format_condorcet_results,
    format_irv_results,
    format_percentage,
    irv_results_table,
    write_results_csv,
)
from tabulation.irv import tabulate_irv


@pytest.fixture
def irv_result(majority_after_transfer_ballots, sample_candidates):
    return tabulate_irv(majority_after_transfer_ballots, sample_candidates)


@pytest.fixture
def schulze_result(cyclic_ballots, sample_candidates):
    return tabulate_condorcet(cyclic_ballots, sample_candidates)


@pytest.mark.unit
class TestPercentages:
    def test_one_decimal(self):
        assert format_percentage(1, 3) == "33.3%"
        assert format_percentage(2, 3) == "66.7%"
        assert format_percentage(1, 2) == "50.0%"
        assert format_percentage(7, 7) == "100.0%"

    def test_zero_total(self):
        assert format_percentage(0, 0) == "0.0%"


@pytest.mark.unit
class TestIRVExport:
    def test_csv_text(self, irv_result):
        expected = (
            "Round,Candidate,Votes,Percentage,Status\n"
            "1,A,3,50.0%,Active\n"
            "1,B,2,33.3%,Active\n"
            "1,C,1,16.7%,Eliminated\n"
            "2,A,4,66.7%,Winner\n"
            "2,B,2,33.3%,Active\n"
            "\n"
            "Winner,Total Votes,Exhausted Ballots\n"
            "A,6,0\n"
        )
        assert export_irv_results_csv(irv_result) == expected

    def test_table_columns(self, irv_result):
        df = irv_results_table(irv_result)

        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == ["Round", "Candidate", "Votes", "Percentage", "Status"]
        assert len(df) == 5

    def test_every_round_count_appears(self, irv_result):
        text = export_irv_results_csv(irv_result)
        for round_obj in irv_result.rounds:
            for candidate, votes in round_obj.votes.items():
                assert f"{round_obj.round_number},{candidate},{votes}," in text

    def test_zero_ballots(self):
        text = export_irv_results_csv(tabulate_irv([], ["X", "Y"]))
        assert text.startswith("Round,Candidate,Votes,Percentage,Status\n\n")
        assert text.endswith("Winner,Total Votes,Exhausted Ballots\n,0,0\n")

    def test_backfilled_winner_is_exported(self):
        result = tabulate_irv([["A"]] * 2 + [["B"]] + [["C"]], ["A", "B", "C"])
        text = export_irv_results_csv(result)
        assert text.endswith("A,4,0\n")

    def test_candidate_with_comma_is_quoted(self):
        result = tabulate_irv([["Smith, J"], ["Smith, J"], ["Lee"]], ["Smith, J", "Lee"])
        assert '1,"Smith, J",2,66.7%,Winner' in export_irv_results_csv(result)

    def test_quoted_names_read_back_unchanged(self):
        names = ['Lee "Jr"', "Smith, J"]
        result = tabulate_irv([[names[0]], [names[0]], [names[1]]], names)

        table = export_irv_results_csv(result).split("\n\n")[0]
        df = pd.read_csv(io.StringIO(table))

        assert list(df["Candidate"]) == names
        assert list(df["Votes"]) == [2, 1]

    def test_text_summary(self, irv_result):
        text = format_irv_results(irv_result)

        assert text.startswith("Winner: A\nTotal Votes: 6\nExhausted Ballots: 0\n")
        assert "Round 1:" in text
        assert "  A: 3 votes (50.0%)" in text
        assert "  Eliminated: C" in text
        assert "    -> 1 to A" in text
        assert "  Winner: A" in text

    def test_text_summary_without_winner(self):
        assert format_irv_results(tabulate_irv([], ["X"])) == "No winner could be determined."


@pytest.mark.unit
class TestCondorcetExport:
    def test_csv_text(self, schulze_result):
        expected = (
            "Candidate A,Candidate B,Votes for A,Votes for B,Head-to-Head Winner\n"
            "A,B,2,1,A\n"
            "A,C,1,2,C\n"
            "B,C,2,1,B\n"
            "\n"
            "Ranking,Candidate,Head-to-Head Wins,Losses,Ties\n"
            "1,A,1,1,0\n"
            "2,B,1,1,0\n"
            "3,C,1,1,0\n"
            "\n"
            "Method,Winner\n"
            "schulze,A\n"
        )
        assert export_condorcet_results_csv(schulze_result) == expected

    def test_tie_is_reported(self):
        result = tabulate_condorcet([["A", "B"], ["B", "A"]], ["A", "B"])
        df = condorcet_pairwise_table(result)
        assert df.iloc[0]["Head-to-Head Winner"] == "Tie"

    def test_rankings_table(self, schulze_result):
        df = condorcet_rankings_table(schulze_result)
        assert list(df["Ranking"]) == [1, 2, 3]
        assert list(df["Candidate"]) == ["A", "B", "C"]

    def test_zero_ballots(self):
        text = export_condorcet_results_csv(tabulate_condorcet([], ["X", "Y"]))
        assert text.endswith("Method,Winner\ncondorcet,\n")

    def test_no_winner_reads_back_as_empty_cell(self):
        text = export_condorcet_results_csv(tabulate_condorcet([], ["X", "Y"]))
        df = pd.read_csv(io.StringIO(text.split("\n\n")[-1]))

        assert df.loc[0, "Method"] == "condorcet"
        assert pd.isna(df.loc[0, "Winner"])

    def test_text_summary(self, schulze_result):
        text = format_condorcet_results(schulze_result)

        assert text.startswith("Winner: A (Schulze method)")
        assert "  A vs B: 2-1 (A)" in text
        assert "  1. A: 1 wins, 1 losses, 0 ties" in text
        assert "Step 3:" in text


@pytest.mark.unit
class TestWriteResults:
    def test_writes_irv_csv(self, irv_result, tmp_path):
        path = write_results_csv(irv_result, tmp_path / "irv.csv")
        assert path.read_text() == export_irv_results_csv(irv_result)

    def test_writes_condorcet_csv(self, schulze_result, tmp_path):
        path = write_results_csv(schulze_result, str(tmp_path / "condorcet.csv"))
        assert path.read_text() == export_condorcet_results_csv(schulze_result)

    def test_rejects_other_objects(self, tmp_path):
        with pytest.raises(TypeError):
            write_results_csv({"winner": "A"}, tmp_path / "bad.csv")
