"""
Flat, audit-friendly reports of tabulation results.

Everything here is formatting: each value printed is read from a result
object. The only arithmetic is the one-decimal vote percentage of a round.
"""

import logging
from pathlib import Path
from typing import Union

import pandas as pd

from .condorcet import CondorcetResult
from .irv import IRVResult

logger = logging.getLogger(__name__)

IRV_COLUMNS = ["Round", "Candidate", "Votes", "Percentage", "Status"]
IRV_SUMMARY_COLUMNS = ["Winner", "Total Votes", "Exhausted Ballots"]
PAIRWISE_COLUMNS = [
    "Candidate A",
    "Candidate B",
    "Votes for A",
    "Votes for B",
    "Head-to-Head Winner",
]
RANKING_COLUMNS = ["Ranking", "Candidate", "Head-to-Head Wins", "Losses", "Ties"]
METHOD_COLUMNS = ["Method", "Winner"]


def format_percentage(votes: int, total: int) -> str:
    """Share of a round total, one decimal place, e.g. ``'42.9%'``."""
    if total <= 0:
        return "0.0%"
    return f"{votes / total * 100:.1f}%"


def _to_csv(df: pd.DataFrame) -> str:
    return df.to_csv(index=False, lineterminator="\n")


def irv_results_table(result: IRVResult) -> pd.DataFrame:
    """
    One row per (round, candidate), highest count first within a round.

    Returns:
        DataFrame with columns Round, Candidate, Votes, Percentage, Status
    """
    rows = []
    for round_obj in result.rounds:
        total = sum(round_obj.votes.values())
        ordered = sorted(round_obj.votes.items(), key=lambda item: -item[1])
        for candidate, votes in ordered:
            if candidate in round_obj.eliminated:
                status = "Eliminated"
            elif round_obj.winner == candidate:
                status = "Winner"
            else:
                status = "Active"
            rows.append(
                {
                    "Round": round_obj.round_number,
                    "Candidate": candidate,
                    "Votes": votes,
                    "Percentage": format_percentage(votes, total),
                    "Status": status,
                }
            )

    return pd.DataFrame(rows, columns=IRV_COLUMNS)


def export_irv_results_csv(result: IRVResult) -> str:
    """
    IRV round table as CSV text, followed by a one-line summary block.

    The summary carries the winner even when no round declared one (a sole
    surviving candidate) and leaves the Winner cell empty when there is none.
    """
    summary = pd.DataFrame(
        [
            {
                "Winner": result.winner,
                "Total Votes": result.total_votes,
                "Exhausted Ballots": result.exhausted_ballots,
            }
        ],
        columns=IRV_SUMMARY_COLUMNS,
    )
    return _to_csv(irv_results_table(result)) + "\n" + _to_csv(summary)


def condorcet_pairwise_table(result: CondorcetResult) -> pd.DataFrame:
    rows = [
        {
            "Candidate A": pair.candidate_a,
            "Candidate B": pair.candidate_b,
            "Votes for A": pair.wins_a,
            "Votes for B": pair.wins_b,
            "Head-to-Head Winner": pair.head_to_head_winner,
        }
        for pair in result.pairwise
    ]
    return pd.DataFrame(rows, columns=PAIRWISE_COLUMNS)


def condorcet_rankings_table(result: CondorcetResult) -> pd.DataFrame:
    rows = [
        {
            "Ranking": position,
            "Candidate": record.candidate,
            "Head-to-Head Wins": record.wins,
            "Losses": record.losses,
            "Ties": record.ties,
        }
        for position, record in enumerate(result.rankings, 1)
    ]
    return pd.DataFrame(rows, columns=RANKING_COLUMNS)


def export_condorcet_results_csv(result: CondorcetResult) -> str:
    """
    Pairwise block, rankings block and method/winner block, blank-line separated.

    Cells are quoted only when the value needs it. A count with no winner
    (zero ballots) leaves the Winner cell empty.
    """
    method = pd.DataFrame(
        [{"Method": result.method, "Winner": result.winner}], columns=METHOD_COLUMNS
    )
    blocks = [
        _to_csv(condorcet_pairwise_table(result)),
        _to_csv(condorcet_rankings_table(result)),
        _to_csv(method),
    ]
    return "\n".join(blocks)


def format_irv_results(result: IRVResult) -> str:
    """Plain-text round-by-round summary of an IRV count."""
    if not result.winner:
        return "No winner could be determined."

    lines = [
        f"Winner: {result.winner}",
        f"Total Votes: {result.total_votes}",
        f"Exhausted Ballots: {result.exhausted_ballots}",
        "",
    ]

    for round_obj in result.rounds:
        lines.append(f"Round {round_obj.round_number}:")
        total = sum(round_obj.votes.values())
        for candidate, votes in sorted(round_obj.votes.items(), key=lambda item: -item[1]):
            lines.append(
                f"  {candidate}: {votes} votes ({format_percentage(votes, total)})"
            )
        if round_obj.eliminated:
            lines.append(f"  Eliminated: {', '.join(round_obj.eliminated)}")
        if round_obj.transfers is not None:
            for to_candidate, count in round_obj.transfers.to_counts.items():
                lines.append(f"    -> {count} to {to_candidate}")
            if round_obj.transfers.exhausted_count:
                lines.append(f"    -> {round_obj.transfers.exhausted_count} exhausted")
        if round_obj.winner:
            lines.append(f"  Winner: {round_obj.winner}")
        lines.append("")

    return "\n".join(lines)


def format_condorcet_results(result: CondorcetResult) -> str:
    """Plain-text summary of a Condorcet count."""
    if not result.winner:
        return "No winner could be determined."

    method = "Condorcet winner" if result.condorcet_winner else "Schulze method"
    lines = [
        f"Winner: {result.winner} ({method})",
        f"Total Votes: {result.total_votes}",
        "",
        "Head-to-head:",
    ]
    for pair in result.pairwise:
        lines.append(
            f"  {pair.candidate_a} vs {pair.candidate_b}: "
            f"{pair.wins_a}-{pair.wins_b} ({pair.head_to_head_winner})"
        )

    lines.append("")
    lines.append("Rankings:")
    for position, record in enumerate(result.rankings, 1):
        lines.append(
            f"  {position}. {record.candidate}: {record.wins} wins, "
            f"{record.losses} losses, {record.ties} ties"
        )

    lines.append("")
    for step in result.rounds:
        lines.append(f"Step {step.step}: {step.description}")

    return "\n".join(lines)


def write_results_csv(
    result: Union[IRVResult, CondorcetResult], path: Union[str, Path]
) -> Path:
    """
    Write the CSV export of either result type.

    Returns:
        Path written to
    """
    if isinstance(result, IRVResult):
        text = export_irv_results_csv(result)
    elif isinstance(result, CondorcetResult):
        text = export_condorcet_results_csv(result)
    else:
        raise TypeError(f"Unsupported result type: {type(result).__name__}")

    path = Path(path)
    path.write_text(text)
    logger.info(f"Results exported to: {path}")
    return path
