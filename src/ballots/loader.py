import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd

from .validation import PreferentialType, filter_ballots

logger = logging.getLogger(__name__)


@dataclass
class BallotSet:
    """Accepted ballots for one question together with its candidate list."""

    candidates: List[str]
    ballots: List[Tuple[str, ...]]
    rejected: int = 0
    preferential_type: PreferentialType = PreferentialType.OPTIONAL
    source: Optional[str] = field(default=None, compare=False)

    def __len__(self) -> int:
        return len(self.ballots)


def _preferences_from_entry(entry: Any) -> List[str]:
    """Read one stored ballot: a bare list or an object with ``preferences``."""
    if isinstance(entry, dict):
        preferences = entry.get("preferences", [])
    else:
        preferences = entry

    if not isinstance(preferences, list):
        raise ValueError(f"Ballot preferences must be a list, got: {preferences!r}")

    return [str(choice) for choice in preferences]


def _read_json_ballots(path: Path) -> Tuple[List[List[str]], Optional[List[str]]]:
    with open(path, "r") as f:
        payload = json.load(f)

    if isinstance(payload, dict):
        if "ballots" not in payload:
            raise ValueError(f"No 'ballots' list found in {path}")
        raw_ballots = payload["ballots"]
        file_candidates = payload.get("candidates")
    else:
        raw_ballots = payload
        file_candidates = None

    if not isinstance(raw_ballots, list):
        raise ValueError(f"'ballots' must be a list in {path}")

    ballots = [_preferences_from_entry(entry) for entry in raw_ballots]
    if file_candidates is not None:
        file_candidates = [str(c) for c in file_candidates]
    return ballots, file_candidates


def _read_csv_ballots(path: Path) -> List[List[str]]:
    """
    Read a wide-format ballot file: one row per ballot, one column per rank.

    Rank columns are those whose header starts with ``rank``, taken in header
    order. An optional ``count`` column repeats the row.
    """
    df = pd.read_csv(path, dtype=str, keep_default_na=False)

    rank_columns = [c for c in df.columns if str(c).strip().lower().startswith("rank")]
    if not rank_columns:
        raise ValueError(f"No rank columns found in {path}")

    has_count = "count" in df.columns

    ballots = []
    for _, row in df.iterrows():
        preferences = [row[c].strip() for c in rank_columns if row[c].strip()]
        repeat = int(row["count"]) if has_count and row["count"].strip() else 1
        for _ in range(repeat):
            ballots.append(list(preferences))

    return ballots


def infer_candidates(ballots: Sequence[Sequence[str]]) -> List[str]:
    """Distinct identifiers in order of first appearance."""
    seen: Dict[str, None] = {}
    for ranking in ballots:
        for choice in ranking:
            seen.setdefault(choice, None)
    return list(seen)


def load_ballots(
    path: Union[str, Path],
    candidates: Optional[Sequence[str]] = None,
    preferential_type: PreferentialType = PreferentialType.OPTIONAL,
) -> BallotSet:
    """
    Load and validate the ballots for one question.

    Args:
        path: ``.json`` or ``.csv`` ballot file
        candidates: Authoritative candidate list; overrides the file's
        preferential_type: Submission rule applied to every ballot

    Returns:
        BallotSet with the accepted ballots
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Ballot file not found: {path}")

    logger.info(f"Loading ballots from: {path}")

    suffix = path.suffix.lower()
    file_candidates = None
    if suffix == ".json":
        raw_ballots, file_candidates = _read_json_ballots(path)
    elif suffix == ".csv":
        raw_ballots = _read_csv_ballots(path)
    else:
        raise ValueError(f"Unsupported ballot file type: {path.suffix}")

    if candidates is not None:
        candidate_list = list(candidates)
    elif file_candidates is not None:
        candidate_list = file_candidates
    else:
        candidate_list = infer_candidates(raw_ballots)

    accepted, rejected = filter_ballots(raw_ballots, candidate_list, preferential_type)

    logger.info(
        f"Loaded {len(accepted)} ballots for {len(candidate_list)} candidates"
    )

    return BallotSet(
        candidates=candidate_list,
        ballots=accepted,
        rejected=rejected,
        preferential_type=preferential_type,
        source=str(path),
    )
