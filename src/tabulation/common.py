from typing import Any, List, Sequence

import numpy as np


def convert_numpy_types(obj: Any) -> Any:
    """Convert numpy types to native Python types for JSON serialization."""
    if isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, dict):
        return {k: convert_numpy_types(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [convert_numpy_types(item) for item in obj]
    else:
        return obj


def check_candidates(candidates: Sequence[str]) -> List[str]:
    """
    Reject a candidate list the tabulators cannot work with.

    Args:
        candidates: Candidate identifiers in caller order

    Returns:
        The candidates as a new list

    Raises:
        ValueError: If the list is empty or names a candidate twice
    """
    candidate_list = list(candidates)
    if not candidate_list:
        raise ValueError("At least one candidate is required")
    if len(set(candidate_list)) != len(candidate_list):
        duplicates = sorted({c for c in candidate_list if candidate_list.count(c) > 1})
        raise ValueError(f"Duplicate candidate identifiers: {', '.join(duplicates)}")
    return candidate_list
