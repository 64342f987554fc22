#!/usr/bin/env python3
"""
Tabulate a ranked-choice question from a ballot file.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add src to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ballots.loader import load_ballots  # noqa: E402
from ballots.validation import PreferentialType  # noqa: E402
from tabulation.condorcet import tabulate_condorcet  # noqa: E402
from tabulation.export import (  # noqa: E402
    format_condorcet_results,
    format_irv_results,
    write_results_csv,
)
from tabulation.irv import tabulate_irv  # noqa: E402
from tabulation.verification import (  # noqa: E402
    IRVCrossChecker,
    check_condorcet_invariants,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Tabulate ranked ballots")
    parser.add_argument("ballots", help="Ballot file (.json or .csv)")
    parser.add_argument(
        "--method",
        choices=["irv", "condorcet"],
        default="irv",
        help="Tabulation method (default: irv)",
    )
    parser.add_argument(
        "--candidates",
        help="Comma-separated candidate list; defaults to the file's candidates",
    )
    parser.add_argument(
        "--preferential-type",
        choices=[t.value for t in PreferentialType],
        default=PreferentialType.OPTIONAL.value,
        help="Reject incomplete rankings when compulsory (default: optional)",
    )
    parser.add_argument("--export", help="Export results to CSV file")
    parser.add_argument(
        "--json", action="store_true", help="Print the result as JSON instead of text"
    )
    parser.add_argument(
        "--verify", action="store_true", help="Check result invariants after counting"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def parse_candidates(value):
    if not value:
        return None
    return [c.strip() for c in value.split(",") if c.strip()]


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        ballot_set = load_ballots(
            args.ballots,
            candidates=parse_candidates(args.candidates),
            preferential_type=PreferentialType(args.preferential_type),
        )
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Could not load ballots: {e}")
        sys.exit(1)

    if not ballot_set.candidates:
        logger.error("No candidates given and none found in the ballot file")
        sys.exit(1)

    logger.info(f"=== {args.method.upper()} Tabulation ===")

    if args.method == "irv":
        result = tabulate_irv(ballot_set.ballots, ballot_set.candidates)
        summary = format_irv_results(result)
    else:
        result = tabulate_condorcet(ballot_set.ballots, ballot_set.candidates)
        summary = format_condorcet_results(result)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(summary)

    if ballot_set.rejected:
        print(f"\nRejected ballots: {ballot_set.rejected}")

    if args.export:
        export_path = write_results_csv(result, Path(args.export).with_suffix(".csv"))
        print(f"\n✓ Results exported to: {export_path}")

    if args.verify:
        if args.method == "irv":
            checker = IRVCrossChecker(ballot_set.ballots, ballot_set.candidates)
            report = checker.verify(result)
            print("\n" + checker.generate_verification_report(report))
            passed = report["verification_passed"]
        else:
            violations = check_condorcet_invariants(result)
            for violation in violations:
                print(f"❌ {violation}")
            passed = not violations

        if not passed:
            print("\n⚠️  Verification FAILED")
            sys.exit(1)
        print("\n✓ Verification passed")

    return result


if __name__ == "__main__":
    main()
