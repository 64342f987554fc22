#!/usr/bin/env python3
"""
Verify our IRV result against the PyRankVote reference count.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add src to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ballots.loader import load_ballots  # noqa: E402
from tabulation.irv import tabulate_irv  # noqa: E402
from tabulation.verification import IRVCrossChecker  # noqa: E402

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Verify IRV results against PyRankVote")
    parser.add_argument("ballots", help="Ballot file (.json or .csv)")
    parser.add_argument("--candidates", help="Comma-separated candidate list")
    parser.add_argument("--export", help="Export verification report to file")

    args = parser.parse_args(argv)

    candidates = None
    if args.candidates:
        candidates = [c.strip() for c in args.candidates.split(",") if c.strip()]

    try:
        ballot_set = load_ballots(args.ballots, candidates=candidates)

        logger.info("=== Running IRV Tabulation ===")
        result = tabulate_irv(ballot_set.ballots, ballot_set.candidates)
        logger.info(f"Our winner: {result.winner}")

        logger.info("=== Verifying Results ===")
        checker = IRVCrossChecker(ballot_set.ballots, ballot_set.candidates)
        verification_results = checker.verify(result)

        report = checker.generate_verification_report(verification_results)
        print(report)

        if args.export:
            export_path = Path(args.export)
            with open(export_path, 'w') as f:
                f.write(report)
            print(f"\n✓ Verification report exported to: {export_path}")

    except Exception as e:
        logger.error(f"Error during verification: {e}")
        sys.exit(1)

    if verification_results["verification_passed"]:
        print("\n🎉 Verification PASSED!")
        sys.exit(0)
    else:
        print("\n⚠️  Verification FAILED - see report above for details")
        sys.exit(1)


if __name__ == "__main__":
    main()
