#!/usr/bin/env python3
"""
Compile the linearized joint constraint and summarize it.

Loads a circuit's feature flags (or none, for the universal expression),
runs expr_linearization and prints the alpha ranges and the size of every
compiled term.

Usage:
    python dump_linearization.py [--flags <flags.json>] [--no-generic] \
        [--output <summary.json>] [--verbose]
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from circuits.feature_flags import FeatureFlags
from protocol.linearization import expr_linearization

logger = logging.getLogger("dump_linearization")


def summarize(feature_flags, generic: bool) -> dict:
    """JSON-friendly summary of the compiled linearization."""
    linearization, alphas = expr_linearization(feature_flags, generic)
    return {
        "featureFlags": None if feature_flags is None else feature_flags.to_dict(),
        "generic": generic,
        "alphas": [
            {"argument": repr(key), "start": r.start, "count": len(r)}
            for key, r in alphas.ranges()
        ],
        "constantTerm": [repr(t) for t in linearization.constant_term],
        "indexTerms": {
            repr(col): [repr(t) for t in tokens]
            for col, tokens in linearization.index_terms
        },
    }


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description='Compile the linearized constraint expression and summarize it'
    )
    parser.add_argument(
        '--flags',
        type=Path,
        default=None,
        help='Path to a feature flags JSON file (default: universal expression)'
    )
    parser.add_argument(
        '--no-generic',
        action='store_true',
        help='Leave the generic gate out of the expression'
    )
    parser.add_argument(
        '--output',
        type=Path,
        default=None,
        help='Write the full JSON summary (tokens included) to this path'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Log alpha registrations and linearization details'
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    feature_flags = None
    if args.flags is not None:
        if not args.flags.exists():
            print(f"Error: flags file not found: {args.flags}", file=sys.stderr)
            return 1
        try:
            feature_flags = FeatureFlags.from_json(str(args.flags))
        except (ValueError, json.JSONDecodeError) as e:
            print(f"Error: invalid flags file {args.flags}: {e}", file=sys.stderr)
            return 1

    summary = summarize(feature_flags, generic=not args.no_generic)

    print("Alphas:")
    for entry in summary["alphas"]:
        end = entry["start"] + entry["count"]
        print(f"  {entry['argument']:<16} [{entry['start']}, {end})")
    print(f"Constant term: {len(summary['constantTerm'])} tokens")
    for col, tokens in summary["indexTerms"].items():
        print(f"  {col:<24} {len(tokens)} tokens")

    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        with open(args.output, 'w') as f:
            json.dump(summary, f, indent=2)
        logger.info("wrote %s", args.output)
    return 0


if __name__ == '__main__':
    sys.exit(main())
