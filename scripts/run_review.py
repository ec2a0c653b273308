#!/usr/bin/env python3
"""Show how a diff read from stdin would be batched for review."""
import sys
from dotenv import load_dotenv

load_dotenv()

from diffreview.services.diff.patch_parser import parse_diff_valid_lines
from diffreview.services.reviewer.service import plan_batches

def main():
    diff = sys.stdin.read()
    plan = plan_batches(diff)

    print(f"Files: {len(plan.fragments)}, reviewable: {len(plan.included)}, excluded: {len(plan.excluded)}")
    for path in plan.excluded:
        print(f"  excluded {path}")

    for index, batch in enumerate(plan.batches, start=1):
        print(f"Batch {index}/{len(plan.batches)}: {len(batch)} chars")

    for path, lines in parse_diff_valid_lines(diff).items():
        print(f"  {path}: {len(lines)} commentable lines")

if __name__ == "__main__":
    main()
