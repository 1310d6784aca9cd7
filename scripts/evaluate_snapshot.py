#!/usr/bin/env python3
"""
Evaluate a saved wizard snapshot offline and print the resolved assessment:
- intrinsic / final GRC with the applied ground mitigations
- initial / residual / final ARC
- SAIL and the OSO requirements with reattached evidence
"""

import json
import sys

from sora.exceptions import SoraError, ValidationError
from sora.schemas.snapshot import SoraSnapshot
from sora.services.assessment import assess


def evaluate_file(path):
    """Load a snapshot JSON file and print its assessment"""
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)

    # Stored study documents wrap the snapshot
    if "snapshot" in raw and "drone" not in raw:
        raw = raw["snapshot"]

    snapshot = SoraSnapshot.model_validate(raw)
    try:
        result = assess(snapshot)
    except ValidationError as e:
        print(f"{e.code} [{e.field}]: {e.message}", file=sys.stderr)
        return 2
    except SoraError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False))
    print(
        f"\nGRC {result.ground.final_grc} / {result.air.final_arc.value} -> SAIL {result.sail.value}",
        file=sys.stderr,
    )
    return 0


if __name__ == '__main__':
    if len(sys.argv) < 2:
        print("Usage: python3 evaluate_snapshot.py <snapshot.json>")
        sys.exit(1)

    sys.exit(evaluate_file(sys.argv[1]))
