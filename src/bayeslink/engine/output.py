"""Classification result writers."""

import json
from collections.abc import Iterable
from pathlib import Path

from bayeslink.scoring.matcher import ClassificationResult

__all__ = ["write_results_jsonl"]


def write_results_jsonl(results: Iterable[ClassificationResult], output_path: Path) -> int:
    """Write classification results as deterministic JSONL.

    Results are sorted by pair id, then query rid.

    Parameters
    ----------
    results : Iterable[ClassificationResult]
        Results to write (materialised once).
    output_path : Path
        Destination file; parent directories are created.

    Returns
    -------
    int
        Number of results written.
    """
    rows = [r.to_dict() for r in results]
    rows.sort(key=lambda row: (row["pair_id"], row["rid_a"]))

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as fh:
        for row in rows:
            json.dump(row, fh, ensure_ascii=False, sort_keys=True)
            fh.write("\n")

    return len(rows)
