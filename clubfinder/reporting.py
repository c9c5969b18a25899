"""Output reporting helpers."""
from __future__ import annotations

import json
import os
import tempfile
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, TextIO

from .models import SearchResponse


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def _fsync_dir(path: str) -> None:
    try:
        dir_fd = os.open(path, os.O_DIRECTORY)
    except OSError:
        return
    try:
        os.fsync(dir_fd)
    except OSError:
        pass
    finally:
        os.close(dir_fd)


@contextmanager
def atomic_writer(
    path: str,
    mode: str = "w",
    encoding: str = "utf-8",
    newline: Optional[str] = None,
) -> Iterator[TextIO]:
    dir_path = os.path.dirname(path) or "."
    base = os.path.basename(path)
    fd, tmp_path = tempfile.mkstemp(prefix=f".{base}.", suffix=".tmp", dir=dir_path)
    try:
        with os.fdopen(fd, mode, encoding=encoding, newline=newline) as f:
            yield f
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
        _fsync_dir(dir_path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def write_json_object(path: str, payload: Dict[str, Any]) -> None:
    with atomic_writer(path, mode="w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)


def write_summary(path: str, summary_lines: List[str]) -> None:
    with atomic_writer(path, mode="w", encoding="utf-8") as f:
        f.write("\n".join(summary_lines) + "\n")


def render_summary(response: SearchResponse) -> List[str]:
    d = response.diagnostics
    lines = [
        "Search summary",
        f"- raw results found: {d.raw_found}",
        f"- retail excluded: {d.retail_excluded}",
        f"- conversion failures: {d.conversion_failures}",
        f"- search failures: {d.search_failures}",
        f"- passed containment: {d.after_containment}"
        + ("" if d.has_reachability_polygon else " (no polygon)"),
        f"- passed routing: {d.after_routing}",
        f"- routing failures: {d.routing_failures}",
        f"- unique results: {d.unique_count}",
        f"- average confidence: {d.avg_confidence}",
    ]
    if d.used_fallback:
        lines.append("- broad fallback search was used")
    if d.bypassed:
        lines.append("- WARNING: filtering removed every result; showing an unfiltered sample")

    if response.entities:
        lines.append("")
        lines.append("Results")
        for i, entity in enumerate(response.entities, start=1):
            drive = (
                f"{entity.drive_time_minutes} min" if entity.drive_time_minutes is not None else "n/a"
            )
            age = entity.primary_age_group.value if entity.primary_age_group else "-"
            lines.append(
                f"{i}. {entity.name} [{entity.sport}] score={entity.confidence_score} "
                f"club={'yes' if entity.is_club else 'no'} age={age} drive={drive}"
            )
    return lines


def write_response(output_dir: str, response: SearchResponse) -> Dict[str, str]:
    ensure_dir(output_dir)
    results_path = os.path.join(output_dir, "results.json")
    summary_path = os.path.join(output_dir, "summary.txt")
    write_json_object(results_path, response.to_dict())
    write_summary(summary_path, render_summary(response))
    return {"results": results_path, "summary": summary_path}
