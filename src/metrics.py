from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional

from detector import DetectionResult


@dataclass
class Metrics:
    ticks: int = 0
    not_ready: int = 0
    analyzed: int = 0
    glow_hits: int = 0
    core_hits: int = 0
    errors: int = 0
    colors: Counter = field(default_factory=Counter)


def update_metrics(m: Metrics, result: Optional[DetectionResult]) -> None:
    m.analyzed += 1
    if result is None:
        return
    if result.used_glow:
        m.glow_hits += 1
    else:
        m.core_hits += 1
    m.colors[result.color] += 1


def detection_rate(m: Metrics) -> float:
    hits = m.glow_hits + m.core_hits
    return hits / m.analyzed if m.analyzed else 0.0


def summary_lines(m: Metrics) -> List[str]:
    lines = [
        f"Ticks: {m.ticks}",
        f"Not ready: {m.not_ready}",
        f"Analyzed frames: {m.analyzed}",
        f"Detection rate: {detection_rate(m):.3f}",
        f"Glow detections: {m.glow_hits}",
        f"Core detections: {m.core_hits}",
        f"Tick errors: {m.errors}",
    ]
    for name, n in m.colors.most_common():
        lines.append(f"  {name}: {n}")
    return lines
