from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass
class ScoringRules:
    line_clear_scores: Tuple[int, int, int, int] = (100, 250, 400, 600)

    def score_for_lines(self, lines: int) -> int:
        if lines < 0:
            raise ValueError(f"lines cleared cannot be negative, got {lines}")
        if lines == 0:
            return 0
        # A single piece spans at most four rows
        return self.line_clear_scores[min(lines, len(self.line_clear_scores)) - 1]


@dataclass
class SpeedRules:
    base_interval_ms: int = 1000
    # (minimum score, interval) pairs, highest threshold first
    thresholds: Tuple[Tuple[int, int], ...] = (
        (30000, 350),
        (20000, 500),
        (14000, 600),
        (9000, 700),
        (5000, 800),
        (2000, 900),
    )

    def fall_interval_ms(self, score: int) -> int:
        for min_score, interval in self.thresholds:
            if score >= min_score:
                return interval
        return self.base_interval_ms
