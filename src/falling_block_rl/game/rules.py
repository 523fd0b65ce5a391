from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ScoringRules:
    line_clear_scores: tuple[int, int, int, int] = (100, 300, 500, 800)
    lines_per_level: int = 10

    def score_for_lines(self, lines: int, level: int = 1) -> int:
        if 1 <= lines <= len(self.line_clear_scores):
            return self.line_clear_scores[lines - 1] * level
        return 0

    def level_for_lines(self, lines: int) -> int:
        return lines // self.lines_per_level + 1


@dataclass
class GravityRules:
    """Gravity period in milliseconds, shrinking linearly per level."""

    base_ms: int = 1000
    decrement_ms: int = 80
    min_ms: int = 50

    def drop_interval_ms(self, level: int) -> int:
        decrease = max(level - 1, 0) * self.decrement_ms
        return max(max(self.base_ms - decrease, 0), self.min_ms)
