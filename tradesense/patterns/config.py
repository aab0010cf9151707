"""
Pattern Detector Configuration
"""

from dataclasses import dataclass, asdict
import hashlib
import json


@dataclass
class PatternConfig:
    """Thresholds for chart pattern recognition"""

    # Extrema window (bars either side)
    window: int = 20

    # Double top / bottom
    double_tolerance: float = 0.02  # tops within 2% of each other

    # Head and shoulders
    shoulder_tolerance: float = 0.05  # shoulders within 5% of each other

    # Triangles
    triangle_pivot_window: int = 5
    triangle_flat_slope: float = 0.001
    triangle_confidence: float = 0.7

    # Confidence heuristics
    base_confidence: float = 0.6
    min_confidence: float = 0.3
    max_confidence: float = 0.95

    # Also search troughs for inverted head and shoulders
    detect_inverse_head_and_shoulders: bool = True

    def validate(self):
        if self.window < 1:
            raise ValueError(f"window must be >= 1, got {self.window}")
        if self.triangle_pivot_window < 1:
            raise ValueError(f"triangle_pivot_window must be >= 1, got {self.triangle_pivot_window}")
        if not 0 <= self.min_confidence <= self.max_confidence <= 1:
            raise ValueError(
                f"confidence bounds must satisfy 0 <= min <= max <= 1, "
                f"got [{self.min_confidence}, {self.max_confidence}]"
            )

    def to_dict(self) -> dict:
        return asdict(self)

    def get_config_hash(self) -> str:
        config_str = json.dumps(self.to_dict(), sort_keys=True)
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]
