from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

TIMING_FILE = Path(__file__).resolve().parent.parent / "data" / "timing.yaml"


@dataclass(frozen=True)
class Timing:
    pulse_ms: int = 110
    settle_ms: int = 320
    speed_tail_factor: float = 0.6
    speed_tail_min_ms: int = 180

    def speed_tail_ms(self, reveal_interval_ms: int) -> int:
        """Wait after the last digit in speed mode."""
        return max(self.speed_tail_min_ms, round(reveal_interval_ms * self.speed_tail_factor))


def load_timing(path: Optional[Path] = None) -> Timing:
    timing_path = path or TIMING_FILE
    if not timing_path.exists():
        raise FileNotFoundError(f"Timing file not found: {timing_path}")

    raw = yaml.safe_load(timing_path.read_text(encoding="utf-8"))
    if raw is None:
        return Timing()
    if not isinstance(raw, dict):
        raise ValueError(f"{timing_path.name}: expected a YAML mapping")

    defaults = Timing()
    values = {}
    for name in ("pulse_ms", "settle_ms", "speed_tail_min_ms"):
        value = raw.get(name, getattr(defaults, name))
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(f"{timing_path.name}: '{name}' must be a non-negative integer")
        values[name] = value
    factor = raw.get("speed_tail_factor", defaults.speed_tail_factor)
    if isinstance(factor, bool) or not isinstance(factor, (int, float)) or factor <= 0:
        raise ValueError(f"{timing_path.name}: 'speed_tail_factor' must be a positive number")
    values["speed_tail_factor"] = float(factor)
    return Timing(**values)
