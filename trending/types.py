from dataclasses import dataclass, asdict
from typing import Any, Dict


@dataclass(frozen=True)
class Granularity:
    """One resolution level of an in-memory event counter."""
    step_sec: float
    count: int


@dataclass(frozen=True)
class ScoreRecord:
    item_id: str
    score: float          # blended: 0.5 * (kl_score + peak)
    probability: float
    expectation: float
    peak: float
    kl_score: float

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)
