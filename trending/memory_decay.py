import math


def decay_factor(dt_sec: float, half_life_sec: float, floor_weight: float = 0.0) -> float:
    """
    Returns decay factor in [floor_weight, 1.0].
    If half_life_sec <= 0, returns 1.0 (no decay).
    Negative dt_sec (clock went backwards) is treated as no elapsed time.
    """
    if half_life_sec <= 0:
        return 1.0
    raw = 0.5 ** (max(dt_sec, 0.0) / half_life_sec)
    return max(raw, floor_weight)


def kl_divergence(probability: float, expectation: float) -> float:
    """
    Single Kullback-Leibler term p * ln(p / e).
    p == 0 returns exactly 0.0 so ln(0) is never evaluated.
    """
    if probability == 0.0:
        return 0.0
    return probability * math.log(probability / expectation)


def blend_scores(kl_score: float, peak: float) -> float:
    return 0.5 * (kl_score + peak)
