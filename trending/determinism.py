import time
import hashlib
from collections import deque


class TimeProvider:
    """Unix-seconds clock. Queued fixed times are served first, then wall time."""
    def __init__(self, fixed_times=None):
        self._queued = deque(float(t) for t in (fixed_times or ()))
    def now(self):
        if self._queued:
            return self._queued.popleft()
        return time.time()


class FrozenTimeProvider:
    """Clock that only moves when told to. Used for replay, demo and tests."""
    def __init__(self, start=0.0):
        self.t = float(start)
    def now(self):
        return self.t
    def set(self, t):
        self.t = float(t)
    def advance(self, sec):
        self.t += float(sec)
        return self.t


class DeterministicRNG:
    def __init__(self, seed):
        self.seed = seed
        self.state = int(hashlib.sha256(str(seed).encode()).hexdigest(), 16) % (2**32)
        if self.state == 0:
            # xorshift32 is stuck at zero
            self.state = 0x9E3779B9
    def rand(self):
        # xorshift32
        x = self.state
        x ^= (x << 13) & 0xFFFFFFFF
        x ^= (x >> 17)
        x ^= (x << 5) & 0xFFFFFFFF
        self.state = x & 0xFFFFFFFF
        return (self.state % 10000) / 10000.0
    def randint(self, a, b):
        return a + int(self.rand() * (b - a + 1))
    def uniform(self, a, b):
        return a + (b - a) * self.rand()
