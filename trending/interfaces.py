from abc import ABC, abstractmethod


class EventCounter(ABC):
    """Timestamped increment counter answering interval sums."""

    @abstractmethod
    def increase(self, amount: float, timestamp: float) -> None:
        pass

    @abstractmethod
    def range_sum(self, start: float, end: float) -> float:
        pass


class NullEventCounter(EventCounter):
    def increase(self, amount: float, timestamp: float) -> None:
        pass

    def range_sum(self, start: float, end: float) -> float:
        return 0.0
