"""
Temperature History Buffer

Fixed-capacity round-robin store of the most recent readings.
"""

from activator.common.exceptions import NoDataError

from .parser import TemperatureRecord


class HistoryBuffer:
    """
    Circular buffer of TemperatureRecords with a running mean.

    The write cursor only grows; the slot is `position % capacity`. Until the
    buffer has wrapped once, only `position` slots hold real readings and the
    mean divides by that count, not by the capacity.
    """

    def __init__(self, capacity: int = 4):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")

        self._capacity = capacity
        self._slots: list[TemperatureRecord | None] = [None] * capacity
        self._position = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def position(self) -> int:
        """Total number of records pushed so far"""
        return self._position

    def __len__(self) -> int:
        return min(self._position, self._capacity)

    def push(self, record: TemperatureRecord) -> None:
        self._slots[self._position % self._capacity] = record
        self._position += 1

    def mean(self) -> int:
        """
        Mean temperature over the valid slots, truncated toward zero.

        Raises:
            NoDataError: nothing has been pushed yet
        """
        count = len(self)
        if count == 0:
            raise NoDataError()

        total = sum(record.temperature for record in self._slots[:count])
        quotient = abs(total) // count
        return quotient if total >= 0 else -quotient

    def records(self) -> list[TemperatureRecord]:
        """Valid records, oldest first"""
        if self._position <= self._capacity:
            return list(self._slots[:self._position])

        start = self._position % self._capacity
        return self._slots[start:] + self._slots[:start]

    @property
    def latest(self) -> TemperatureRecord | None:
        if self._position == 0:
            return None
        return self._slots[(self._position - 1) % self._capacity]

    def clear(self) -> None:
        self._slots = [None] * self._capacity
        self._position = 0

    def to_dict(self) -> dict:
        try:
            mean = self.mean()
        except NoDataError:
            mean = None
        return {
            "capacity": self._capacity,
            "count": len(self),
            "position": self._position,
            "mean": mean,
            "records": [r.to_dict() for r in self.records()],
        }
