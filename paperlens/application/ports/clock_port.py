from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


class ClockPort(ABC):
    """Port for time-related operations.

    Why: Embedding and analysis timestamps must be testable.
    Infrastructure provides the concrete implementation (SystemClock).
    """

    @abstractmethod
    def now(self) -> datetime:
        """Return current UTC datetime."""
        ...

    def now_ms(self) -> int:
        """Epoch milliseconds of now()."""
        return int(self.now().timestamp() * 1000)
