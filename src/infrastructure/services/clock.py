"""Wall clock used for every token expiry comparison."""

from datetime import datetime

from src.domain.entities.user import utc_now
from src.domain.interfaces.infrastructure import IClock


class SystemClock(IClock):
    """Current UTC time from the system clock."""

    def now(self) -> datetime:
        return utc_now()
