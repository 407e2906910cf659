"""
Periodic live WPM reporting for a running typing session
"""

import asyncio
from typing import Callable, Optional

from ..utils.logger import get_logger
from ..utils.timing import SleepFunc
from .models import SessionState
from .typing_session import TypingSession

logger = get_logger(__name__)


class LiveWpmMonitor:
    """
    Pushes the live WPM of a session to a callback at a fixed interval

    Nothing is reported before the test starts or while it is paused.
    The monitor stops on its own once the session completes.
    """

    def __init__(
        self,
        session: TypingSession,
        callback: Callable[[float], None],
        interval: float = 0.5,
        sleep: Optional[SleepFunc] = None
    ):
        self.session = session
        self.callback = callback
        self.interval = interval
        self._sleep = sleep or asyncio.sleep
        self._task: Optional[asyncio.Task] = None

    async def run(self) -> int:
        """
        Report until the session completes

        Returns:
            Number of values reported
        """
        reports = 0
        while self.session.state is not SessionState.COMPLETED:
            if self.session.state is SessionState.RUNNING:
                self.callback(self.session.live_wpm())
                reports += 1
            await self._sleep(self.interval)
        return reports

    def start(self) -> asyncio.Task:
        """Run the monitor as a background task on the current loop"""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())
        return self._task

    def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            logger.debug("Live WPM monitor stopped")
        self._task = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()
