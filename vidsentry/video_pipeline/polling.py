import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional
from loguru import logger

from vidsentry.providers.base import InferenceProvider
from vidsentry.models import FileState, RemoteFileHandle

Sleep = Callable[[float], Awaitable[None]]
AttemptCallback = Callable[[int, int], None]


class PollState(str, Enum):
    SUBMITTED = "SUBMITTED"
    POLLING = "POLLING"
    ACTIVE = "ACTIVE"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"


@dataclass
class PollOutcome:
    state: PollState
    handle: RemoteFileHandle
    attempts: int

    @property
    def is_ready(self) -> bool:
        return self.state == PollState.ACTIVE


class FileProcessingPoller:
    """
    Waits for a remote file to leave PROCESSING.

    Transitions: SUBMITTED -> POLLING -> ACTIVE | FAILED | TIMED_OUT.
    Each attempt announces itself through ``on_attempt(attempt, max_attempts)``,
    sleeps ``interval`` seconds, then refreshes the handle. The loop never
    runs more than ``max_attempts`` attempts.
    """

    def __init__(
        self,
        provider: InferenceProvider,
        interval: float = 10.0,
        max_attempts: int = 30,
        sleep: Optional[Sleep] = None,
    ):
        self.provider = provider
        self.interval = interval
        self.max_attempts = max_attempts
        self.sleep = sleep or asyncio.sleep

    @staticmethod
    def _settle(handle: RemoteFileHandle) -> PollState:
        if handle.state == FileState.PROCESSING:
            return PollState.POLLING
        if handle.state == FileState.ACTIVE:
            return PollState.ACTIVE
        return PollState.FAILED

    async def wait_until_ready(
        self,
        handle: RemoteFileHandle,
        on_attempt: Optional[AttemptCallback] = None,
    ) -> PollOutcome:
        attempts = 0
        logger.debug(f"Polling {handle.file_id} from state {PollState.SUBMITTED.value}")

        handle = await self.provider.get_file(handle.file_id)
        state = self._settle(handle)

        while state == PollState.POLLING:
            if attempts >= self.max_attempts:
                state = PollState.TIMED_OUT
                break
            attempts += 1
            if on_attempt is not None:
                on_attempt(attempts, self.max_attempts)
            await self.sleep(self.interval)
            handle = await self.provider.get_file(handle.file_id)
            state = self._settle(handle)

        logger.info(
            f"Polling of {handle.file_id} finished in state {state.value} "
            f"(remote state {handle.state.value}, {attempts} attempts)"
        )
        return PollOutcome(state=state, handle=handle, attempts=attempts)
