"""
Blocks until cluster resources report a target status
"""
import logging
import subprocess
import time
from typing import Callable, Iterable, Optional

from .exceptions import MissingToolError, ReadinessTimeoutError
from .models import ReadinessCondition, ReadinessState, ResourceReference

LOG = logging.getLogger(__name__)


class ReadinessPoller:
    """
    Polls a status field until it matches the target, sleeping a fixed interval between attempts.

    With no timeout the poller waits forever. Query failures (ex: the resource does not exist yet) count as
    "not ready" and are retried like any other mismatch.

    :param query: Callable(resource, jsonpath) returning the current field value
    :param rollout: Callable(resource) that blocks until the resource's rollout completes. Raises on rollout failure
    """

    def __init__(self,
                 query: Callable[[ResourceReference, str], str],
                 rollout: Optional[Callable[[ResourceReference], object]] = None,
                 interval: float = 1.0,
                 timeout: Optional[float] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic):
        self.query = query
        self.rollout = rollout
        self.interval = interval
        self.timeout = timeout
        self.sleep = sleep
        self.clock = clock
        self.state = ReadinessState.PENDING

    def _current(self, condition: ReadinessCondition) -> Optional[str]:
        try:
            return self.query(condition.resource, condition.jsonpath)
        except (subprocess.CalledProcessError, OSError):
            return None

    def wait(self, condition: ReadinessCondition) -> ReadinessState:
        self.state = ReadinessState.PENDING
        LOG.debug('Waiting for %s', condition)
        start = self.clock()
        while True:
            value = self._current(condition)
            if value == condition.target:
                break
            if self.timeout is not None and self.clock() - start >= self.timeout:
                self.state = ReadinessState.FAILED
                raise ReadinessTimeoutError(condition, self.timeout)
            LOG.debug('%s is %r, waiting for %r', condition.resource, value, condition.target)
            self.sleep(self.interval)

        if condition.wait_for_rollout and self.rollout is not None:
            try:
                self.rollout(condition.resource)
            except (subprocess.CalledProcessError, OSError, MissingToolError):
                self.state = ReadinessState.FAILED
                LOG.error('Rollout of %s failed', condition.resource)
                raise
        self.state = ReadinessState.READY
        return self.state

    def wait_all(self, conditions: Iterable[ReadinessCondition]) -> ReadinessState:
        for condition in conditions:
            self.wait(condition)
        return self.state
