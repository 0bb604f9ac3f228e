"""Bounded polling for eventually consistent cloud resources."""
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Tuple, Type

from .config import PollConfig
from .errors import PollTimeout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PollPolicy:
    """Fixed-interval poll with a fixed deadline.

    The condition is called once immediately and then every ``interval``
    seconds until it returns a truthy value or ``timeout`` seconds have
    elapsed. Exceptions raised by the condition that match ``retry_on``
    count as "not yet" and are only logged; the caller sees a single
    PollTimeout at the end.

    ``clock`` and ``sleep`` are injectable so tests can run without waiting.
    """
    interval: float = 1.0
    timeout: float = 30.0
    clock: Callable[[], float] = field(default=time.monotonic, compare=False)
    sleep: Callable[[float], None] = field(default=time.sleep, compare=False)

    @classmethod
    def from_config(cls, config: PollConfig, **kwargs) -> 'PollPolicy':
        return cls(interval=config.interval, timeout=config.timeout, **kwargs)

    def wait_for(self, condition: Callable[[], Any], description: str = 'condition',
                 resource_id: Optional[str] = None,
                 retry_on: Tuple[Type[BaseException], ...] = (Exception,)) -> Any:
        """Poll ``condition`` until it returns a truthy value and return that value.

        Only exceptions matching ``retry_on`` are treated as "not yet"; any
        other exception propagates from the attempt that raised it.
        """
        deadline = self.clock() + self.timeout
        attempt = 0

        while True:
            attempt += 1
            try:
                result = condition()
                if result:
                    logger.debug(f"{description} satisfied after {attempt} attempt(s)")
                    return result
            except retry_on as e:
                logger.debug(f"Poll attempt {attempt} for {description} failed: {str(e)}")

            if self.clock() + self.interval > deadline:
                break
            self.sleep(self.interval)

        raise PollTimeout(
            f"Timed out after {self.timeout}s waiting for {description}",
            resource_id=resource_id,
        )
