"""Ordered fallback over alternative ways of doing the same thing.

``first_success`` awaits each attempt in turn. An attempt that raises is
logged and skipped; the first one that returns wins and the rest never run.
Only exhaustion of the whole list is an error.

Example:
    >>> attempts = [
    ...     Attempt("file-arg", lambda: run_command("claude", str(prompt_file))),
    ...     Attempt("alt-binary", lambda: run_command("claude-cli", str(prompt_file))),
    ... ]
    >>> stdout, _, _ = await first_success(attempts)
"""

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

import structlog

log = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Attempt(Generic[T]):
    """One named, independent way of producing a result."""

    name: str
    run: Callable[[], Awaitable[T]]


class FallbackExhaustedError(Exception):
    """Every attempt failed.

    Attributes:
        failures: (attempt name, exception) pairs in the order they were tried
    """

    def __init__(self, failures: list[tuple[str, Exception]]) -> None:
        self.failures = failures
        super().__init__(str(self))

    @property
    def attempts(self) -> list[str]:
        return [name for name, _ in self.failures]

    @property
    def last_error(self) -> Exception | None:
        return self.failures[-1][1] if self.failures else None

    def __str__(self) -> str:
        if not self.failures:
            return "No attempts to run"
        name, error = self.failures[-1]
        return f"All {len(self.failures)} attempt(s) failed; last ({name}): {error}"


async def first_success(attempts: Sequence[Attempt[T]]) -> T:
    """Return the result of the first attempt that does not raise.

    Args:
        attempts: Attempts ordered from most to least likely to succeed

    Returns:
        The winning attempt's result

    Raises:
        FallbackExhaustedError: If every attempt raised, or there were none
    """
    failures: list[tuple[str, Exception]] = []

    for index, attempt in enumerate(attempts, start=1):
        log.debug("fallback_attempt_started", attempt=attempt.name, position=index, total=len(attempts))
        try:
            result = await attempt.run()
        except Exception as e:
            log.warning("fallback_attempt_failed", attempt=attempt.name, error=str(e))
            failures.append((attempt.name, e))
            continue

        log.info("fallback_attempt_succeeded", attempt=attempt.name, position=index)
        return result

    raise FallbackExhaustedError(failures)
