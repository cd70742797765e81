"""Status polling state machine for resource creation and deletion.

The poller never mutates state: each attempt performs a fresh fetch through a
``StatusChecker`` and the platform stays the single source of truth. Attempts
are spaced by a fixed interval; the budget is ``max_attempts`` fetches, with
no sleep after the last one.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Coroutine

import structlog

from cloudwright.errors import (
    CloudwrightError,
    DeletionStateError,
    PollTimeoutError,
    ResourceNotFoundError,
    TerminalStatusError,
)
from cloudwright.lifecycle.models import (
    LifecycleStatus,
    PollPolicy,
    is_building_status,
    is_final_status,
)
from cloudwright.lifecycle.status import StatusChecker

Sleep = Callable[[float], Awaitable[None]]


def is_not_found_error(exc: BaseException, name: str | None = None) -> bool:
    """True for a 404, or for a status-less error whose text says so.

    Errors carrying a status code are decided by that code alone. The text
    check ignores the resource name so a name like ``svc-404`` never reads
    as absence.
    """
    if isinstance(exc, ResourceNotFoundError):
        return True
    status_code = getattr(exc, "status_code", None)
    if status_code is not None:
        return status_code == 404
    text = str(exc)
    if name:
        text = text.replace(name, "")
    text = text.lower()
    return "404" in text or "not found" in text


class LifecyclePoller:
    """Waits for resources to settle after a create or delete call."""

    def __init__(
        self,
        policy: PollPolicy | None = None,
        *,
        logger: Any = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._policy = policy or PollPolicy()
        self._logger = logger or structlog.get_logger()
        self._sleep = sleep

    @property
    def policy(self) -> PollPolicy:
        return self._policy

    async def wait_until_ready(self, checker: StatusChecker, name: str) -> str:
        """Poll until the resource reaches a final status.

        Returns the final status (always ``DEPLOYED``). Raises
        ``TerminalStatusError`` for any other final status and
        ``PollTimeoutError`` when the budget or deadline runs out.
        """
        return await self._bounded(self._poll_ready(checker, name), checker, name, "deployment")

    async def wait_until_deleted(self, checker: StatusChecker, name: str) -> None:
        """Poll until the resource is gone (404, empty body or DELETED).

        Raises ``DeletionStateError`` immediately if the resource is seen in
        any state other than DELETING.
        """
        await self._bounded(self._poll_deleted(checker, name), checker, name, "deletion")

    async def _bounded(
        self,
        poll: Coroutine[Any, Any, Any],
        checker: StatusChecker,
        name: str,
        phase: str,
    ) -> Any:
        kind = checker.kind.value
        timeout = self._policy.timeout
        try:
            if timeout is None:
                return await poll
            try:
                async with asyncio.timeout(timeout):
                    return await poll
            except TimeoutError as exc:
                self._logger.warning("poll_deadline_exceeded", kind=kind, name=name, phase=phase)
                raise PollTimeoutError(
                    f"{kind} '{name}' {phase} check exceeded deadline of {timeout}s"
                ) from exc
        except asyncio.CancelledError:
            self._logger.info("poll_cancelled", kind=kind, name=name, phase=phase)
            raise

    async def _poll_ready(self, checker: StatusChecker, name: str) -> str:
        kind = checker.kind.value
        attempts = self._policy.max_attempts
        log = self._logger.bind(kind=kind, name=name)
        status = ""

        for attempt in range(1, attempts + 1):
            last = attempt == attempts
            try:
                resource = await checker.fetch(name)
            except CloudwrightError as exc:
                log.warning("status_fetch_failed", attempt=attempt, max_attempts=attempts, error=str(exc))
                if last:
                    raise PollTimeoutError(
                        f"failed to get {kind} status after {attempts} attempts: {exc}"
                    ) from exc
                await self._sleep(self._policy.interval)
                continue

            if resource is None:
                log.info("resource_not_visible", attempt=attempt, max_attempts=attempts)
                if last:
                    raise PollTimeoutError(f"{kind} '{name}' not found after {attempts} attempts")
                await self._sleep(self._policy.interval)
                continue

            status = checker.extract_status(resource)
            log.info("poll_attempt", attempt=attempt, max_attempts=attempts, status=status)

            if is_final_status(status):
                if status == LifecycleStatus.DEPLOYED.value:
                    log.info("resource_deployed", attempts=attempt)
                    return status
                raise TerminalStatusError(
                    f"{kind} '{name}' reached final status '{status}' (not deployed)",
                    status,
                )

            if not last:
                await self._sleep(self._policy.interval)

        if is_building_status(status):
            raise PollTimeoutError(
                f"{kind} '{name}' did not reach final status within timeout, last status: {status}",
                last_status=status,
            )
        log.warning("unknown_status", status=status)
        raise PollTimeoutError(
            f"{kind} '{name}' unknown status after {attempts} attempts: {status}",
            last_status=status,
            unknown=True,
        )

    async def _poll_deleted(self, checker: StatusChecker, name: str) -> None:
        kind = checker.kind.value
        attempts = self._policy.max_attempts
        log = self._logger.bind(kind=kind, name=name)

        for attempt in range(1, attempts + 1):
            last = attempt == attempts
            try:
                resource = await checker.fetch(name)
            except CloudwrightError as exc:
                if is_not_found_error(exc, name):
                    log.info("resource_deleted", attempts=attempt, reason="not_found")
                    return
                log.warning(
                    "deletion_fetch_failed", attempt=attempt, max_attempts=attempts, error=str(exc)
                )
                if last:
                    raise PollTimeoutError(
                        f"failed to get {kind} status during deletion after {attempts} attempts: {exc}"
                    ) from exc
                await self._sleep(self._policy.interval)
                continue

            if resource is None:
                log.info("resource_deleted", attempts=attempt, reason="empty")
                return

            status = checker.extract_status(resource)
            log.info("deletion_poll_attempt", attempt=attempt, max_attempts=attempts, status=status)

            if status == LifecycleStatus.DELETED.value:
                log.info("resource_deleted", attempts=attempt, reason="status")
                return
            if status != LifecycleStatus.DELETING.value:
                raise DeletionStateError(
                    f"{kind} '{name}' is in unexpected state '{status}' during deletion",
                    status,
                )
            if last:
                raise PollTimeoutError(
                    f"{kind} '{name}' still in deleting state after {attempts} attempts",
                    last_status=status,
                )
            await self._sleep(self._policy.interval)
