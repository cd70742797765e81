import asyncio

import pytest

from cloudwright.errors import (
    DeletionStateError,
    PlatformAPIError,
    PollTimeoutError,
    ResourceNotFoundError,
    RetryableHTTPError,
    TerminalStatusError,
    UnauthorizedError,
)
from cloudwright.lifecycle.models import PollPolicy
from cloudwright.lifecycle.poller import LifecyclePoller, is_not_found_error


def _poller(sleep, max_attempts=5, interval=2.0, timeout=None):
    return LifecyclePoller(
        PollPolicy(max_attempts=max_attempts, interval=interval, timeout=timeout),
        sleep=sleep,
    )


@pytest.mark.asyncio
async def test_ready_after_building(recording_sleep, make_checker):
    checker = make_checker(["BUILDING", "DEPLOYING", "DEPLOYED"])

    status = await _poller(recording_sleep).wait_until_ready(checker, "my-agent")

    assert status == "DEPLOYED"
    assert checker.fetches == 3
    assert recording_sleep.calls == [2.0, 2.0]


@pytest.mark.asyncio
async def test_ready_immediately_does_not_sleep(recording_sleep, make_checker):
    checker = make_checker(["DEPLOYED"])

    await _poller(recording_sleep).wait_until_ready(checker, "my-agent")

    assert recording_sleep.calls == []


@pytest.mark.asyncio
async def test_ready_failed_status_is_terminal(recording_sleep, make_checker):
    checker = make_checker(["BUILDING", "FAILED", "DEPLOYED"])

    with pytest.raises(TerminalStatusError) as exc_info:
        await _poller(recording_sleep).wait_until_ready(checker, "my-agent")

    assert exc_info.value.status == "FAILED"
    assert "reached final status 'FAILED' (not deployed)" in str(exc_info.value)
    assert checker.fetches == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["TERMINATED", "DEACTIVATED", "DELETING"])
async def test_ready_other_final_statuses_stop_polling(recording_sleep, make_checker, status):
    checker = make_checker([status])

    with pytest.raises(TerminalStatusError):
        await _poller(recording_sleep).wait_until_ready(checker, "my-agent")

    assert checker.fetches == 1


@pytest.mark.asyncio
async def test_ready_budget_exhausted_while_building(recording_sleep, make_checker):
    checker = make_checker(["BUILDING"])

    with pytest.raises(PollTimeoutError) as exc_info:
        await _poller(recording_sleep, max_attempts=3).wait_until_ready(checker, "my-agent")

    assert "did not reach final status within timeout, last status: BUILDING" in str(exc_info.value)
    assert exc_info.value.last_status == "BUILDING"
    assert not exc_info.value.unknown
    assert checker.fetches == 3
    # no sleep after the last attempt
    assert len(recording_sleep.calls) == 2


@pytest.mark.asyncio
async def test_ready_unknown_status_reported(recording_sleep, make_checker):
    checker = make_checker(["WEIRD"])

    with pytest.raises(PollTimeoutError) as exc_info:
        await _poller(recording_sleep, max_attempts=2).wait_until_ready(checker, "my-agent")

    assert exc_info.value.unknown
    assert "unknown status after 2 attempts: WEIRD" in str(exc_info.value)


@pytest.mark.asyncio
async def test_ready_retries_fetch_errors(recording_sleep, make_checker):
    checker = make_checker([PlatformAPIError("boom", 500), "DEPLOYED"])

    status = await _poller(recording_sleep).wait_until_ready(checker, "my-agent")

    assert status == "DEPLOYED"
    assert checker.fetches == 2


@pytest.mark.asyncio
async def test_ready_fetch_errors_exhaust_budget(recording_sleep, make_checker):
    checker = make_checker([PlatformAPIError("boom", 500)])

    with pytest.raises(PollTimeoutError, match="failed to get agent status after 3 attempts: boom"):
        await _poller(recording_sleep, max_attempts=3).wait_until_ready(checker, "my-agent")


@pytest.mark.asyncio
async def test_ready_empty_body_is_retried(recording_sleep, make_checker):
    checker = make_checker([None, None, "DEPLOYED"])

    assert await _poller(recording_sleep).wait_until_ready(checker, "my-agent") == "DEPLOYED"


@pytest.mark.asyncio
async def test_ready_empty_body_until_budget(recording_sleep, make_checker):
    checker = make_checker([None])

    with pytest.raises(PollTimeoutError, match="not found after 2 attempts"):
        await _poller(recording_sleep, max_attempts=2).wait_until_ready(checker, "my-agent")


@pytest.mark.asyncio
async def test_ready_external_deadline(make_checker):
    checker = make_checker(["BUILDING"])
    poller = LifecyclePoller(PollPolicy(max_attempts=100, interval=0.05, timeout=0.01))

    with pytest.raises(PollTimeoutError, match="exceeded deadline"):
        await poller.wait_until_ready(checker, "my-agent")


@pytest.mark.asyncio
async def test_ready_cancellation_propagates(make_checker):
    checker = make_checker(["BUILDING"])
    poller = LifecyclePoller(PollPolicy(max_attempts=100, interval=10.0))

    task = asyncio.create_task(poller.wait_until_ready(checker, "my-agent"))
    await asyncio.sleep(0)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_deleted_on_not_found(recording_sleep, make_checker):
    checker = make_checker(["DELETING", ResourceNotFoundError("gone", 404)])

    await _poller(recording_sleep).wait_until_deleted(checker, "my-agent")

    assert checker.fetches == 2
    assert recording_sleep.calls == [2.0]


@pytest.mark.asyncio
async def test_deleted_on_empty_body(recording_sleep, make_checker):
    checker = make_checker([None])

    await _poller(recording_sleep).wait_until_deleted(checker, "my-agent")

    assert checker.fetches == 1


@pytest.mark.asyncio
async def test_deleted_on_deleted_status(recording_sleep, make_checker):
    checker = make_checker(["DELETING", "DELETED"])

    await _poller(recording_sleep).wait_until_deleted(checker, "my-agent")


@pytest.mark.asyncio
async def test_deleted_unexpected_state_fails_fast(recording_sleep, make_checker):
    checker = make_checker(["DEPLOYED"])

    with pytest.raises(DeletionStateError) as exc_info:
        await _poller(recording_sleep).wait_until_deleted(checker, "my-agent")

    assert exc_info.value.status == "DEPLOYED"
    assert "unexpected state 'DEPLOYED' during deletion" in str(exc_info.value)
    assert recording_sleep.calls == []


@pytest.mark.asyncio
async def test_deleted_stuck_deleting(recording_sleep, make_checker):
    checker = make_checker(["DELETING"])

    with pytest.raises(PollTimeoutError, match="still in deleting state after 3 attempts"):
        await _poller(recording_sleep, max_attempts=3).wait_until_deleted(checker, "my-agent")


@pytest.mark.asyncio
async def test_deleted_not_found_text_counts_as_gone(recording_sleep, make_checker):
    checker = make_checker([PlatformAPIError("agent not found")])

    await _poller(recording_sleep).wait_until_deleted(checker, "my-agent")


@pytest.mark.asyncio
async def test_deleted_other_errors_exhaust_budget(recording_sleep, make_checker):
    checker = make_checker([PlatformAPIError("boom", 500)])

    with pytest.raises(PollTimeoutError, match="during deletion after 2 attempts"):
        await _poller(recording_sleep, max_attempts=2).wait_until_deleted(checker, "my-agent")


def test_is_not_found_error():
    assert is_not_found_error(ResourceNotFoundError("x", 404))
    assert is_not_found_error(PlatformAPIError("HTTP 404"))
    assert is_not_found_error(PlatformAPIError("Not Found"))
    assert not is_not_found_error(PlatformAPIError("boom", 500))


def test_status_code_decides_over_message_text():
    assert not is_not_found_error(UnauthorizedError("get agent 'svc-404' failed with status 403", 403))
    assert not is_not_found_error(RetryableHTTPError("HTTP 503: resource not found upstream", 503))
    assert is_not_found_error(PlatformAPIError("gone", 404))


def test_resource_name_is_ignored_in_text_match():
    error = RetryableHTTPError("GET /agents/svc-404: connection refused")

    assert not is_not_found_error(error, "svc-404")
    assert is_not_found_error(error)


@pytest.mark.asyncio
async def test_deleted_forbidden_fetch_on_404_name_is_not_success(recording_sleep, make_checker):
    checker = make_checker([UnauthorizedError("get agent 'svc-404' failed with status 403", 403)])

    with pytest.raises(PollTimeoutError, match="during deletion after 3 attempts"):
        await _poller(recording_sleep, max_attempts=3).wait_until_deleted(checker, "svc-404")

    assert checker.fetches == 3


def test_poll_policy_rejects_bad_values():
    with pytest.raises(ValueError):
        PollPolicy(max_attempts=0)
    with pytest.raises(ValueError):
        PollPolicy(interval=-1)
    assert PollPolicy(max_attempts=60, interval=2.0).budget_seconds == 120.0
