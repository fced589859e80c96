import asyncio
import unittest
from unittest.mock import AsyncMock, patch

from symptom_assist.errors import (
    BackendAuthError,
    BackendError,
    MalformedResponseError,
    RequestTimeoutError,
)
from symptom_assist.gemini.retry import is_retryable, with_retry


class WithRetryTests(unittest.TestCase):
    def test_retries_transient_errors_with_exponential_backoff(self) -> None:
        operation = AsyncMock(side_effect=[RequestTimeoutError("slow"), BackendError("503"), "ok"])

        with patch("symptom_assist.gemini.retry.asyncio.sleep", new=AsyncMock()) as sleep_mock:
            result = asyncio.run(with_retry(operation, attempts=3, backoff_seconds=0.5))

        self.assertEqual(result, "ok")
        self.assertEqual(operation.await_count, 3)
        self.assertEqual([c.args[0] for c in sleep_mock.await_args_list], [0.5, 1.0])

    def test_does_not_retry_auth_or_malformed(self) -> None:
        for error in (BackendAuthError("bad key"), MalformedResponseError("bad json")):
            with self.subTest(error=type(error).__name__):
                operation = AsyncMock(side_effect=error)
                with patch("symptom_assist.gemini.retry.asyncio.sleep", new=AsyncMock()) as sleep_mock:
                    with self.assertRaises(type(error)):
                        asyncio.run(with_retry(operation, attempts=3, backoff_seconds=0.1))
                self.assertEqual(operation.await_count, 1)
                sleep_mock.assert_not_awaited()

    def test_raises_last_error_when_attempts_exhausted(self) -> None:
        operation = AsyncMock(side_effect=[BackendError("one"), BackendError("two")])

        with patch("symptom_assist.gemini.retry.asyncio.sleep", new=AsyncMock()):
            with self.assertRaises(BackendError) as ctx:
                asyncio.run(with_retry(operation, attempts=2, backoff_seconds=0.1))

        self.assertEqual(ctx.exception.message, "two")

    def test_single_attempt_raises_its_error(self) -> None:
        error = RequestTimeoutError("slow")
        operation = AsyncMock(side_effect=error)

        with patch("symptom_assist.gemini.retry.asyncio.sleep", new=AsyncMock()) as sleep_mock:
            with self.assertRaises(RequestTimeoutError) as ctx:
                asyncio.run(with_retry(operation, attempts=1, backoff_seconds=0.1))

        self.assertIs(ctx.exception, error)
        sleep_mock.assert_not_awaited()

    def test_client_side_backend_rejections_are_not_retried(self) -> None:
        operation = AsyncMock(
            side_effect=BackendError("bad request", details={"backend_code": 400})
        )

        with patch("symptom_assist.gemini.retry.asyncio.sleep", new=AsyncMock()) as sleep_mock:
            with self.assertRaises(BackendError):
                asyncio.run(with_retry(operation, attempts=3, backoff_seconds=0.1))

        self.assertEqual(operation.await_count, 1)
        sleep_mock.assert_not_awaited()

    def test_is_retryable(self) -> None:
        self.assertTrue(is_retryable(BackendError("x")))
        self.assertTrue(is_retryable(BackendError("x", details={"backend_code": 503})))
        self.assertFalse(is_retryable(BackendError("x", details={"backend_code": 400})))
        self.assertFalse(is_retryable(BackendError("x", details={"backend_code": 404})))
        self.assertFalse(is_retryable(BackendAuthError("x")))
        self.assertFalse(is_retryable(ValueError("x")))


if __name__ == "__main__":
    unittest.main()
