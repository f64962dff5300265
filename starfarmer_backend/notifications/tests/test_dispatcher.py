# notifications/tests/test_dispatcher.py

from unittest import mock

from django.test import SimpleTestCase, override_settings

from notifications.services.dispatcher import NotificationDispatcher


class NotificationDispatcherTests(SimpleTestCase):
    """
    GUARANTEES:
    - Bounded retries with exponential backoff
    - Failures are logged, never raised to the caller
    """

    def setUp(self):
        self.sleeps = []
        self.dispatcher = NotificationDispatcher(
            run_async=False,
            max_attempts=3,
            backoff_seconds=1.5,
            sleep=self.sleeps.append,
        )

    def test_success_on_first_attempt(self):
        job = mock.Mock()

        self.dispatcher.submit(job, "order-1", channel="email")

        job.assert_called_once_with("order-1", channel="email")
        self.assertEqual(self.sleeps, [])

    def test_retries_with_exponential_backoff(self):
        job = mock.Mock(side_effect=[ConnectionError("smtp down"), ConnectionError("smtp down"), None])

        with self.assertLogs("notifications.services.dispatcher", level="WARNING") as logs:
            ok = self.dispatcher.run_with_retry(job, "order-1")

        self.assertTrue(ok)
        self.assertEqual(job.call_count, 3)
        self.assertEqual(self.sleeps, [1.5, 3.0])
        self.assertEqual(len(logs.records), 2)

    def test_gives_up_after_max_attempts_without_raising(self):
        job = mock.Mock(side_effect=RuntimeError("template missing"))

        with self.assertLogs("notifications.services.dispatcher", level="ERROR") as logs:
            self.dispatcher.submit(job, "order-1")

        self.assertEqual(job.call_count, 3)
        self.assertIn("Notification failed permanently", logs.output[-1])

    def test_async_jobs_run_on_the_pool(self):
        dispatcher = NotificationDispatcher(run_async=True, max_attempts=1, max_workers=1)
        job = mock.Mock()

        dispatcher.submit(job, "order-1")
        dispatcher.shutdown(wait=True)

        job.assert_called_once_with("order-1")

    @override_settings(
        NOTIFICATIONS={"ASYNC": False, "MAX_ATTEMPTS": 5, "BACKOFF_SECONDS": 0.25, "MAX_WORKERS": 3}
    )
    def test_from_settings(self):
        dispatcher = NotificationDispatcher.from_settings()

        self.assertFalse(dispatcher.run_async)
        self.assertEqual(dispatcher.max_attempts, 5)
        self.assertEqual(dispatcher.backoff_seconds, 0.25)
        self.assertEqual(dispatcher.max_workers, 3)
