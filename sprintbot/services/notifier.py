"""
Chat notifier: post text messages to a Slack incoming webhook.

Without a webhook URL the notifier only logs messages. Sending never raises;
callers get True/False.
"""

import logging

import httpx

from sprintbot.core.config import Settings

logger = logging.getLogger(__name__)

PROCESSING_MESSAGE = "🤔 Processing your request... Please wait a moment."


def format_error_message(error: str, original_query: str) -> str:
    return (
        "❌ *Error Processing Request*\n\n"
        f'*Query:* "{original_query}"\n'
        f"*Error:* {error}\n\n"
        "Please try again or contact the development team if the issue persists."
    )


class ChatNotifier:
    """Interface shared by the webhook and log-only notifiers."""

    mode = "base"

    def send_message(self, text: str, channel: str | None = None, thread_ts: str | None = None) -> bool:
        raise NotImplementedError

    def send_error_response(self, error: str, original_query: str) -> bool:
        return self.send_message(format_error_message(error, original_query))

    def send_processing_message(self, channel: str | None = None, thread_ts: str | None = None) -> bool:
        return self.send_message(PROCESSING_MESSAGE, channel, thread_ts)

    def close(self) -> None:
        pass


class LogNotifier(ChatNotifier):
    """Logs messages instead of sending them; always succeeds."""

    mode = "mock"

    def __init__(self) -> None:
        logger.warning("[notifier] Running in mock mode - Slack messages will be logged")

    def send_message(self, text: str, channel: str | None = None, thread_ts: str | None = None) -> bool:
        logger.info("[notifier:mock] message=%s", text)
        if channel:
            logger.info("[notifier:mock] channel=%s", channel)
        if thread_ts:
            logger.info("[notifier:mock] thread=%s", thread_ts)
        return True


class WebhookNotifier(ChatNotifier):
    """Posts {text, channel?, thread_ts?} to the configured webhook; True only on HTTP 200."""

    mode = "live"

    def __init__(self, settings: Settings, transport: httpx.BaseTransport | None = None) -> None:
        self.webhook_url = settings.slack_webhook_url
        self.timeout = settings.slack_timeout_seconds
        self._client = httpx.Client(headers={"Content-Type": "application/json"}, transport=transport)

    def send_message(self, text: str, channel: str | None = None, thread_ts: str | None = None) -> bool:
        payload: dict[str, str] = {"text": text}
        if channel:
            payload["channel"] = channel
        if thread_ts:
            payload["thread_ts"] = thread_ts
        try:
            response = self._client.post(self.webhook_url, json=payload, timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.error("[notifier] Error sending Slack message: %s", e)
            return False
        if response.status_code == 200:
            logger.info("[notifier] Slack message sent (len=%d)", len(text))
            return True
        logger.error("[notifier] Failed to send Slack message: %s %s", response.status_code, response.text[:200])
        return False

    def close(self) -> None:
        self._client.close()


def create_notifier(settings: Settings) -> ChatNotifier:
    """Pick the webhook notifier when a webhook URL is set, otherwise log only."""
    if settings.notifier_is_live:
        return WebhookNotifier(settings)
    return LogNotifier()
