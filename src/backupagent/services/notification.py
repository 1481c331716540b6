"""Webhook notifications for backup outcomes."""

from typing import Any, Dict, List, Optional

import requests

from backupagent.models import NotificationMessage
from backupagent.settings import GoogleChatSettings, NotificationSettings, SlackSettings


def build_slack_payload(message: NotificationMessage) -> Dict[str, Any]:
    blocks: List[Dict[str, Any]] = [
        {
            "type": "header",
            "text": {"type": "plain_text", "text": message.title, "emoji": True},
        },
        {"type": "section", "text": {"type": "mrkdwn", "text": message.body}},
    ]

    if message.error:
        blocks.append(
            {"type": "section", "text": {"type": "mrkdwn", "text": f"*Error:*\n```{message.error}```"}}
        )

    if message.artifact_path:
        blocks.append(
            {
                "type": "section",
                "text": {"type": "mrkdwn", "text": f"*Backup Path:*\n{message.artifact_path}"},
            }
        )

    return {"blocks": blocks, "text": message.title}


def _paragraph(text: str) -> Dict[str, Any]:
    return {"widgets": [{"textParagraph": {"text": text}}]}


def build_google_chat_payload(
    message: NotificationMessage, thread_key: Optional[str] = None
) -> Dict[str, Any]:
    sections = [_paragraph(message.body)]
    if message.error:
        sections.append(_paragraph(f"<b>Error:</b>\n<pre>{message.error}</pre>"))
    if message.artifact_path:
        sections.append(_paragraph(f"<b>Backup Path:</b>\n{message.artifact_path}"))

    payload: Dict[str, Any] = {"cards": [{"header": {"title": message.title}, "sections": sections}]}
    if thread_key:
        payload["thread"] = {"name": thread_key}
    return payload


class WebhookChannel:
    """One chat destination reached by an HTTP POST of a JSON payload."""

    label = "webhook"
    timeout = 10

    def __init__(self, webhook_url: str, logger, requests_module=requests):
        self.webhook_url = webhook_url
        self.logger = logger
        self.requests = requests_module

    def build_payload(self, message: NotificationMessage) -> Dict[str, Any]:
        raise NotImplementedError

    def send(self, message: NotificationMessage):
        if not self.webhook_url:
            self.logger.warning("%s webhook URL not configured", self.label)
            return

        response = self.requests.post(
            self.webhook_url,
            json=self.build_payload(message),
            timeout=self.timeout,
        )
        response.raise_for_status()


class SlackChannel(WebhookChannel):
    label = "Slack"

    def build_payload(self, message: NotificationMessage) -> Dict[str, Any]:
        return build_slack_payload(message)


class GoogleChatChannel(WebhookChannel):
    label = "Google Chat"

    def __init__(self, webhook_url: str, logger, thread_key: Optional[str] = None, requests_module=requests):
        super().__init__(webhook_url, logger, requests_module=requests_module)
        self.thread_key = thread_key

    def build_payload(self, message: NotificationMessage) -> Dict[str, Any]:
        return build_google_chat_payload(message, self.thread_key)


class Notifier:
    """Fans a message out to every enabled channel. Never raises."""

    def __init__(self, settings: NotificationSettings, logger, channels: Optional[List[WebhookChannel]] = None):
        self.settings = settings
        self.logger = logger
        self.channels = channels if channels is not None else self._build_channels(settings, logger)

    @staticmethod
    def _build_channels(settings: NotificationSettings, logger) -> List[WebhookChannel]:
        channels: List[WebhookChannel] = []
        slack: SlackSettings = settings.slack
        google_chat: GoogleChatSettings = settings.google_chat
        if slack.enabled:
            channels.append(SlackChannel(slack.webhook_url, logger))
        if google_chat.enabled:
            channels.append(
                GoogleChatChannel(google_chat.webhook_url, logger, thread_key=google_chat.thread_key)
            )
        return channels

    def should_send(self, message: NotificationMessage) -> bool:
        if not self.settings.enabled:
            return False
        if message.is_failure:
            return self.settings.error
        return self.settings.success

    def notify(self, message: NotificationMessage):
        if not self.should_send(message):
            self.logger.debug("Notification suppressed by settings: %s", message.title)
            return

        for channel in self.channels:
            try:
                channel.send(message)
            except Exception as exc:
                self.logger.error("Failed to send %s notification: %s", channel.label, exc)
