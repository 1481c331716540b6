from backupagent.models import NotificationMessage
from backupagent.services.notification import (
    GoogleChatChannel,
    Notifier,
    SlackChannel,
    build_google_chat_payload,
    build_slack_payload,
)
from backupagent.settings import GoogleChatSettings, NotificationSettings, SlackSettings


class DummyLogger:
    def __init__(self):
        self.errors = []
        self.warnings = []

    def debug(self, *_args, **_kwargs):
        return None

    def warning(self, message, *args):
        self.warnings.append(message % args)

    def error(self, message, *args):
        self.errors.append(message % args)


class FakeResponse:
    def __init__(self, status_code=200):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise RuntimeError(f"HTTP {self.status_code}")


class FakeRequestsModule:
    def __init__(self, status_code=200):
        self.status_code = status_code
        self.posts = []

    def post(self, url, json=None, timeout=None):
        self.posts.append({"url": url, "json": json, "timeout": timeout})
        return FakeResponse(self.status_code)


class RecordingChannel:
    label = "recording"

    def __init__(self, error=None):
        self.error = error
        self.sent = []

    def send(self, message):
        if self.error:
            raise self.error
        self.sent.append(message)


SUCCESS = NotificationMessage(
    title="MySQL Backup Successful",
    body="Database backup completed successfully.\nDatabase: app\nPath: /b/backup.sql",
    artifact_path="/b/backup.sql",
)
FAILURE = NotificationMessage(
    title="MySQL Backup Failed",
    body="Database backup failed.\nDatabase: app",
    error="access denied",
)


def test_slack_payload_includes_error_block_only_for_failures():
    success = build_slack_payload(SUCCESS)
    failure = build_slack_payload(FAILURE)

    assert success["text"] == "MySQL Backup Successful"
    assert success["blocks"][0]["text"] == {
        "type": "plain_text",
        "text": "MySQL Backup Successful",
        "emoji": True,
    }
    assert success["blocks"][-1]["text"]["text"] == "*Backup Path:*\n/b/backup.sql"
    assert len(success["blocks"]) == 3
    assert failure["blocks"][-1]["text"]["text"] == "*Error:*\n```access denied```"
    assert len(failure["blocks"]) == 3


def test_google_chat_payload_adds_thread_when_configured():
    payload = build_google_chat_payload(FAILURE, thread_key="backups")

    card = payload["cards"][0]
    assert card["header"] == {"title": "MySQL Backup Failed"}
    assert card["sections"][0]["widgets"][0]["textParagraph"]["text"] == FAILURE.body
    assert card["sections"][1]["widgets"][0]["textParagraph"]["text"] == (
        "<b>Error:</b>\n<pre>access denied</pre>"
    )
    assert payload["thread"] == {"name": "backups"}
    assert "thread" not in build_google_chat_payload(SUCCESS)


def test_channel_posts_json_payload():
    requests_module = FakeRequestsModule()
    channel = SlackChannel("https://hooks.slack.test/x", DummyLogger(), requests_module=requests_module)

    channel.send(SUCCESS)

    assert requests_module.posts[0]["url"] == "https://hooks.slack.test/x"
    assert requests_module.posts[0]["json"] == build_slack_payload(SUCCESS)
    assert requests_module.posts[0]["timeout"] == 10


def test_channel_without_url_warns_and_skips():
    logger = DummyLogger()
    requests_module = FakeRequestsModule()
    channel = GoogleChatChannel("", logger, requests_module=requests_module)

    channel.send(SUCCESS)

    assert requests_module.posts == []
    assert logger.warnings == ["Google Chat webhook URL not configured"]


def test_notifier_fans_out_and_absorbs_channel_failures():
    logger = DummyLogger()
    broken = RecordingChannel(error=RuntimeError("HTTP 500"))
    healthy = RecordingChannel()
    notifier = Notifier(NotificationSettings(), logger, channels=[broken, healthy])

    notifier.notify(FAILURE)

    assert healthy.sent == [FAILURE]
    assert logger.errors == ["Failed to send recording notification: HTTP 500"]


def test_notifier_respects_success_and_error_toggles():
    channel = RecordingChannel()
    errors_only = Notifier(NotificationSettings(success=False), DummyLogger(), channels=[channel])

    errors_only.notify(SUCCESS)
    errors_only.notify(FAILURE)

    assert channel.sent == [FAILURE]

    channel = RecordingChannel()
    disabled = Notifier(NotificationSettings(enabled=False), DummyLogger(), channels=[channel])
    disabled.notify(FAILURE)
    assert channel.sent == []


def test_notifier_builds_enabled_channels_from_settings():
    settings = NotificationSettings(
        slack=SlackSettings(enabled=True, webhook_url="https://hooks.slack.test/x"),
        google_chat=GoogleChatSettings(enabled=False, webhook_url="https://chat.test/y"),
    )

    notifier = Notifier(settings, DummyLogger())

    assert [channel.label for channel in notifier.channels] == ["Slack"]
