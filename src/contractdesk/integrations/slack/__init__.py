from contractdesk.integrations.slack.file_client import SlackFileClient, SlackApiError

__all__ = ["SlackFileClient", "SlackApiError"]
