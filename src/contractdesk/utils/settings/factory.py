"""
Settings Factory

Factory to create settings instances without using singleton pattern.
"""

from contractdesk.utils.settings.core import (
    SlackSettings,
    SalesforceSettings,
    PipelineSettings,
    AppSettings,
)


class SettingsFactory:
    """Factory for creating settings instances"""

    @staticmethod
    def create_slack_settings() -> SlackSettings:
        return SlackSettings()

    @staticmethod
    def create_salesforce_settings() -> SalesforceSettings:
        return SalesforceSettings()

    @staticmethod
    def create_pipeline_settings() -> PipelineSettings:
        return PipelineSettings()

    @staticmethod
    def create_app_settings() -> AppSettings:
        return AppSettings()


settings_factory = SettingsFactory()
