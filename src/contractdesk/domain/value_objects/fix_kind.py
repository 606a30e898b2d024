"""Remediation kinds for suggested fixes"""

from enum import StrEnum


class FixKind(StrEnum):
    """How a human is expected to supply a missing value"""

    ACCOUNT_LOOKUP = "account_lookup"
    OWNER_SELECT = "owner_select"
    DATE_INPUT = "date_input"
    NUMBER_INPUT = "number_input"
    CURRENCY_INPUT = "currency_input"
    PICKLIST_SELECT = "picklist_select"
    TEXT_INPUT = "text_input"
