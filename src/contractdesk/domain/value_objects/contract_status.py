"""Contract status value object"""

from enum import StrEnum


class ContractStatus(StrEnum):
    """CRM contract status picklist"""

    DRAFT = "Draft"
    IN_APPROVAL = "In Approval"
    ACTIVATED = "Activated"
    TERMINATED = "Terminated"
    EXPIRED = "Expired"

    def can_activate(self) -> bool:
        return self in (ContractStatus.DRAFT, ContractStatus.IN_APPROVAL)
