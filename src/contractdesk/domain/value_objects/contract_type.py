"""Contract type value object"""

from enum import StrEnum


class ContractType(StrEnum):
    """Commercial type assigned by the classification engine"""

    RECURRING = "Recurring"
    LOI = "LOI"
    AMENDMENT = "Amendment"

    def carries_monetary_commitment(self) -> bool:
        """LOI/CAB agreements carry no monetary values"""
        return self != ContractType.LOI
