"""Value objects for contract ingestion"""

from contractdesk.domain.value_objects.contract_type import ContractType
from contractdesk.domain.value_objects.contract_status import ContractStatus
from contractdesk.domain.value_objects.fix_kind import FixKind

__all__ = ["ContractType", "ContractStatus", "FixKind"]
