"""CRM and confirmation store adapters"""

from contractdesk.dbs.adapters.memory_confirmation_adapter import MemoryConfirmationAdapter
from contractdesk.dbs.adapters.salesforce_crm_adapter import SalesforceCrmAdapter

__all__ = [
    "MemoryConfirmationAdapter",
    "SalesforceCrmAdapter",
]
