"""CRM and confirmation storage

This package contains:
- interfaces: Abstract base classes for the CRM and the confirmation cache
- adapters: Salesforce REST and in-memory implementations
"""

# Adapters should be imported explicitly when needed:
#   from contractdesk.dbs.adapters import SalesforceCrmAdapter

from contractdesk.dbs.interfaces.crm_store import AbstractCrmStore, Condition, SearchExpression
from contractdesk.dbs.interfaces.confirmation_store import (
    AbstractConfirmationStore,
    PendingActivation,
    PendingConfirmation,
)

__all__ = [
    "AbstractCrmStore",
    "Condition",
    "SearchExpression",
    "AbstractConfirmationStore",
    "PendingActivation",
    "PendingConfirmation",
]
