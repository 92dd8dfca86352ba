"""Application services."""

from jobdesk.services.account_service import AccountService
from jobdesk.services.workflow import (
    ApplicationWorkflow,
    get_application_workflow,
)

__all__ = ["AccountService", "ApplicationWorkflow", "get_application_workflow"]
