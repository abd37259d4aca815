"""
Workflow Designer - Editing session, API boundary and CLI around the
workflow graph core.
"""

from workflow_designer.client import ApiClientError, DesignerApiClient
from workflow_designer.session import DesignerSession, ReferenceData, SaveOutcome

__version__ = "0.1.0"

__all__ = [
    "ApiClientError",
    "DesignerApiClient",
    "DesignerSession",
    "ReferenceData",
    "SaveOutcome",
]
