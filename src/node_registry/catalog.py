"""
Built-in node catalog.

Used when the remote `/node-types` catalog is unreachable so the editor
stays usable offline. Every kind here is implemented.
"""

from __future__ import annotations

from typing import Any, Dict, List

from .models import NodeTypeDefinition


BUILTIN_NODE_TYPES: List[Dict[str, Any]] = [
    {
        "type": "start",
        "label": "Start",
        "category": "Control",
        "description": "Entry point of the workflow",
        "icon": "play-circle",
        "defaultConfig": {
            "taskName": "Start",
            "activationType": "manual",
            "webhookToken": "",
            "webhookUrl": "",
            "scheduledTable": "",
            "scheduledQuery": "",
            "scheduledInterval": 300,
        },
    },
    {
        "type": "sendMessage",
        "label": "Send Message",
        "category": "Communication",
        "description": "Send a custom message",
        "icon": "send",
        "defaultConfig": {"taskName": "Send Message", "message": "", "to": ""},
    },
    {
        "type": "sendTemplate",
        "label": "Send Template",
        "category": "Communication",
        "description": "Send a predefined template message",
        "icon": "message",
        "defaultConfig": {
            "taskName": "Send Template",
            "templateId": "",
            "templateName": "",
            "variables": {},
        },
    },
    {
        "type": "waitReply",
        "label": "Wait for User Reply",
        "category": "Interaction",
        "description": "Pause the run until a user replies",
        "icon": "clock-circle",
        "defaultConfig": {
            "taskName": "Wait for User Reply",
            "replyType": "initiator",
            "specifiedUsers": "",
            "message": "Please enter your reply",
            "validation": {
                "enabled": True,
                "validatorType": "default",
                "prompt": "Please enter valid content",
                "retryMessage": "Input incorrect, please retry",
                "maxRetries": 3,
            },
        },
    },
    {
        "type": "dbQuery",
        "label": "Database Query/Update",
        "category": "Data",
        "description": "Run a query or update against a data set",
        "icon": "database",
        "defaultConfig": {"taskName": "Database Query/Update", "sql": ""},
    },
    {
        "type": "callExternalApi",
        "label": "Trigger External API",
        "category": "Integration",
        "description": "Call an external API",
        "icon": "api",
        "defaultConfig": {"taskName": "Trigger External API", "url": ""},
    },
    {
        "type": "sendForm",
        "label": "Send Form",
        "category": "Form",
        "description": "Send a form for the user to fill in",
        "icon": "form",
        "defaultConfig": {
            "taskName": "Send Form",
            "formName": "",
            "formId": "",
            "formDescription": "",
            "to": "",
        },
    },
    {
        "type": "formResult",
        "label": "Form Approved/Rejected",
        "category": "Form",
        "description": "Branch on the approval result of a form",
        "icon": "check-circle",
        "defaultConfig": {"taskName": "Form Approved/Rejected", "result": ""},
    },
    {
        "type": "end",
        "label": "End",
        "category": "Control",
        "description": "Terminal point of the workflow",
        "icon": "stop",
        "defaultConfig": {"taskName": "End"},
    },
]


def builtin_definitions() -> List[NodeTypeDefinition]:
    """Build the fallback definitions (all implemented)."""
    return [
        NodeTypeDefinition.model_validate({**entry, "isImplemented": True})
        for entry in BUILTIN_NODE_TYPES
    ]


# Icon per kind, re-attached to remote definitions that carry none
BUILTIN_ICONS: Dict[str, str] = {
    entry["type"]: entry["icon"] for entry in BUILTIN_NODE_TYPES
}


__all__ = [
    "BUILTIN_ICONS",
    "BUILTIN_NODE_TYPES",
    "builtin_definitions",
]
