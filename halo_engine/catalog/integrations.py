"""
Legacy Integration Catalog

Service + action descriptors retained for workflows saved with the older
step format. Entries whose ``node_name`` is set run in-process through that
node; the rest need the remote integration function.
"""

from typing import Any, Dict, List

# ==================== Logic ====================

LOGIC_INTEGRATIONS: List[Dict[str, Any]] = [
    {
        "id": "condition",
        "name": "Condition",
        "description": "Add conditional logic to your workflow",
        "category": "logic",
        "icon": "GitBranch",
        "color": "#10B981",
        "node_name": "condition",
        "config_aliases": {
            "condition_type": "operation",
            "field_path": "field",
            "comparison_value": "value",
        },
        "value_aliases": {
            "operation": {
                "equals": "equal",
                "greater_than": "greaterThan",
                "less_than": "lessThan",
                "exists": "isNotEmpty",
                "is_empty": "isEmpty",
            }
        },
        "fields": [
            {
                "name": "condition_type",
                "label": "Condition Type",
                "type": "select",
                "required": True,
                "options": [
                    {"label": "Equals", "value": "equals"},
                    {"label": "Contains", "value": "contains"},
                    {"label": "Greater Than", "value": "greater_than"},
                    {"label": "Less Than", "value": "less_than"},
                    {"label": "Exists", "value": "exists"},
                    {"label": "Is Empty", "value": "is_empty"},
                ],
            },
            {"name": "field_path", "label": "Field Path", "type": "text", "required": True,
             "placeholder": "e.g., email, status"},
            {"name": "comparison_value", "label": "Comparison Value", "type": "text",
             "helpText": 'Leave empty for "exists" and "is_empty" conditions'},
        ],
        "endpoints": [
            {"id": "evaluate", "name": "Evaluate Condition", "method": "POST", "path": "/condition/evaluate"},
        ],
    },
    {
        "id": "delay",
        "name": "Delay",
        "description": "Add a time delay to your workflow",
        "category": "logic",
        "icon": "Clock",
        "color": "#6B7280",
        "node_name": "delay",
        "config_aliases": {"duration": "waitTime"},
        "fields": [
            {
                "name": "delay_type",
                "label": "Delay Type",
                "type": "select",
                "required": True,
                "options": [
                    {"label": "Fixed Delay", "value": "fixed"},
                    {"label": "Dynamic Delay", "value": "dynamic"},
                ],
            },
            {"name": "duration", "label": "Duration (seconds)", "type": "number", "required": True,
             "defaultValue": 60, "helpText": "How long to wait before continuing"},
            {"name": "duration_field", "label": "Duration Field Path", "type": "text",
             "dependsOn": {"delay_type": ["dynamic"]}},
        ],
        "endpoints": [
            {"id": "delay", "name": "Execute Delay", "method": "POST", "path": "/delay/execute"},
        ],
    },
    {
        "id": "loop",
        "name": "Loop",
        "description": "Repeat actions for each item in a list",
        "category": "logic",
        "icon": "RepeatIcon",
        "color": "#8B5CF6",
        "fields": [
            {
                "name": "loop_type",
                "label": "Loop Type",
                "type": "select",
                "required": True,
                "options": [
                    {"label": "For Each Item", "value": "foreach"},
                    {"label": "While Condition", "value": "while"},
                    {"label": "Fixed Count", "value": "count"},
                ],
            },
            {"name": "array_path", "label": "Array Field Path", "type": "text"},
            {"name": "max_iterations", "label": "Max Iterations", "type": "number", "required": True,
             "defaultValue": 100},
        ],
        "endpoints": [
            {"id": "iterate", "name": "Iterate", "method": "POST", "path": "/loop/iterate"},
        ],
    },
    {
        "id": "error_handler",
        "name": "Error Handler",
        "description": "Retry or recover from a failing step",
        "category": "logic",
        "icon": "AlertTriangle",
        "color": "#EF4444",
        "fields": [
            {
                "name": "error_action",
                "label": "On Error",
                "type": "select",
                "required": True,
                "options": [
                    {"label": "Retry", "value": "retry"},
                    {"label": "Continue", "value": "continue"},
                    {"label": "Stop Workflow", "value": "stop"},
                ],
            },
            {"name": "max_retries", "label": "Max Retries", "type": "number", "defaultValue": 3,
             "dependsOn": {"error_action": ["retry"]}},
            {"name": "retry_delay", "label": "Retry Delay (seconds)", "type": "number", "defaultValue": 5,
             "dependsOn": {"error_action": ["retry"]}},
        ],
        "endpoints": [
            {"id": "handle", "name": "Handle Error", "method": "POST", "path": "/error/handle"},
        ],
    },
    {
        "id": "router",
        "name": "Router",
        "description": "Route data to different paths",
        "category": "logic",
        "icon": "Split",
        "fields": [
            {
                "name": "route_type",
                "label": "Route Type",
                "type": "select",
                "required": True,
                "options": [
                    {"label": "By Condition", "value": "condition"},
                    {"label": "By Value", "value": "value"},
                ],
            },
            {"name": "routes", "label": "Routes", "type": "json", "defaultValue": "[]"},
            {"name": "default_route", "label": "Default Route", "type": "text"},
        ],
        "endpoints": [
            {"id": "route", "name": "Route Data", "method": "POST", "path": "/router/route"},
        ],
    },
    {
        "id": "iterator",
        "name": "Iterator",
        "description": "Split an array into individual items",
        "category": "logic",
        "fields": [
            {"name": "array_path", "label": "Array Path", "type": "text", "required": True},
        ],
        "endpoints": [
            {"id": "iterate", "name": "Iterate Items", "method": "POST", "path": "/iterator/iterate"},
        ],
    },
    {
        "id": "aggregator",
        "name": "Aggregator",
        "description": "Combine multiple items into one",
        "category": "logic",
        "fields": [
            {
                "name": "aggregate_type",
                "label": "Aggregate Type",
                "type": "select",
                "required": True,
                "options": [
                    {"label": "Array", "value": "array"},
                    {"label": "Sum", "value": "sum"},
                    {"label": "Count", "value": "count"},
                ],
            },
            {"name": "field_path", "label": "Field Path", "type": "text"},
        ],
        "endpoints": [
            {"id": "aggregate", "name": "Aggregate", "method": "POST", "path": "/aggregator/aggregate"},
        ],
    },
]

# ==================== Communication ====================

COMMUNICATION_INTEGRATIONS: List[Dict[str, Any]] = [
    {
        "id": "gmail",
        "name": "Gmail",
        "description": "Send and receive emails using Gmail",
        "category": "communication",
        "icon": "Mail",
        "color": "bg-red-500",
        "requiresAuth": True,
        "authType": "oauth",
        "node_name": "gmail",
        "configSchema": {
            "to": {"type": "email", "label": "To", "placeholder": "recipient@example.com", "required": True},
            "subject": {"type": "text", "label": "Subject", "required": True},
            "body": {"type": "textarea", "label": "Body", "required": True},
            "cc": {"type": "text", "label": "CC"},
            "bcc": {"type": "text", "label": "BCC"},
        },
        "endpoints": [
            {
                "id": "send",
                "name": "Send Email",
                "description": "Send an email via Gmail",
                "method": "POST",
                "path": "/gmail/send",
                "parameters": {
                    "to": {"type": "email", "label": "To", "required": True},
                    "subject": {"type": "text", "label": "Subject", "required": True},
                    "body": {"type": "textarea", "label": "Body", "required": True},
                },
            }
        ],
    },
    {
        "id": "aws-ses",
        "name": "Amazon SES",
        "description": "Send transactional email through Amazon SES",
        "category": "communication",
        "icon": "Mail",
        "requiresAuth": True,
        "authType": "api_key",
        "node_name": "sesEmail",
        "config_aliases": {"from": "fromEmail", "to": "toEmail"},
        "configSchema": {
            "from": {"type": "email", "label": "From", "required": True},
            "to": {"type": "email", "label": "To", "required": True},
            "subject": {"type": "text", "label": "Subject", "required": True},
            "body": {"type": "textarea", "label": "Body", "required": True},
        },
        "endpoints": [
            {"id": "send", "name": "Send Email", "method": "POST", "path": "/ses/send"},
        ],
    },
    {
        "id": "sendgrid",
        "name": "SendGrid",
        "description": "Send emails using SendGrid",
        "category": "communication",
        "icon": "Send",
        "requiresAuth": True,
        "authType": "api_key",
        "configSchema": {
            "from": {"type": "email", "label": "From", "required": True},
            "to": {"type": "email", "label": "To", "required": True},
            "subject": {"type": "text", "label": "Subject", "required": True},
            "content": {"type": "textarea", "label": "Content", "required": True},
        },
        "endpoints": [
            {"id": "send", "name": "Send Email", "method": "POST", "path": "/sendgrid/send"},
        ],
    },
]

# ==================== CRM ====================

CRM_INTEGRATIONS: List[Dict[str, Any]] = [
    {
        "id": "salesforce",
        "name": "Salesforce",
        "description": "Manage leads, contacts and opportunities in Salesforce",
        "category": "crm",
        "icon": "Cloud",
        "requiresAuth": True,
        "authType": "oauth",
        "node_name": "salesforce",
        "configSchema": {
            "objectType": {
                "type": "select",
                "label": "Object Type",
                "required": True,
                "options": [
                    {"label": "Lead", "value": "Lead"},
                    {"label": "Contact", "value": "Contact"},
                    {"label": "Account", "value": "Account"},
                    {"label": "Opportunity", "value": "Opportunity"},
                ],
            },
            "firstName": {"type": "text", "label": "First Name"},
            "lastName": {"type": "text", "label": "Last Name", "required": True},
            "email": {"type": "email", "label": "Email"},
            "company": {"type": "text", "label": "Company"},
            "phone": {"type": "text", "label": "Phone"},
        },
        "endpoints": [
            {"id": "create", "name": "Create Record", "method": "POST", "path": "/salesforce/create"},
            {
                "id": "update",
                "name": "Update Record",
                "method": "PUT",
                "path": "/salesforce/update",
                "parameters": {"recordId": {"type": "text", "label": "Record ID", "required": True}},
            },
        ],
    },
    {
        "id": "hubspot",
        "name": "HubSpot",
        "description": "Manage contacts and deals in HubSpot CRM",
        "category": "crm",
        "icon": "Users",
        "requiresAuth": True,
        "authType": "api_key",
        "node_name": "hubspot",
        "configSchema": {
            "email": {"type": "email", "label": "Email", "required": True},
            "firstname": {"type": "text", "label": "First Name"},
            "lastname": {"type": "text", "label": "Last Name"},
            "phone": {"type": "text", "label": "Phone"},
        },
        "endpoints": [
            {"id": "create-contact", "name": "Create Contact", "method": "POST", "path": "/hubspot/contacts"},
        ],
    },
    {
        "id": "pipedrive",
        "name": "Pipedrive",
        "description": "Manage people and deals in Pipedrive",
        "category": "crm",
        "icon": "Target",
        "requiresAuth": True,
        "authType": "api_key",
        "configSchema": {
            "name": {"type": "text", "label": "Name", "required": True},
            "email": {"type": "email", "label": "Email"},
            "phone": {"type": "text", "label": "Phone"},
        },
        "endpoints": [
            {"id": "create-person", "name": "Create Person", "method": "POST", "path": "/pipedrive/persons"},
        ],
    },
]

# ==================== Triggers ====================

TRIGGER_INTEGRATIONS: List[Dict[str, Any]] = [
    {
        "id": "schedule_trigger",
        "name": "Schedule Trigger",
        "description": "Run the workflow on a schedule",
        "category": "triggers",
        "icon": "Calendar",
        "node_name": "scheduleTrigger",
        "config_aliases": {"schedule_type": "triggerType", "cron_expression": "cronExpression"},
        "fields": [
            {
                "name": "schedule_type",
                "label": "Schedule Type",
                "type": "select",
                "required": True,
                "options": [
                    {"label": "Interval", "value": "interval"},
                    {"label": "Cron Expression", "value": "cron"},
                ],
            },
            {"name": "cron_expression", "label": "Cron Expression", "type": "text",
             "placeholder": "0 9 * * 1-5", "dependsOn": {"schedule_type": ["cron"]}},
            {"name": "timezone", "label": "Timezone", "type": "text", "defaultValue": "UTC"},
        ],
        "endpoints": [
            {"id": "execute", "name": "Execute Scheduled Task", "method": "POST", "path": "/schedule/execute"},
        ],
    },
    {
        "id": "email_trigger",
        "name": "Email Trigger",
        "description": "Start the workflow when an email arrives",
        "category": "triggers",
        "icon": "Inbox",
        "requiresAuth": True,
        "authType": "oauth",
        "fields": [
            {"name": "email_address", "label": "Email Address", "type": "email", "required": True},
            {"name": "filter_sender", "label": "Filter by Sender", "type": "text"},
            {"name": "filter_subject", "label": "Filter by Subject", "type": "text"},
            {"name": "mark_as_read", "label": "Mark as Read", "type": "boolean", "defaultValue": True},
        ],
        "endpoints": [
            {"id": "monitor", "name": "Monitor Email", "method": "POST", "path": "/email/monitor"},
        ],
    },
    {
        "id": "form_trigger",
        "name": "Form Submission",
        "description": "Start the workflow when a form is submitted",
        "category": "triggers",
        "icon": "FileText",
        "fields": [
            {"name": "form_name", "label": "Form Name", "type": "text", "required": True},
            {"name": "required_fields", "label": "Required Fields", "type": "text"},
            {"name": "validate_email", "label": "Validate Email", "type": "boolean", "defaultValue": True},
        ],
        "endpoints": [
            {"id": "submit", "name": "Form Submission", "method": "POST", "path": "/forms/submit"},
        ],
    },
    {
        "id": "file_upload_trigger",
        "name": "File Upload",
        "description": "Start the workflow when a file is uploaded",
        "category": "triggers",
        "icon": "Upload",
        "fields": [
            {"name": "allowed_types", "label": "Allowed File Types", "type": "text", "defaultValue": "*"},
            {"name": "max_file_size", "label": "Max File Size (MB)", "type": "number", "defaultValue": 10},
            {"name": "auto_process", "label": "Auto Process", "type": "boolean", "defaultValue": True},
        ],
        "endpoints": [
            {"id": "upload", "name": "File Upload", "method": "POST", "path": "/files/upload"},
        ],
    },
]

# ==================== AI ====================

_AI_MODEL_FIELDS = {
    "model": {"type": "text", "label": "Model", "required": True},
    "temperature": {"type": "number", "label": "Temperature", "defaultValue": 0.7},
    "maxTokens": {"type": "number", "label": "Max Tokens", "defaultValue": 1000},
}

AI_INTEGRATIONS: List[Dict[str, Any]] = [
    {
        "id": "openai-agent",
        "name": "OpenAI Agent",
        "description": "Conversational agent backed by OpenAI chat models",
        "category": "ai",
        "icon": "Bot",
        "requiresAuth": True,
        "authType": "api_key",
        "configSchema": {
            "instructions": {"type": "textarea", "label": "Instructions", "required": True},
            **_AI_MODEL_FIELDS,
        },
        "endpoints": [{"id": "chat", "name": "Chat Completion", "method": "POST", "path": "/openai/chat"}],
    },
    {
        "id": "claude-agent",
        "name": "Claude Agent",
        "description": "Conversational agent backed by Anthropic Claude",
        "category": "ai",
        "icon": "Bot",
        "requiresAuth": True,
        "authType": "api_key",
        "configSchema": {
            "instructions": {"type": "textarea", "label": "Instructions", "required": True},
            **_AI_MODEL_FIELDS,
        },
        "endpoints": [{"id": "messages", "name": "Create Message", "method": "POST", "path": "/claude/messages"}],
    },
    {
        "id": "openai-llm",
        "name": "OpenAI LLM",
        "description": "Single prompt completion with OpenAI",
        "category": "ai",
        "icon": "Brain",
        "requiresAuth": True,
        "authType": "api_key",
        "configSchema": {
            "prompt": {"type": "textarea", "label": "Prompt", "required": True},
            **_AI_MODEL_FIELDS,
        },
        "endpoints": [{"id": "completions", "name": "Text Completion", "method": "POST", "path": "/openai/completions"}],
    },
    {
        "id": "claude-llm",
        "name": "Claude LLM",
        "description": "Single prompt completion with Anthropic Claude",
        "category": "ai",
        "icon": "Brain",
        "requiresAuth": True,
        "authType": "api_key",
        "configSchema": {
            "prompt": {"type": "textarea", "label": "Prompt", "required": True},
            **_AI_MODEL_FIELDS,
        },
        "endpoints": [{"id": "messages", "name": "Create Message", "method": "POST", "path": "/claude/messages"}],
    },
    {
        "id": "ai-tool",
        "name": "AI Tool",
        "description": "Let a model call configured tools",
        "category": "ai",
        "icon": "Wrench",
        "requiresAuth": True,
        "authType": "api_key",
        "configSchema": {
            "instructions": {"type": "textarea", "label": "Instructions", "required": True},
            "availableTools": {"type": "json", "label": "Available Tools", "defaultValue": "[]"},
            "model": {"type": "text", "label": "Model", "required": True},
        },
        "endpoints": [{"id": "execute", "name": "Execute with Tools", "method": "POST", "path": "/ai/tools"}],
    },
]

# ==================== Data ====================

DATA_INTEGRATIONS: List[Dict[str, Any]] = [
    {
        "id": "http-request",
        "name": "HTTP Request",
        "description": "Call any HTTP API",
        "category": "data",
        "icon": "Globe",
        "node_name": "httpRequest",
        "configSchema": {
            "method": {
                "type": "select",
                "label": "Method",
                "required": True,
                "options": ["GET", "POST", "PUT", "PATCH", "DELETE"],
            },
            "url": {"type": "url", "label": "URL", "required": True},
            "headers": {"type": "json", "label": "Headers", "defaultValue": "{}"},
            "body": {"type": "json", "label": "Body", "defaultValue": "{}"},
        },
        "endpoints": [{"id": "request", "name": "Send Request", "method": "POST", "path": "/http/request"}],
    },
    {
        "id": "data-transform",
        "name": "Data Transform",
        "description": "Map and reshape data between steps",
        "category": "data",
        "icon": "Shuffle",
        "configSchema": {
            "mapping": {"type": "json", "label": "Field Mapping", "required": True, "defaultValue": "{}"},
        },
        "endpoints": [{"id": "transform", "name": "Transform", "method": "POST", "path": "/data/transform"}],
    },
    {
        "id": "json-processor",
        "name": "JSON Processor",
        "description": "Parse, query and build JSON documents",
        "category": "data",
        "icon": "Braces",
        "configSchema": {
            "operation": {
                "type": "select",
                "label": "Operation",
                "required": True,
                "options": [
                    {"label": "Parse", "value": "parse"},
                    {"label": "Stringify", "value": "stringify"},
                    {"label": "Extract Path", "value": "extract"},
                ],
            },
            "path": {"type": "text", "label": "JSON Path", "dependsOn": {"operation": ["extract"]}},
        },
        "endpoints": [{"id": "process", "name": "Process JSON", "method": "POST", "path": "/json/process"}],
    },
    {
        "id": "calculator",
        "name": "Calculator",
        "description": "Evaluate arithmetic on step data",
        "category": "data",
        "icon": "Calculator",
        "configSchema": {
            "expression": {"type": "text", "label": "Expression", "required": True, "placeholder": "a + b"},
        },
        "endpoints": [{"id": "calculate", "name": "Calculate", "method": "POST", "path": "/calculator/calculate"}],
    },
]

LEGACY_INTEGRATIONS: List[Dict[str, Any]] = [
    *LOGIC_INTEGRATIONS,
    *COMMUNICATION_INTEGRATIONS,
    *CRM_INTEGRATIONS,
    *TRIGGER_INTEGRATIONS,
    *AI_INTEGRATIONS,
    *DATA_INTEGRATIONS,
]
