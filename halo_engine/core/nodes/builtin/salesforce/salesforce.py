"""
Salesforce Node - Create, update and query Salesforce records

Uses the REST API of the org in the credential's ``instanceUrl``.
"""

import logging
from typing import Any, Dict

from halo_engine.core.execution.exceptions import NodeOperationError
from halo_engine.core.nodes.base import HaloNode, NodeExecutionData, NodeOutput
from halo_engine.schemas.node import (
    CredentialRequirement,
    DisplayOptions,
    NodeDescription,
    NodeProperty,
    ParameterKind,
    ParameterOption,
)

logger = logging.getLogger(__name__)

SALESFORCE_API_VERSION = "v59.0"

_WRITE = DisplayOptions(show={"operation": ["create", "update"]})

# Node parameter → Salesforce field
_FIELD_MAP = {
    "firstName": "FirstName",
    "lastName": "LastName",
    "email": "Email",
    "company": "Company",
    "phone": "Phone",
}


class SalesforceNode(HaloNode):
    description = NodeDescription(
        name="salesforce",
        display_name="Salesforce",
        description="Manage leads, contacts, accounts and opportunities in Salesforce",
        group=["output"],
        color="#00A1E0",
        credentials=[CredentialRequirement(name="salesforceCredentials", required=True)],
        properties=[
            NodeProperty(
                name="operation",
                display_name="Operation",
                kind=ParameterKind.OPTIONS,
                default="create",
                options=[
                    ParameterOption(name="Create Record", value="create"),
                    ParameterOption(name="Update Record", value="update"),
                    ParameterOption(name="Query (SOQL)", value="query"),
                ],
            ),
            NodeProperty(
                name="objectType",
                display_name="Object Type",
                kind=ParameterKind.OPTIONS,
                default="Lead",
                options=[
                    ParameterOption(name="Lead", value="Lead"),
                    ParameterOption(name="Contact", value="Contact"),
                    ParameterOption(name="Account", value="Account"),
                    ParameterOption(name="Opportunity", value="Opportunity"),
                ],
                display_options=_WRITE,
            ),
            NodeProperty(
                name="recordId",
                display_name="Record ID",
                default="",
                display_options=DisplayOptions(show={"operation": ["update"]}),
            ),
            NodeProperty(name="firstName", display_name="First Name", default="", display_options=_WRITE),
            NodeProperty(name="lastName", display_name="Last Name", default="", display_options=_WRITE),
            NodeProperty(name="email", display_name="Email", default="", display_options=_WRITE),
            NodeProperty(name="company", display_name="Company", default="", display_options=_WRITE),
            NodeProperty(name="phone", display_name="Phone", default="", display_options=_WRITE),
            NodeProperty(
                name="additionalFields",
                display_name="Additional Fields",
                kind=ParameterKind.JSON,
                default="{}",
                description="Extra Salesforce fields, e.g. {\"LeadSource\": \"Web\"}",
                display_options=_WRITE,
            ),
            NodeProperty(
                name="query",
                display_name="SOQL Query",
                default="",
                placeholder="SELECT Id, Name FROM Lead LIMIT 10",
                display_options=DisplayOptions(show={"operation": ["query"]}),
            ),
        ],
    )

    async def execute(self, context) -> NodeOutput:
        try:
            credentials = context.get_credentials("salesforceCredentials") or {}
            token = credentials.get("accessToken") or credentials.get("access_token")
            instance_url = (credentials.get("instanceUrl") or credentials.get("instance_url") or "").rstrip("/")
            if not token or not instance_url:
                raise NodeOperationError("Salesforce credentials need an access token and instance URL")

            base_url = f"{instance_url}/services/data/{SALESFORCE_API_VERSION}"
            auth = {"Authorization": f"Bearer {token}"}

            results = []
            for index, _item in enumerate(context.get_input_data()):
                operation = context.get_node_parameter("operation", index)
                if operation == "query":
                    result = await self._query(context, index, base_url, auth)
                else:
                    result = await self._write(context, index, operation, base_url, auth)
                results.append(NodeExecutionData(json={"operation": operation, **result}))
        except NodeOperationError as e:
            raise NodeOperationError(
                f"Failed to execute Salesforce operation: {e}", status_code=e.status_code
            ) from e

        return [results]

    def _record(self, context, index: int) -> Dict[str, Any]:
        record = {}
        for parameter, field in _FIELD_MAP.items():
            value = context.get_node_parameter(parameter, index)
            if value not in (None, ""):
                record[field] = value
        extra = context.get_node_parameter("additionalFields", index)
        if not isinstance(extra, dict):
            raise NodeOperationError("Additional fields must be a JSON object")
        record.update(extra)
        return record

    async def _write(self, context, index: int, operation: str, base_url: str, auth) -> Dict[str, Any]:
        object_type = context.get_node_parameter("objectType", index)
        record = self._record(context, index)
        if not record:
            raise NodeOperationError("At least one field is required")

        if operation == "create":
            response = await context.helpers.request({
                "method": "POST",
                "url": f"{base_url}/sobjects/{object_type}/",
                "headers": auth,
                "json": record,
            })
            record_id = response.get("id") if isinstance(response, dict) else None
            logger.info(f"☁️ Salesforce {object_type} created: {record_id}")
            return {"success": True, "objectType": object_type, "id": record_id, "fields": record}

        record_id = context.get_node_parameter("recordId", index)
        if not record_id:
            raise NodeOperationError("Record ID is required to update a record")
        await context.helpers.request({
            "method": "PATCH",
            "url": f"{base_url}/sobjects/{object_type}/{record_id}",
            "headers": auth,
            "json": record,
        })
        return {"success": True, "objectType": object_type, "id": record_id, "fields": record}

    async def _query(self, context, index: int, base_url: str, auth) -> Dict[str, Any]:
        soql = context.get_node_parameter("query", index)
        if not soql:
            raise NodeOperationError("SOQL query is required")
        response = await context.helpers.request({
            "method": "GET",
            "url": f"{base_url}/query",
            "headers": auth,
            "params": {"q": soql},
        })
        response = response if isinstance(response, dict) else {}
        records = response.get("records") or []
        return {
            "totalSize": response.get("totalSize", len(records)),
            "done": response.get("done", True),
            "records": records,
        }
