"""
HubSpot Node - Contacts, companies and deals in HubSpot CRM

Uses the CRM v3 objects API with the private-app token from the tenant's
HubSpot credential.
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

HUBSPOT_API_URL = "https://api.hubapi.com/crm/v3/objects"

_CONTACT_WRITE = DisplayOptions(show={"operation": ["createContact", "updateContact"]})
_CONTACT_ID = DisplayOptions(show={"operation": ["updateContact", "getContact"]})

# Node parameter → HubSpot property, per operation
_PROPERTY_MAP = {
    "createContact": {"email": "email", "firstname": "firstname", "lastname": "lastname", "phone": "phone",
                      "companyName": "company"},
    "updateContact": {"email": "email", "firstname": "firstname", "lastname": "lastname", "phone": "phone",
                      "companyName": "company"},
    "createCompany": {"companyName": "name", "domain": "domain", "phone": "phone"},
    "createDeal": {"dealname": "dealname", "amount": "amount", "dealstage": "dealstage"},
}


class HubSpotNode(HaloNode):
    description = NodeDescription(
        name="hubspot",
        display_name="HubSpot",
        description="Manage contacts, companies and deals in HubSpot CRM",
        group=["output"],
        color="#FF7A59",
        credentials=[CredentialRequirement(name="hubspotCredentials", required=True)],
        properties=[
            NodeProperty(
                name="operation",
                display_name="Operation",
                kind=ParameterKind.OPTIONS,
                default="createContact",
                options=[
                    ParameterOption(name="Create Contact", value="createContact"),
                    ParameterOption(name="Update Contact", value="updateContact"),
                    ParameterOption(name="Get Contact", value="getContact"),
                    ParameterOption(name="Search Contacts", value="searchContacts"),
                    ParameterOption(name="Create Company", value="createCompany"),
                    ParameterOption(name="Create Deal", value="createDeal"),
                ],
            ),
            NodeProperty(name="contactId", display_name="Contact ID", default="", display_options=_CONTACT_ID),
            NodeProperty(name="email", display_name="Email", default="", display_options=_CONTACT_WRITE),
            NodeProperty(name="firstname", display_name="First Name", default="", display_options=_CONTACT_WRITE),
            NodeProperty(name="lastname", display_name="Last Name", default="", display_options=_CONTACT_WRITE),
            NodeProperty(
                name="phone",
                display_name="Phone",
                default="",
                display_options=DisplayOptions(
                    show={"operation": ["createContact", "updateContact", "createCompany"]}
                ),
            ),
            NodeProperty(
                name="companyName",
                display_name="Company Name",
                default="",
                display_options=DisplayOptions(
                    show={"operation": ["createContact", "updateContact", "createCompany"]}
                ),
            ),
            NodeProperty(
                name="domain",
                display_name="Domain",
                default="",
                display_options=DisplayOptions(show={"operation": ["createCompany"]}),
            ),
            NodeProperty(
                name="dealname",
                display_name="Deal Name",
                default="",
                display_options=DisplayOptions(show={"operation": ["createDeal"]}),
            ),
            NodeProperty(
                name="amount",
                display_name="Amount",
                default="",
                display_options=DisplayOptions(show={"operation": ["createDeal"]}),
            ),
            NodeProperty(
                name="dealstage",
                display_name="Deal Stage",
                default="appointmentscheduled",
                display_options=DisplayOptions(show={"operation": ["createDeal"]}),
            ),
            NodeProperty(
                name="searchQuery",
                display_name="Search Query",
                default="",
                display_options=DisplayOptions(show={"operation": ["searchContacts"]}),
            ),
        ],
    )

    async def execute(self, context) -> NodeOutput:
        try:
            credentials = context.get_credentials("hubspotCredentials") or {}
            token = credentials.get("accessToken") or credentials.get("apiKey")
            if not token:
                raise NodeOperationError("HubSpot credentials with an access token are required")
            auth = {"Authorization": f"Bearer {token}"}

            results = []
            for index, _item in enumerate(context.get_input_data()):
                operation = context.get_node_parameter("operation", index)
                response = await self._run(context, index, operation, auth)
                results.append(NodeExecutionData(json={"operation": operation, **response}))
        except NodeOperationError as e:
            raise NodeOperationError(f"Failed to execute HubSpot operation: {e}", status_code=e.status_code) from e

        return [results]

    def _properties(self, context, index: int, operation: str) -> Dict[str, Any]:
        properties = {}
        for parameter, hubspot_name in _PROPERTY_MAP[operation].items():
            value = context.get_node_parameter(parameter, index)
            if value not in (None, ""):
                properties[hubspot_name] = value
        return properties

    async def _run(self, context, index: int, operation: str, auth: Dict[str, str]) -> Dict[str, Any]:
        if operation == "searchContacts":
            query = context.get_node_parameter("searchQuery", index)
            response = await context.helpers.request({
                "method": "POST",
                "url": f"{HUBSPOT_API_URL}/contacts/search",
                "headers": auth,
                "json": {"query": query, "limit": 100},
            })
            results = response.get("results", []) if isinstance(response, dict) else []
            return {"total": len(results), "results": results}

        if operation in ("updateContact", "getContact"):
            contact_id = context.get_node_parameter("contactId", index)
            if not contact_id:
                raise NodeOperationError("Contact ID is required")
            url = f"{HUBSPOT_API_URL}/contacts/{contact_id}"
            if operation == "getContact":
                return await self._object(context.helpers.request({"method": "GET", "url": url, "headers": auth}))
            return await self._object(context.helpers.request({
                "method": "PATCH",
                "url": url,
                "headers": auth,
                "json": {"properties": self._properties(context, index, operation)},
            }))

        properties = self._properties(context, index, operation)
        if operation == "createContact" and "email" not in properties:
            raise NodeOperationError("Email is required to create a contact")
        if operation == "createDeal" and "dealname" not in properties:
            raise NodeOperationError("Deal name is required to create a deal")

        object_type = {"createContact": "contacts", "createCompany": "companies", "createDeal": "deals"}[operation]
        logger.info(f"🧲 HubSpot {operation}")
        return await self._object(context.helpers.request({
            "method": "POST",
            "url": f"{HUBSPOT_API_URL}/{object_type}",
            "headers": auth,
            "json": {"properties": properties},
        }))

    @staticmethod
    async def _object(pending) -> Dict[str, Any]:
        response = await pending
        if not isinstance(response, dict):
            raise NodeOperationError("Unexpected response from HubSpot")
        return {"id": response.get("id"), "properties": response.get("properties", {})}
