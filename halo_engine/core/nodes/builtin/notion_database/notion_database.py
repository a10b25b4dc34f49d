"""
Notion Database Node - Add pages to and query a Notion database
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

NOTION_API_URL = "https://api.notion.com/v1"
NOTION_VERSION = "2022-06-28"


def text_property(value: Any) -> Dict[str, Any]:
    """Plain value → Notion rich_text property."""
    return {"rich_text": [{"text": {"content": str(value)}}]}


class NotionDatabaseNode(HaloNode):
    """
    Notion Database Node.

    ``properties`` accepts either Notion property objects or plain values;
    plain values are written as rich text.
    """

    description = NodeDescription(
        name="notionDatabase",
        display_name="Notion Database",
        description="Create pages in and query a Notion database",
        group=["output"],
        color="#000000",
        credentials=[CredentialRequirement(name="notionCredentials", required=True)],
        properties=[
            NodeProperty(
                name="operation",
                display_name="Operation",
                kind=ParameterKind.OPTIONS,
                default="createPage",
                options=[
                    ParameterOption(name="Create Page", value="createPage"),
                    ParameterOption(name="Query Database", value="queryDatabase"),
                ],
            ),
            NodeProperty(name="databaseId", display_name="Database ID", required=True, default=""),
            NodeProperty(
                name="pageTitle",
                display_name="Page Title",
                default="",
                display_options=DisplayOptions(show={"operation": ["createPage"]}),
            ),
            NodeProperty(
                name="titleProperty",
                display_name="Title Property",
                default="Name",
                display_options=DisplayOptions(show={"operation": ["createPage"]}),
            ),
            NodeProperty(
                name="properties",
                display_name="Properties",
                kind=ParameterKind.JSON,
                default="{}",
                display_options=DisplayOptions(show={"operation": ["createPage"]}),
            ),
            NodeProperty(
                name="filter",
                display_name="Filter",
                kind=ParameterKind.JSON,
                default="{}",
                display_options=DisplayOptions(show={"operation": ["queryDatabase"]}),
            ),
        ],
    )

    async def execute(self, context) -> NodeOutput:
        try:
            credentials = context.get_credentials("notionCredentials") or {}
            token = credentials.get("apiKey") or credentials.get("accessToken")
            if not token:
                raise NodeOperationError("Notion credentials with an integration token are required")
            headers = {"Authorization": f"Bearer {token}", "Notion-Version": NOTION_VERSION}

            results = []
            for index, _item in enumerate(context.get_input_data()):
                operation = context.get_node_parameter("operation", index)
                database_id = context.get_node_parameter("databaseId", index)
                if not database_id:
                    raise NodeOperationError("Database ID is required")

                if operation == "createPage":
                    result = await self._create_page(context, index, database_id, headers)
                else:
                    result = await self._query(context, index, database_id, headers)
                results.append(NodeExecutionData(json={"operation": operation, **result}))
        except NodeOperationError as e:
            raise NodeOperationError(f"Failed to execute Notion operation: {e}", status_code=e.status_code) from e

        return [results]

    async def _create_page(self, context, index: int, database_id: str, headers) -> Dict[str, Any]:
        extra = context.get_node_parameter("properties", index)
        if not isinstance(extra, dict):
            raise NodeOperationError("Properties must be a JSON object")

        properties = {
            name: value if isinstance(value, dict) else text_property(value)
            for name, value in extra.items()
        }
        title = context.get_node_parameter("pageTitle", index)
        if title:
            title_property = context.get_node_parameter("titleProperty", index) or "Name"
            properties[title_property] = {"title": [{"text": {"content": title}}]}

        response = await context.helpers.request({
            "method": "POST",
            "url": f"{NOTION_API_URL}/pages",
            "headers": headers,
            "json": {"parent": {"database_id": database_id}, "properties": properties},
        })
        response = response if isinstance(response, dict) else {}
        logger.info(f"📓 Notion page created in database {database_id}")
        return {"success": True, "pageId": response.get("id"), "url": response.get("url"), "databaseId": database_id}

    async def _query(self, context, index: int, database_id: str, headers) -> Dict[str, Any]:
        query_filter = context.get_node_parameter("filter", index)
        body = {"filter": query_filter} if query_filter else {}
        response = await context.helpers.request({
            "method": "POST",
            "url": f"{NOTION_API_URL}/databases/{database_id}/query",
            "headers": headers,
            "json": body,
        })
        response = response if isinstance(response, dict) else {}
        pages = response.get("results") or []
        return {"databaseId": database_id, "total": len(pages), "results": pages, "hasMore": response.get("has_more", False)}
