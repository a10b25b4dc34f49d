"""
Slack Node - Post messages, direct messages and files to Slack

Talks to the Slack Web API with the bot token from the tenant's Slack
credential. Slack reports failures as ``{"ok": false, "error": ...}`` with a
200 status, so every response is checked.
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

SLACK_API_URL = "https://slack.com/api"


class SlackNode(HaloNode):
    description = NodeDescription(
        name="slack",
        display_name="Slack",
        description="Send messages to Slack channels and users",
        group=["output"],
        color="#4A154B",
        credentials=[CredentialRequirement(name="slackCredentials", required=True)],
        properties=[
            NodeProperty(
                name="operation",
                display_name="Operation",
                kind=ParameterKind.OPTIONS,
                default="sendMessage",
                options=[
                    ParameterOption(name="Send Message", value="sendMessage"),
                    ParameterOption(name="Send Direct Message", value="sendDM"),
                    ParameterOption(name="Upload File", value="uploadFile"),
                ],
            ),
            NodeProperty(
                name="channel",
                display_name="Channel",
                default="",
                placeholder="#general",
                display_options=DisplayOptions(show={"operation": ["sendMessage", "uploadFile"]}),
            ),
            NodeProperty(
                name="user",
                display_name="User ID",
                default="",
                display_options=DisplayOptions(show={"operation": ["sendDM"]}),
            ),
            NodeProperty(name="message", display_name="Message", default=""),
            NodeProperty(
                name="username",
                display_name="Bot Name",
                default="HALO Bot",
                display_options=DisplayOptions(hide={"operation": ["uploadFile"]}),
            ),
            NodeProperty(
                name="icon_emoji",
                display_name="Icon Emoji",
                default=":robot_face:",
                display_options=DisplayOptions(hide={"operation": ["uploadFile"]}),
            ),
            NodeProperty(
                name="fileName",
                display_name="File Name",
                default="file.txt",
                display_options=DisplayOptions(show={"operation": ["uploadFile"]}),
            ),
            NodeProperty(
                name="fileContent",
                display_name="File Content",
                default="",
                display_options=DisplayOptions(show={"operation": ["uploadFile"]}),
            ),
        ],
    )

    async def execute(self, context) -> NodeOutput:
        try:
            credentials = context.get_credentials("slackCredentials") or {}
            token = credentials.get("botToken") or credentials.get("accessToken") or credentials.get("token")
            if not token:
                raise NodeOperationError("Slack credentials with a bot token are required")

            results = []
            for index, _item in enumerate(context.get_input_data()):
                operation = context.get_node_parameter("operation", index)
                if operation == "sendMessage":
                    channel = context.get_node_parameter("channel", index)
                    if not channel:
                        raise NodeOperationError("Channel is required")
                    result = await self._post_message(context, index, token, channel)
                elif operation == "sendDM":
                    result = await self._send_dm(context, index, token)
                else:
                    result = await self._upload_file(context, index, token)
                results.append(NodeExecutionData(json={"operation": operation, **result}))
        except NodeOperationError as e:
            raise NodeOperationError(f"Failed to execute Slack operation: {e}", status_code=e.status_code) from e

        return [results]

    async def _call(self, context, token: str, method: str, **options: Any) -> Dict[str, Any]:
        response = await context.helpers.request({
            "method": "POST",
            "url": f"{SLACK_API_URL}/{method}",
            "headers": {"Authorization": f"Bearer {token}"},
            **options,
        })
        if not isinstance(response, dict) or not response.get("ok"):
            error = response.get("error") if isinstance(response, dict) else "unexpected response"
            raise NodeOperationError(f"Slack API {method} error: {error}")
        return response

    async def _post_message(self, context, index: int, token: str, channel: str) -> Dict[str, Any]:
        message = context.get_node_parameter("message", index)
        if not message:
            raise NodeOperationError("Message is required")

        response = await self._call(context, token, "chat.postMessage", json={
            "channel": channel,
            "text": message,
            "username": context.get_node_parameter("username", index),
            "icon_emoji": context.get_node_parameter("icon_emoji", index),
        })
        logger.info(f"💬 Slack message posted to {channel}")
        return {
            "success": True,
            "channel": response.get("channel", channel),
            "ts": response.get("ts"),
            "message": message,
        }

    async def _send_dm(self, context, index: int, token: str) -> Dict[str, Any]:
        user = context.get_node_parameter("user", index)
        if not user:
            raise NodeOperationError("User ID is required")

        opened = await self._call(context, token, "conversations.open", json={"users": user})
        channel = (opened.get("channel") or {}).get("id")
        if not channel:
            raise NodeOperationError(f"Could not open a direct message with {user}")

        result = await self._post_message(context, index, token, channel)
        return {**result, "user": user}

    async def _upload_file(self, context, index: int, token: str) -> Dict[str, Any]:
        channel = context.get_node_parameter("channel", index)
        file_name = context.get_node_parameter("fileName", index)
        content = context.get_node_parameter("fileContent", index)
        if not content:
            raise NodeOperationError("File content is required")

        data = {"filename": file_name, "content": content}
        if channel:
            data["channels"] = channel
        message = context.get_node_parameter("message", index)
        if message:
            data["initial_comment"] = message

        response = await self._call(context, token, "files.upload", data=data)
        file_info = response.get("file") or {}
        return {
            "success": True,
            "channel": channel,
            "fileId": file_info.get("id"),
            "fileName": file_info.get("name", file_name),
        }
