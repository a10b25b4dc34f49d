"""
Gmail Node - Send, search and reply to email through the Gmail API

Uses the OAuth access token from the tenant's Google credential.
"""

import base64
import logging
from email.message import EmailMessage
from typing import Any, Dict, Optional

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

GMAIL_API_URL = "https://gmail.googleapis.com/gmail/v1/users/me"

_COMPOSE = DisplayOptions(show={"operation": ["send", "reply"]})


def build_raw_message(
    to: str,
    subject: str,
    body: str,
    cc: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
) -> str:
    """RFC 2822 message, base64url-encoded as the Gmail API expects."""
    message = EmailMessage()
    message["To"] = to
    message["Subject"] = subject
    if cc:
        message["Cc"] = cc
    for name, value in (headers or {}).items():
        message[name] = value
    message.set_content(body)
    return base64.urlsafe_b64encode(message.as_bytes()).decode("ascii")


class GmailNode(HaloNode):
    description = NodeDescription(
        name="gmail",
        display_name="Gmail",
        description="Send and receive emails using Gmail",
        group=["output"],
        color="#EA4335",
        credentials=[CredentialRequirement(name="googleCredentials", required=True)],
        properties=[
            NodeProperty(
                name="operation",
                display_name="Operation",
                kind=ParameterKind.OPTIONS,
                default="send",
                options=[
                    ParameterOption(name="Send Email", value="send"),
                    ParameterOption(name="Search Emails", value="search"),
                    ParameterOption(name="Reply to Email", value="reply"),
                ],
            ),
            NodeProperty(
                name="to",
                display_name="To",
                default="",
                placeholder="recipient@example.com",
                display_options=DisplayOptions(show={"operation": ["send"]}),
            ),
            NodeProperty(name="subject", display_name="Subject", default="", display_options=_COMPOSE),
            NodeProperty(name="body", display_name="Body", default="", display_options=_COMPOSE),
            NodeProperty(name="cc", display_name="CC", default="", display_options=_COMPOSE),
            NodeProperty(
                name="messageId",
                display_name="Message ID",
                default="",
                description="Message to reply to",
                display_options=DisplayOptions(show={"operation": ["reply"]}),
            ),
            NodeProperty(
                name="searchQuery",
                display_name="Search Query",
                default="",
                placeholder="from:billing@example.com is:unread",
                display_options=DisplayOptions(show={"operation": ["search"]}),
            ),
            NodeProperty(
                name="maxResults",
                display_name="Max Results",
                kind=ParameterKind.NUMBER,
                default=10,
                display_options=DisplayOptions(show={"operation": ["search"]}),
            ),
        ],
    )

    async def execute(self, context) -> NodeOutput:
        try:
            credentials = context.get_credentials("googleCredentials") or {}
            token = credentials.get("accessToken") or credentials.get("access_token")
            if not token:
                raise NodeOperationError("Google credentials with an access token are required")
            auth = {"Authorization": f"Bearer {token}"}

            results = []
            for index, _item in enumerate(context.get_input_data()):
                operation = context.get_node_parameter("operation", index)
                if operation == "send":
                    result = await self._send(context, index, auth)
                elif operation == "search":
                    result = await self._search(context, index, auth)
                else:
                    result = await self._reply(context, index, auth)
                results.append(NodeExecutionData(json=result))
        except NodeOperationError as e:
            raise NodeOperationError(f"Failed to execute Gmail operation: {e}", status_code=e.status_code) from e

        return [results]

    async def _send(self, context, index: int, auth: Dict[str, str]) -> Dict[str, Any]:
        to = context.get_node_parameter("to", index)
        subject = context.get_node_parameter("subject", index)
        if not to:
            raise NodeOperationError("Recipient (to) is required")

        raw = build_raw_message(
            to=to,
            subject=subject,
            body=context.get_node_parameter("body", index),
            cc=context.get_node_parameter("cc", index),
        )
        response = await context.helpers.request({
            "method": "POST",
            "url": f"{GMAIL_API_URL}/messages/send",
            "headers": auth,
            "json": {"raw": raw},
        })
        logger.info(f"📧 Gmail message sent to {to}")
        return {
            "success": True,
            "operation": "send",
            "messageId": response.get("id") if isinstance(response, dict) else None,
            "threadId": response.get("threadId") if isinstance(response, dict) else None,
            "to": to,
            "subject": subject,
        }

    async def _search(self, context, index: int, auth: Dict[str, str]) -> Dict[str, Any]:
        query = context.get_node_parameter("searchQuery", index)
        response = await context.helpers.request({
            "method": "GET",
            "url": f"{GMAIL_API_URL}/messages",
            "headers": auth,
            "params": {"q": query, "maxResults": int(context.get_node_parameter("maxResults", index) or 10)},
        })
        response = response if isinstance(response, dict) else {}
        messages = response.get("messages") or []
        return {
            "success": True,
            "operation": "search",
            "query": query,
            "messages": messages,
            "resultSizeEstimate": response.get("resultSizeEstimate", len(messages)),
        }

    async def _reply(self, context, index: int, auth: Dict[str, str]) -> Dict[str, Any]:
        message_id = context.get_node_parameter("messageId", index)
        if not message_id:
            raise NodeOperationError("Message ID is required to reply")

        original = await context.helpers.request({
            "method": "GET",
            "url": f"{GMAIL_API_URL}/messages/{message_id}",
            "headers": auth,
            "params": {
                "format": "metadata",
                "metadataHeaders": ["From", "Subject", "Message-ID"],
            },
        })
        if not isinstance(original, dict):
            raise NodeOperationError(f"Unexpected response when reading message {message_id}")
        headers = {
            h.get("name", "").lower(): h.get("value", "")
            for h in (original.get("payload", {}).get("headers") or [])
        }
        reply_to = headers.get("from")
        if not reply_to:
            raise NodeOperationError(f"Message {message_id} has no sender to reply to")

        subject = context.get_node_parameter("subject", index) or headers.get("subject", "")
        if subject and not subject.lower().startswith("re:"):
            subject = f"Re: {subject}"

        thread_headers = {}
        if headers.get("message-id"):
            thread_headers = {"In-Reply-To": headers["message-id"], "References": headers["message-id"]}

        raw = build_raw_message(
            to=reply_to,
            subject=subject,
            body=context.get_node_parameter("body", index),
            cc=context.get_node_parameter("cc", index),
            headers=thread_headers,
        )
        response = await context.helpers.request({
            "method": "POST",
            "url": f"{GMAIL_API_URL}/messages/send",
            "headers": auth,
            "json": {"raw": raw, "threadId": original.get("threadId")},
        })
        return {
            "success": True,
            "operation": "reply",
            "messageId": response.get("id") if isinstance(response, dict) else None,
            "threadId": original.get("threadId"),
            "inReplyTo": message_id,
            "to": reply_to,
            "subject": subject,
        }
