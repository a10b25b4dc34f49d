"""
Amazon SES Node - Send email through the SES SMTP interface

Credentials are either SES SMTP credentials (``smtpUsername`` /
``smtpPassword``) or an IAM access key pair, from which the SMTP password
is derived for the selected region.
"""

import asyncio
import base64
import hashlib
import hmac
import logging
import smtplib
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Any, Dict, Tuple

from halo_engine.config import settings
from halo_engine.core.execution.exceptions import NodeOperationError
from halo_engine.core.nodes.base import HaloNode, NodeExecutionData, NodeOutput
from halo_engine.schemas.node import (
    CredentialRequirement,
    NodeDescription,
    NodeProperty,
    ParameterKind,
    ParameterOption,
)

logger = logging.getLogger(__name__)

SES_SMTP_PORT = 587


def _sign(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def derive_smtp_password(secret_access_key: str, region: str) -> str:
    """SES SMTP password for an IAM secret key (AWS signature version 4 scheme)."""
    signature = _sign(("AWS4" + secret_access_key).encode("utf-8"), "11111111")
    for part in (region, "ses", "aws4_request", "SendRawEmail"):
        signature = _sign(signature, part)
    return base64.b64encode(bytes([0x04]) + signature).decode("utf-8")


def smtp_login(credentials: Dict[str, Any], region: str) -> Tuple[str, str]:
    username = credentials.get("smtpUsername")
    password = credentials.get("smtpPassword")
    if username and password:
        return username, password

    access_key = credentials.get("accessKeyId")
    secret_key = credentials.get("secretAccessKey")
    if access_key and secret_key:
        return access_key, derive_smtp_password(secret_key, region)

    raise NodeOperationError("AWS credentials need SMTP credentials or an access key pair")


class SESEmailNode(HaloNode):
    description = NodeDescription(
        name="sesEmail",
        display_name="Amazon SES",
        description="Send transactional email with Amazon SES",
        group=["output"],
        color="#FF9900",
        credentials=[CredentialRequirement(name="awsCredentials", required=True)],
        properties=[
            NodeProperty(
                name="region",
                display_name="AWS Region",
                kind=ParameterKind.OPTIONS,
                default="us-east-1",
                options=[
                    ParameterOption(name="US East (N. Virginia)", value="us-east-1"),
                    ParameterOption(name="US West (Oregon)", value="us-west-2"),
                    ParameterOption(name="EU (Ireland)", value="eu-west-1"),
                    ParameterOption(name="EU (Frankfurt)", value="eu-central-1"),
                ],
            ),
            NodeProperty(name="fromEmail", display_name="From Email", required=True, default=""),
            NodeProperty(name="toEmail", display_name="To Email", required=True, default=""),
            NodeProperty(name="subject", display_name="Subject", default=""),
            NodeProperty(name="body", display_name="Body", default=""),
            NodeProperty(
                name="bodyType",
                display_name="Body Type",
                kind=ParameterKind.OPTIONS,
                default="text",
                options=[
                    ParameterOption(name="Text", value="text"),
                    ParameterOption(name="HTML", value="html"),
                ],
            ),
        ],
    )

    async def execute(self, context) -> NodeOutput:
        try:
            credentials = context.get_credentials("awsCredentials") or {}

            results = []
            for index, _item in enumerate(context.get_input_data()):
                region = context.get_node_parameter("region", index)
                from_email = context.get_node_parameter("fromEmail", index)
                to_email = context.get_node_parameter("toEmail", index)
                if not from_email or not to_email:
                    raise NodeOperationError("From and To email addresses are required")

                username, password = smtp_login(credentials, region)
                message = self._build_message(
                    from_email,
                    to_email,
                    context.get_node_parameter("subject", index),
                    context.get_node_parameter("body", index),
                    context.get_node_parameter("bodyType", index),
                )
                host = f"email-smtp.{region}.amazonaws.com"

                # Run blocking SMTP in thread pool
                await asyncio.get_running_loop().run_in_executor(
                    None, self._send_sync, host, username, password, message
                )
                logger.info(f"📧 SES email sent to {to_email} via {host}")

                results.append(NodeExecutionData(json={
                    "success": True,
                    "region": region,
                    "from": from_email,
                    "to": to_email,
                    "subject": message["Subject"],
                    "messageId": message["Message-ID"],
                }))
        except NodeOperationError as e:
            raise NodeOperationError(f"Failed to execute SES operation: {e}") from e

        return [results]

    @staticmethod
    def _build_message(from_email: str, to_email: str, subject: str, body: str, body_type: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = from_email
        message["To"] = to_email
        message["Subject"] = subject
        message["Message-ID"] = make_msgid(domain="halo")
        if body_type == "html":
            message.set_content(body, subtype="html")
        else:
            message.set_content(body)
        return message

    @staticmethod
    def _send_sync(host: str, username: str, password: str, message: EmailMessage) -> None:
        try:
            with smtplib.SMTP(host, SES_SMTP_PORT, timeout=settings.INTEGRATION_TIMEOUT_SECONDS) as server:
                server.starttls()
                server.login(username, password)
                server.send_message(message)
        except smtplib.SMTPAuthenticationError as e:
            raise NodeOperationError("SES rejected the SMTP credentials") from e
        except (smtplib.SMTPException, OSError) as e:
            raise NodeOperationError(f"SMTP error: {e}") from e
