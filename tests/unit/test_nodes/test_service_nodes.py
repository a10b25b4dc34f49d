"""
Unit tests for the third-party service nodes

Slack, Salesforce, Notion and Gmail are exercised against
httpx.MockTransport; Amazon SES against a patched SMTP client.
"""

import base64
import json
from unittest.mock import MagicMock, patch

import httpx
import pytest

from halo_engine.core.execution.context import NodeExecuteContext, RequestHelpers
from halo_engine.core.execution.exceptions import NodeOperationError
from halo_engine.core.nodes.base import NodeExecutionData
from halo_engine.core.nodes.builtin.gmail.gmail import GmailNode, build_raw_message
from halo_engine.core.nodes.builtin.notion_database.notion_database import NotionDatabaseNode
from halo_engine.core.nodes.builtin.salesforce.salesforce import SalesforceNode
from halo_engine.core.nodes.builtin.ses_email.ses_email import SESEmailNode, derive_smtp_password, smtp_login
from halo_engine.core.nodes.builtin.slack.slack import SlackNode


class Recorder:
    """MockTransport that records requests and replays canned responses."""

    def __init__(self, *responses):
        self.requests = []
        self._responses = list(responses)
        self.transport = httpx.MockTransport(self.handle)

    def handle(self, request):
        self.requests.append(request)
        return self._responses.pop(0)

    def body(self, index=0):
        return json.loads(self.requests[index].content)


def make_context(node_class, parameters, credentials, recorder=None, items=({},)):
    requirement = node_class.description.credentials[0].name
    return NodeExecuteContext(
        description=node_class.description,
        parameters=parameters,
        input_items=[NodeExecutionData(json=dict(item)) for item in items],
        credentials={requirement: credentials} if credentials else {},
        helpers=RequestHelpers(transport=recorder.transport) if recorder else None,
    )


class TestSlackNode:

    @pytest.mark.asyncio
    async def test_send_message(self):
        recorder = Recorder(httpx.Response(200, json={"ok": True, "channel": "C1", "ts": "1700.1"}))
        context = make_context(SlackNode, {"channel": "#general", "message": "Deploy done"},
                               {"botToken": "xoxb-1"}, recorder)

        [[item]] = await SlackNode().execute(context)

        assert item.json == {"operation": "sendMessage", "success": True, "channel": "C1",
                             "ts": "1700.1", "message": "Deploy done"}
        assert recorder.requests[0].url.path == "/api/chat.postMessage"
        assert recorder.body() == {"channel": "#general", "text": "Deploy done",
                                   "username": "HALO Bot", "icon_emoji": ":robot_face:"}

    @pytest.mark.asyncio
    async def test_direct_message_opens_conversation(self):
        recorder = Recorder(
            httpx.Response(200, json={"ok": True, "channel": {"id": "D42"}}),
            httpx.Response(200, json={"ok": True, "channel": "D42", "ts": "1"}),
        )
        context = make_context(SlackNode, {"operation": "sendDM", "user": "U7", "message": "Hi"},
                               {"botToken": "xoxb-1"}, recorder)

        [[item]] = await SlackNode().execute(context)

        assert item.json["user"] == "U7"
        assert recorder.body(1)["channel"] == "D42"

    @pytest.mark.asyncio
    async def test_api_error_with_200_status(self):
        recorder = Recorder(httpx.Response(200, json={"ok": False, "error": "channel_not_found"}))
        context = make_context(SlackNode, {"channel": "#nope", "message": "x"}, {"botToken": "t"}, recorder)

        with pytest.raises(NodeOperationError, match="channel_not_found"):
            await SlackNode().execute(context)

    @pytest.mark.asyncio
    async def test_missing_token(self):
        context = make_context(SlackNode, {"channel": "#general", "message": "x"}, None)

        with pytest.raises(NodeOperationError, match="Failed to execute Slack operation"):
            await SlackNode().execute(context)


class TestSalesforceNode:
    CREDENTIALS = {"accessToken": "00D!token", "instanceUrl": "https://acme.my.salesforce.com/"}

    @pytest.mark.asyncio
    async def test_create_lead(self):
        recorder = Recorder(httpx.Response(201, json={"id": "00Q1", "success": True}))
        context = make_context(SalesforceNode, {
            "lastName": "Lovelace",
            "company": "Analytical Engines",
            "additionalFields": '{"LeadSource": "Web"}',
        }, self.CREDENTIALS, recorder)

        [[item]] = await SalesforceNode().execute(context)

        assert item.json["id"] == "00Q1"
        assert recorder.requests[0].url.path == "/services/data/v59.0/sobjects/Lead/"
        assert recorder.body() == {"LastName": "Lovelace", "Company": "Analytical Engines", "LeadSource": "Web"}

    @pytest.mark.asyncio
    async def test_query(self):
        recorder = Recorder(httpx.Response(200, json={"totalSize": 1, "done": True, "records": [{"Id": "1"}]}))
        context = make_context(SalesforceNode, {"operation": "query", "query": "SELECT Id FROM Lead"},
                               self.CREDENTIALS, recorder)

        [[item]] = await SalesforceNode().execute(context)

        assert item.json["records"] == [{"Id": "1"}]
        assert recorder.requests[0].url.params["q"] == "SELECT Id FROM Lead"

    @pytest.mark.asyncio
    async def test_update_requires_record_id(self):
        context = make_context(SalesforceNode, {"operation": "update", "email": "a@example.com"},
                               self.CREDENTIALS, Recorder())

        with pytest.raises(NodeOperationError, match="Record ID is required"):
            await SalesforceNode().execute(context)


class TestNotionDatabaseNode:

    @pytest.mark.asyncio
    async def test_create_page(self):
        recorder = Recorder(httpx.Response(200, json={"id": "page-1", "url": "https://notion.so/page-1"}))
        context = make_context(NotionDatabaseNode, {
            "databaseId": "db-1",
            "pageTitle": "New lead",
            "properties": {"Email": "a@example.com", "Score": {"number": 5}},
        }, {"apiKey": "secret_x"}, recorder)

        [[item]] = await NotionDatabaseNode().execute(context)

        assert item.json["pageId"] == "page-1"
        body = recorder.body()
        assert body["parent"] == {"database_id": "db-1"}
        assert body["properties"]["Name"] == {"title": [{"text": {"content": "New lead"}}]}
        assert body["properties"]["Email"] == {"rich_text": [{"text": {"content": "a@example.com"}}]}
        assert body["properties"]["Score"] == {"number": 5}
        assert recorder.requests[0].headers["Notion-Version"] == "2022-06-28"

    @pytest.mark.asyncio
    async def test_query_database(self):
        recorder = Recorder(httpx.Response(200, json={"results": [{"id": "p"}], "has_more": False}))
        context = make_context(NotionDatabaseNode, {"operation": "queryDatabase", "databaseId": "db-1"},
                               {"apiKey": "secret_x"}, recorder)

        [[item]] = await NotionDatabaseNode().execute(context)

        assert item.json["total"] == 1
        assert recorder.requests[0].url.path == "/v1/databases/db-1/query"


class TestGmailNode:

    def test_build_raw_message(self):
        raw = build_raw_message(to="a@example.com", subject="Hello", body="Body text", cc="b@example.com")

        decoded = base64.urlsafe_b64decode(raw).decode()
        assert "To: a@example.com" in decoded
        assert "Cc: b@example.com" in decoded
        assert "Subject: Hello" in decoded

    @pytest.mark.asyncio
    async def test_search(self):
        recorder = Recorder(httpx.Response(200, json={"messages": [{"id": "m1"}], "resultSizeEstimate": 1}))
        context = make_context(GmailNode, {"operation": "search", "searchQuery": "is:unread"},
                               {"accessToken": "ya29"}, recorder)

        [[item]] = await GmailNode().execute(context)

        assert item.json["messages"] == [{"id": "m1"}]
        assert recorder.requests[0].url.params["q"] == "is:unread"

    @pytest.mark.asyncio
    async def test_reply_threads_the_message(self):
        original = {
            "threadId": "t-9",
            "payload": {"headers": [
                {"name": "From", "value": "customer@example.com"},
                {"name": "Subject", "value": "Order question"},
                {"name": "Message-ID", "value": "<abc@mail>"},
            ]},
        }
        recorder = Recorder(
            httpx.Response(200, json=original),
            httpx.Response(200, json={"id": "m2", "threadId": "t-9"}),
        )
        context = make_context(GmailNode, {"operation": "reply", "messageId": "m1", "body": "Thanks!"},
                               {"accessToken": "ya29"}, recorder)

        [[item]] = await GmailNode().execute(context)

        sent = recorder.body(1)
        assert sent["threadId"] == "t-9"
        decoded = base64.urlsafe_b64decode(sent["raw"]).decode()
        assert "To: customer@example.com" in decoded
        assert "Subject: Re: Order question" in decoded
        assert "In-Reply-To: <abc@mail>" in decoded
        assert item.json["threadId"] == "t-9"


class TestSESEmailNode:

    def test_derived_password_shape(self):
        password = derive_smtp_password("wJalrXUtnFEMI/K7MDENG/bPxRfiCYEXAMPLEKEY", "us-east-1")
        raw = base64.b64decode(password)

        assert raw[0] == 0x04
        assert len(raw) == 33
        assert password != derive_smtp_password("wJalrXUtnFEMI/K7MDENG/bPxRfiCYEXAMPLEKEY", "eu-west-1")

    def test_smtp_login(self):
        assert smtp_login({"smtpUsername": "u", "smtpPassword": "p"}, "us-east-1") == ("u", "p")
        assert smtp_login({"accessKeyId": "AKIA", "secretAccessKey": "s"}, "us-east-1")[0] == "AKIA"
        with pytest.raises(NodeOperationError):
            smtp_login({}, "us-east-1")

    @pytest.mark.asyncio
    async def test_sends_through_regional_endpoint(self):
        context = make_context(SESEmailNode, {
            "region": "eu-west-1",
            "fromEmail": "noreply@example.com",
            "toEmail": "a@example.com",
            "subject": "Receipt",
            "body": "<p>Thanks</p>",
            "bodyType": "html",
        }, {"smtpUsername": "user", "smtpPassword": "pass"})

        smtp = MagicMock()
        with patch("halo_engine.core.nodes.builtin.ses_email.ses_email.smtplib.SMTP") as smtp_class:
            smtp_class.return_value.__enter__.return_value = smtp
            [[item]] = await SESEmailNode().execute(context)

        assert smtp_class.call_args.args[:2] == ("email-smtp.eu-west-1.amazonaws.com", 587)
        smtp.starttls.assert_called_once()
        smtp.login.assert_called_once_with("user", "pass")
        message = smtp.send_message.call_args.args[0]
        assert message["To"] == "a@example.com"
        assert message.get_content_subtype() == "html"
        assert item.json["success"] is True
        assert item.json["messageId"] == message["Message-ID"]

    @pytest.mark.asyncio
    async def test_missing_addresses(self):
        context = make_context(SESEmailNode, {"fromEmail": "noreply@example.com"},
                               {"smtpUsername": "u", "smtpPassword": "p"})

        with pytest.raises(NodeOperationError, match="Failed to execute SES operation"):
            await SESEmailNode().execute(context)
