"""
Built-in Nodes

Explicit registration list. A node is registered by adding its class here.
"""

from halo_engine.core.nodes.builtin.condition.condition import ConditionNode
from halo_engine.core.nodes.builtin.delay.delay import DelayNode
from halo_engine.core.nodes.builtin.gmail.gmail import GmailNode
from halo_engine.core.nodes.builtin.http_request.http_request import HttpRequestNode
from halo_engine.core.nodes.builtin.hubspot.hubspot import HubSpotNode
from halo_engine.core.nodes.builtin.notion_database.notion_database import NotionDatabaseNode
from halo_engine.core.nodes.builtin.salesforce.salesforce import SalesforceNode
from halo_engine.core.nodes.builtin.schedule_trigger.schedule_trigger import ScheduleTriggerNode
from halo_engine.core.nodes.builtin.ses_email.ses_email import SESEmailNode
from halo_engine.core.nodes.builtin.slack.slack import SlackNode
from halo_engine.core.nodes.builtin.webhook.webhook import WebhookNode

BUILTIN_NODES = [
    WebhookNode,
    ScheduleTriggerNode,
    ConditionNode,
    DelayNode,
    HttpRequestNode,
    GmailNode,
    SlackNode,
    HubSpotNode,
    SalesforceNode,
    NotionDatabaseNode,
    SESEmailNode,
]

__all__ = ["BUILTIN_NODES"]
