"""
Workflow Flattening

Turns a saved workflow (legacy step list or visual nodes + edges) into the
ordered ``WorkflowStep`` list the engine walks.
"""

import heapq
import logging
from typing import Any, Dict, List

from pydantic import ValidationError

from halo_engine.core.execution.exceptions import WorkflowValidationError
from halo_engine.schemas.workflow import StepInput, VisualWorkflow, WorkflowStep

logger = logging.getLogger(__name__)


def is_visual_document(document: Any) -> bool:
    return isinstance(document, dict) and "nodes" in document


def flatten_visual(document: Dict[str, Any]) -> List[WorkflowStep]:
    """
    Order visual nodes topologically and convert edges to step inputs.

    Ties are broken by the nodes' position in the ``nodes`` array, so a
    graph without edges keeps its array order. Nodes without incoming
    edges read the trigger payload.

    Raises:
        WorkflowValidationError: Unknown edge endpoint, duplicate node id or a cycle
    """
    try:
        visual = VisualWorkflow.model_validate(document)
    except ValidationError as e:
        raise WorkflowValidationError(f"Invalid visual workflow: {e}") from e

    index_by_id: Dict[str, int] = {}
    for index, node in enumerate(visual.nodes):
        if node.id in index_by_id or node.id == "trigger":
            raise WorkflowValidationError(f"Duplicate or reserved node id '{node.id}'")
        index_by_id[node.id] = index

    inputs: Dict[str, List[StepInput]] = {node.id: [] for node in visual.nodes}
    successors: Dict[str, List[str]] = {node.id: [] for node in visual.nodes}
    in_degree: Dict[str, int] = {node.id: 0 for node in visual.nodes}

    for edge in visual.edges:
        for endpoint in (edge.source, edge.target):
            if endpoint not in index_by_id:
                raise WorkflowValidationError(f"Edge references unknown node '{endpoint}'")
        inputs[edge.target].append(StepInput(source=edge.source, channel=edge.source_handle))
        successors[edge.source].append(edge.target)
        in_degree[edge.target] += 1

    ready = [index for node_id, index in index_by_id.items() if in_degree[node_id] == 0]
    heapq.heapify(ready)
    ordered: List[str] = []
    while ready:
        node_id = visual.nodes[heapq.heappop(ready)].id
        ordered.append(node_id)
        for successor in successors[node_id]:
            in_degree[successor] -= 1
            if in_degree[successor] == 0:
                heapq.heappush(ready, index_by_id[successor])

    if len(ordered) != len(visual.nodes):
        cyclic = sorted(node_id for node_id, degree in in_degree.items() if degree > 0)
        raise WorkflowValidationError(f"Workflow contains a cycle involving: {', '.join(cyclic)}")

    steps = []
    for order, node_id in enumerate(ordered):
        node = visual.nodes[index_by_id[node_id]]
        steps.append(WorkflowStep(
            id=node.id,
            type=node.type,
            name=node.label,
            config=node.config,
            position=node.position,
            order=order,
            inputs=inputs[node_id] or [StepInput(source="trigger")],
        ))
    return steps


def parse_steps(document: Any) -> List[WorkflowStep]:
    """
    Normalize stored ``steps`` into WorkflowStep objects.

    A list keeps its declared order. A mapping with ``nodes`` is flattened.

    Raises:
        WorkflowValidationError: The document is neither shape or a step is malformed
    """
    if is_visual_document(document):
        return flatten_visual(document)

    if not isinstance(document, list):
        raise WorkflowValidationError("Workflow steps must be a list or a visual document")

    steps = []
    seen = set()
    for index, raw in enumerate(document):
        try:
            step = WorkflowStep.model_validate(raw)
        except ValidationError as e:
            raise WorkflowValidationError(f"Invalid step at position {index}: {e}") from e
        if step.id in seen or step.id == "trigger":
            raise WorkflowValidationError(f"Duplicate or reserved step id '{step.id}'")
        seen.add(step.id)
        steps.append(step)
    return steps


def steps_to_documents(steps: List[WorkflowStep]) -> List[Dict[str, Any]]:
    """Serializable step list (used by export)."""
    return [step.model_dump(exclude_none=True) for step in steps]
