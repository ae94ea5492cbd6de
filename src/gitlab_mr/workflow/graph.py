"""Graph workflow definitions, one per command."""

from pydantic_graph import Graph

from gitlab_mr.core.config import State
from gitlab_mr.core.log import logger


def create_open_workflow():
    """Create the open-MR workflow graph.

    ConnectForge → InspectRepository → PrepareBranch → ExecutePlan →
        CreateMergeRequest

    ExecutePlan ends the run early when a git step fails.

    Returns:
        Graph workflow with State as state_type
    """
    logger.debug("Building open workflow graph")

    # Import nodes (lazy to avoid circular imports)
    from gitlab_mr.workflow.nodes.connect_forge import ConnectForge
    from gitlab_mr.workflow.nodes.create_merge_request import (
        CreateMergeRequest,
    )
    from gitlab_mr.workflow.nodes.execute_plan import ExecutePlan
    from gitlab_mr.workflow.nodes.inspect_repository import (
        InspectRepository,
    )
    from gitlab_mr.workflow.nodes.prepare_branch import PrepareBranch

    return Graph(
        nodes=(
            ConnectForge,
            InspectRepository,
            PrepareBranch,
            ExecutePlan,
            CreateMergeRequest,
        ),
        state_type=State,
    )


def create_view_workflow():
    from gitlab_mr.workflow.nodes.view_merge_request import ViewMergeRequest

    return Graph(nodes=(ViewMergeRequest,), state_type=State)


def create_checkout_workflow():
    from gitlab_mr.workflow.nodes.checkout_merge_request import (
        CheckoutMergeRequest,
    )

    return Graph(nodes=(CheckoutMergeRequest,), state_type=State)


def create_edit_workflow():
    """Create the edit-MR workflow graph.

    SelectMergeRequest → ChooseEditAction → ApplyEdit

    Returns:
        Graph workflow with State as state_type
    """
    logger.debug("Building edit workflow graph")

    from gitlab_mr.workflow.nodes.apply_edit import ApplyEdit
    from gitlab_mr.workflow.nodes.choose_edit_action import ChooseEditAction
    from gitlab_mr.workflow.nodes.select_merge_request import (
        SelectMergeRequest,
    )

    return Graph(
        nodes=(SelectMergeRequest, ChooseEditAction, ApplyEdit),
        state_type=State,
    )
