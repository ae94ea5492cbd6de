"""Workflow nodes for graph state machines."""

from gitlab_mr.workflow.nodes.apply_edit import ApplyEdit
from gitlab_mr.workflow.nodes.checkout_merge_request import (
    CheckoutMergeRequest,
)
from gitlab_mr.workflow.nodes.choose_edit_action import ChooseEditAction
from gitlab_mr.workflow.nodes.connect_forge import ConnectForge
from gitlab_mr.workflow.nodes.create_merge_request import CreateMergeRequest
from gitlab_mr.workflow.nodes.execute_plan import ExecutePlan
from gitlab_mr.workflow.nodes.inspect_repository import InspectRepository
from gitlab_mr.workflow.nodes.prepare_branch import PrepareBranch
from gitlab_mr.workflow.nodes.select_merge_request import SelectMergeRequest
from gitlab_mr.workflow.nodes.view_merge_request import ViewMergeRequest

__all__ = [
    "ConnectForge",
    "InspectRepository",
    "PrepareBranch",
    "ExecutePlan",
    "CreateMergeRequest",
    "ViewMergeRequest",
    "CheckoutMergeRequest",
    "SelectMergeRequest",
    "ChooseEditAction",
    "ApplyEdit",
]
