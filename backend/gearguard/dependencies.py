"""FastAPI dependencies shared by routers."""
from .services.equipment_locks import get_equipment_locks
from .use_cases.stage_transitions import WorkflowHooks


def get_workflow_hooks() -> WorkflowHooks:
    return WorkflowHooks(locks=get_equipment_locks())
