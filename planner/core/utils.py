from sqlalchemy import case
from planner.models.task import Task
from planner.models.enums import TaskPriority

PRIORITY_RANK = {
    TaskPriority.LOW: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.HIGH: 3,
}


def priority_rank():
    return case(
        *[(Task.priority == priority, rank) for priority, rank in PRIORITY_RANK.items()],
        else_=0,
    )


def task_ordering(descending: bool = False):
    """
    ORDER BY clauses for task listings.

    Ascending: earliest due date first, undated tasks last.
    Descending: undated tasks first, then latest due date.
    Ties go to the higher priority either way.
    """
    undated = case((Task.due_date.is_(None), 1), else_=0)

    if descending:
        return [undated.desc(), Task.due_date.desc(), priority_rank().desc(), Task.id.asc()]

    return [undated.asc(), Task.due_date.asc(), priority_rank().desc(), Task.id.asc()]
