"""Repository answering "is this key attached to a task, and who may see it"."""

from typing import Optional

from sqlalchemy.orm import Session

from medflow.models import ORMTaskAssignment, ORMTaskFileAttachment, ORMTaskSubtask


class TaskAttachmentRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_task_id(self, s3_key: str) -> Optional[str]:
        """Return the id of a task that has ``s3_key`` attached, if any."""
        row = (
            self.db.query(ORMTaskFileAttachment.task_id)
            .join(ORMTaskAssignment, ORMTaskAssignment.id == ORMTaskFileAttachment.task_id)
            .filter(ORMTaskFileAttachment.s3_key == s3_key)
            .first()
        )
        return row[0] if row else None

    def user_can_access_task(self, task_id: str, user_id: str) -> bool:
        """True if the user assigned, was assigned, or holds a subtask of the task."""
        assignment = (
            self.db.query(ORMTaskAssignment.id)
            .filter(
                ORMTaskAssignment.id == task_id,
                (ORMTaskAssignment.assigned_to == user_id)
                | (ORMTaskAssignment.assigned_by == user_id),
            )
            .first()
        )
        if assignment is not None:
            return True

        subtask = (
            self.db.query(ORMTaskSubtask.id)
            .filter(
                ORMTaskSubtask.task_id == task_id,
                ORMTaskSubtask.assigned_to == user_id,
            )
            .first()
        )
        return subtask is not None
