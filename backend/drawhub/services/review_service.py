"""
Review Service - file status transitions

    pendente -> aprovado | rejeitado | revisao
    aprovado | rejeitado | revisao -> aprovado | rejeitado | revisao

``pendente`` is only ever the initial state.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from drawhub.core.exceptions import FileRecordNotFoundError, ValidationError
from drawhub.core.logging_config import logger
from drawhub.core.types import utcnow
from drawhub.models.activity_log import ActivityLog, ActivityAction, EntityType
from drawhub.models.file_record import FileRecord, FileStatus
from drawhub.models.user import User
from drawhub.services.access_policy import Action, require
from drawhub.services.activity_recorder import ActivityRecorder

REVIEW_TARGETS = frozenset({FileStatus.APROVADO, FileStatus.REJEITADO, FileStatus.REVISAO})


def is_review_target(status: FileStatus) -> bool:
    """Re-review is unrestricted, so only the target matters"""
    return FileStatus(status) in REVIEW_TARGETS


@dataclass
class ReviewOutcome:
    file: FileRecord
    previous_status: FileStatus
    activity: ActivityLog


class ReviewService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.recorder = ActivityRecorder(db)

    async def set_status(
        self,
        reviewer: User,
        file_id: str,
        new_status: FileStatus,
        notes: Optional[str] = None,
    ) -> ReviewOutcome:
        """
        Move a file to a reviewed status.

        Role is checked before the file is read; the status change and its
        activity entry are committed together.
        """
        require(reviewer, Action.REVIEW_FILES)

        record = await self.db.get(FileRecord, file_id)
        if record is None:
            raise FileRecordNotFoundError(file_id)

        try:
            target = FileStatus(new_status)
        except ValueError:
            raise ValidationError("Status inválido", field="status")
        if not is_review_target(target):
            raise ValidationError("Status inválido", field="status")

        previous = record.status
        record.status = target
        record.reviewed_by_id = reviewer.id
        record.reviewed_at = utcnow()
        if notes is not None:
            record.review_notes = notes

        entry = self.recorder.record(
            reviewer.id,
            ActivityAction.REVIEW_FILE,
            EntityType.FILE,
            record.id,
            {
                "file_name": record.name,
                "project_id": record.project_id,
                "previous_status": previous.value,
                "status": target.value,
                "review_notes": notes,
            },
        )
        await self.db.commit()

        logger.log_domain_event(
            ActivityAction.REVIEW_FILE.value, EntityType.FILE.value, record.id,
            status=target.value,
        )
        return ReviewOutcome(file=record, previous_status=previous, activity=entry)
