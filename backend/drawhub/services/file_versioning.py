"""
File Versioning Service - upload pipeline for project drawings

Per file of a batch:
1. clean the client name and check the extension
2. stream the bytes to blob storage (size limit enforced there)
3. plan name/version from the records already in the project
4. insert the record and its activity entry in one commit

Step 3-4 race with concurrent uploads of the same name. The unique indexes
on ``files`` reject the loser, which rolls back, re-plans and retries up to
UPLOAD_CONFLICT_RETRIES times. Each file is its own unit of work: a
rejected file never affects its siblings.
"""

import os
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Optional, List, Sequence, Tuple

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from drawhub.core.config import settings
from drawhub.core.exceptions import (
    ConflictError,
    EmptyUploadError,
    FileTooLargeError,
    InvalidFileTypeError,
    UploadRejectedError,
)
from drawhub.core.logging_config import logger
from drawhub.core.types import generate_uuid, utcnow
from drawhub.models.activity_log import ActivityAction, EntityType
from drawhub.models.file_record import FileRecord, FileStatus
from drawhub.models.user import User
from drawhub.schemas.activity import ActivityResponse
from drawhub.schemas.file import FileResponse, RejectedFile
from drawhub.services.access_policy import Action, require, get_visible_project
from drawhub.services.activity_recorder import ActivityRecorder
from drawhub.services.blob_storage import AsyncReadable, BlobStorage, StoredBlob


@dataclass
class VersionPlan:
    name: str
    base_name: str
    extension: str
    version: int


@dataclass
class IncomingFile:
    """One part of a multipart upload"""
    filename: Optional[str]
    source: AsyncReadable
    content_type: Optional[str] = None


@dataclass
class UploadOutcome:
    uploaded: List[FileResponse] = field(default_factory=list)
    rejected: List[RejectedFile] = field(default_factory=list)
    activity: List[ActivityResponse] = field(default_factory=list)


def clean_filename(filename: Optional[str]) -> str:
    """Drop any directory part the client sent ("C:\\a\\b.dwg" -> "b.dwg")"""
    if not filename:
        return ""
    return PurePosixPath(filename.replace("\\", "/")).name.strip()


def split_filename(filename: str) -> Tuple[str, str]:
    """
    (base name, extension) split at the last dot.

    >>> split_filename("planta.baixa.dwg")
    ('planta.baixa', '.dwg')
    >>> split_filename(".hidden")
    ('.hidden', '')
    """
    return os.path.splitext(filename)


def validate_extension(filename: str, allowed: Optional[Sequence[str]] = None) -> None:
    allowed = list(allowed) if allowed is not None else settings.ALLOWED_EXTENSIONS
    _, extension = split_filename(filename)
    if not filename or extension.lower() not in allowed:
        raise InvalidFileTypeError(filename, allowed)


def validate_size(filename: str, size: int, max_size: Optional[int] = None) -> None:
    max_size = max_size if max_size is not None else settings.MAX_UPLOAD_SIZE
    if size > max_size:
        raise FileTooLargeError(filename, max_size)


async def plan_version(db: AsyncSession, project_id: str, original_name: str) -> VersionPlan:
    """
    Decide stored name and version for ``original_name`` in a project.

    New original name: version 1 under the original name. Otherwise one
    above the highest version of any file with the same base name, skipping
    versions whose stored name already belongs to another file.
    """
    base_name, extension = split_filename(original_name)

    result = await db.execute(
        select(FileRecord.original_name, FileRecord.name)
        .where(
            FileRecord.project_id == project_id,
            (FileRecord.original_name == original_name) | (FileRecord.name == original_name),
        )
    )
    clashes = result.all()
    if not clashes:
        return VersionPlan(name=original_name, base_name=base_name, extension=extension, version=1)

    result = await db.execute(
        select(func.max(FileRecord.version)).where(
            FileRecord.project_id == project_id,
            FileRecord.base_name == base_name,
        )
    )
    # A stored name can be taken by another base ("a_v2.pdf" uploaded as-is),
    # in which case this base may have no versions yet
    latest = max(result.scalar() or 0, 1)

    result = await db.execute(
        select(FileRecord.name).where(
            FileRecord.project_id == project_id,
            FileRecord.name.like(f"{base_name}\\_v%{extension}", escape="\\"),
        )
    )
    taken = set(result.scalars().all())

    version = latest + 1
    while f"{base_name}_v{version}{extension}" in taken:
        version += 1
    return VersionPlan(
        name=f"{base_name}_v{version}{extension}",
        base_name=base_name,
        extension=extension,
        version=version,
    )


class FileVersioningService:
    """Stores uploaded drawings as versioned file records"""

    def __init__(self, db: AsyncSession, storage: Optional[BlobStorage] = None):
        self.db = db
        self.storage = storage or BlobStorage()
        self.recorder = ActivityRecorder(db)

    async def upload(self, actor: User, project_id: str, files: Sequence[IncomingFile]) -> UploadOutcome:
        """
        Store a batch of files into a project.

        Returns accepted and rejected files; raises EmptyUploadError when
        nothing was accepted.
        """
        require(actor, Action.UPLOAD_FILES)
        await get_visible_project(self.db, actor, project_id)

        if not files:
            raise EmptyUploadError()

        # Plain values only: a rollback inside the loop expires ORM objects
        actor_id = actor.id
        outcome = UploadOutcome()

        for incoming in files:
            try:
                record, entry = await self.store(actor_id, project_id, incoming)
            except (UploadRejectedError, ConflictError) as e:
                logger.warning(f"Upload rejected: {incoming.filename} ({e.code})")
                outcome.rejected.append(RejectedFile(
                    filename=incoming.filename or "",
                    code=e.code,
                    message=e.message,
                ))
                continue
            outcome.uploaded.append(record)
            outcome.activity.append(entry)

        if not outcome.uploaded:
            raise EmptyUploadError([r.model_dump() for r in outcome.rejected])

        return outcome

    async def store(self, actor_id: str, project_id: str, incoming: IncomingFile) -> Tuple[FileResponse, ActivityResponse]:
        """Validate, write and record a single file"""
        original_name = clean_filename(incoming.filename)
        validate_extension(original_name)

        blob = await self.storage.save(project_id, original_name, incoming.source, incoming.content_type)
        try:
            return await self._insert(actor_id, project_id, original_name, blob)
        except Exception:
            await self.storage.remove(blob.path)
            raise

    async def _insert(
        self,
        actor_id: str,
        project_id: str,
        original_name: str,
        blob: StoredBlob,
    ) -> Tuple[FileResponse, ActivityResponse]:
        attempts = max(1, settings.UPLOAD_CONFLICT_RETRIES)

        for attempt in range(1, attempts + 1):
            plan = await plan_version(self.db, project_id, original_name)

            record = FileRecord(
                id=generate_uuid(),
                project_id=project_id,
                uploaded_by_id=actor_id,
                name=plan.name,
                original_name=original_name,
                base_name=plan.base_name,
                version=plan.version,
                path=blob.path,
                size=blob.size,
                mime_type=blob.mime_type,
                status=FileStatus.PENDENTE,
                uploaded_at=utcnow(),
            )
            self.db.add(record)
            entry = self.recorder.record(
                actor_id,
                ActivityAction.UPLOAD_FILE,
                EntityType.FILE,
                record.id,
                {
                    "file_name": plan.name,
                    "original_name": original_name,
                    "project_id": project_id,
                    "version": plan.version,
                },
            )

            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                logger.warning(
                    f"Version conflict for {original_name} in project {project_id} "
                    f"(attempt {attempt}/{attempts}, planned v{plan.version})"
                )
                continue

            logger.log_domain_event(
                ActivityAction.UPLOAD_FILE.value, EntityType.FILE.value, record.id,
                project_id=project_id, version=plan.version,
            )
            return FileResponse.model_validate(record), ActivityResponse.model_validate(entry)

        raise ConflictError(
            "Não foi possível registrar o arquivo, tente novamente",
            details={"filename": original_name, "attempts": attempts},
        )

    async def list_files(self, actor: User, project_id: str) -> List[FileRecord]:
        """Files of a visible project, newest first"""
        require(actor, Action.VIEW_OWN)
        await get_visible_project(self.db, actor, project_id)
        result = await self.db.execute(
            select(FileRecord)
            .where(FileRecord.project_id == project_id)
            .order_by(FileRecord.uploaded_at.desc(), FileRecord.version.desc())
        )
        return list(result.scalars().all())
