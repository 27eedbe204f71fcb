"""
File Record Model - uploaded drawings and their review state

Versioning:
- first upload of an original name: version 1, stored under the original name
- re-upload of the same original name: max(version of same base name) + 1,
  stored as ``{base}_v{n}{ext}``

The two unique indexes below are what serializes concurrent uploads of the
same name: the losing insert fails and is re-planned (see
services.file_versioning).
"""

from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Integer, BigInteger, Index, Enum as SQLEnum, text
import enum

from drawhub.core.database import Base
from drawhub.core.types import GUID, generate_uuid, utcnow


class FileStatus(str, enum.Enum):
    """Review status of an uploaded file"""
    PENDENTE = "pendente"     # Initial, set at upload
    APROVADO = "aprovado"
    REJEITADO = "rejeitado"
    REVISAO = "revisao"       # Sent back for revision


class FileRecord(Base):
    """Metadata of one uploaded file; bytes live on disk at ``path``"""
    __tablename__ = "files"

    __table_args__ = (
        Index('uq_files_project_name', 'project_id', 'name', unique=True),
        # Version 1 is shared by distinct original names with the same base
        # (report.dwg / report.pdf), so only re-uploads are constrained
        Index(
            'uq_files_project_base_version', 'project_id', 'base_name', 'version',
            unique=True,
            sqlite_where=text('version > 1'),
            postgresql_where=text('version > 1'),
        ),
        Index('ix_files_project_original_name', 'project_id', 'original_name'),
        Index('ix_files_status', 'status'),
        Index('ix_files_uploaded_at', 'uploaded_at'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    project_id = Column(GUID, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    uploaded_by_id = Column(GUID, ForeignKey("users.id"), nullable=False)

    # Naming and versioning
    name = Column(String(500), nullable=False)           # Stored name, e.g. "report_v2.pdf"
    original_name = Column(String(500), nullable=False)  # As sent by the client, e.g. "report.pdf"
    base_name = Column(String(500), nullable=False)      # Versioning key, e.g. "report"
    version = Column(Integer, default=1, nullable=False)

    # Storage
    path = Column(String(1000), nullable=False)
    size = Column(BigInteger, nullable=False)
    mime_type = Column(String(255), nullable=False)

    # Review
    status = Column(SQLEnum(FileStatus), default=FileStatus.PENDENTE, nullable=False)
    reviewed_by_id = Column(GUID, ForeignKey("users.id"), nullable=True)
    review_notes = Column(Text, nullable=True)

    # Timestamps
    uploaded_at = Column(DateTime, default=utcnow, nullable=False)
    reviewed_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<FileRecord {self.name} v{self.version} ({self.status.value if self.status else '-'})>"
