from enum import Enum
import sqlalchemy as sa
from sqlalchemy import Column


class UserRole(str, Enum):
    CITIZEN = 'citizen'
    ENTITY = 'entity'
    ADMIN = 'admin'


class ReportStatus(str, Enum):
    RECEIVED = 'received'
    IN_REVIEW = 'in_review'
    IN_PROGRESS = 'in_progress'
    REQUIRES_INFO = 'requires_info'
    RESOLVED = 'resolved'
    REJECTED = 'rejected'
    CLOSED = 'closed'


class UrgencyLevel(str, Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'
    CRITICAL = 'critical'


class ContactPreference(str, Enum):
    EMAIL = 'email'
    PHONE = 'phone'


class EntityStatus(str, Enum):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'


class HistoryAction(str, Enum):
    CREATED = 'created'
    STATUS_CHANGE = 'status_change'
    ASSIGNMENT = 'assignment'
    COMMENT = 'comment'
    ATTACHMENT = 'attachment'


class FileType(str, Enum):
    IMAGE = 'image'
    VIDEO = 'video'
    DOCUMENT = 'document'


class AttachmentType(str, Enum):
    PROGRESS = 'progress'
    RESOLUTION = 'resolution'


class NotificationType(str, Enum):
    INFO = 'info'
    SUCCESS = 'success'
    WARNING = 'warning'
    ERROR = 'error'


REPORT_STATUS_LABELS: dict[ReportStatus, str] = {
    ReportStatus.RECEIVED: 'Recibido',
    ReportStatus.IN_REVIEW: 'En Revisión',
    ReportStatus.IN_PROGRESS: 'En Progreso',
    ReportStatus.REQUIRES_INFO: 'Requiere Información',
    ReportStatus.RESOLVED: 'Resuelto',
    ReportStatus.REJECTED: 'Rechazado',
    ReportStatus.CLOSED: 'Cerrado',
}

HISTORY_ACTION_LABELS: dict[HistoryAction, str] = {
    HistoryAction.CREATED: 'Creado',
    HistoryAction.STATUS_CHANGE: 'Cambio de Estado',
    HistoryAction.ASSIGNMENT: 'Asignación',
    HistoryAction.COMMENT: 'Comentario',
    HistoryAction.ATTACHMENT: 'Archivo Adjunto',
}


def status_label(value: ReportStatus | str) -> str:
    try:
        return REPORT_STATUS_LABELS[ReportStatus(value)]
    except ValueError:
        return str(value)


def enum_column(enum_cls: type[Enum], name: str, nullable: bool = False) -> Column:
    return Column(
        sa.Enum(
            enum_cls,
            values_callable=lambda enum: [item.value for item in enum],
            name=name,
        ),
        nullable=nullable,
    )
