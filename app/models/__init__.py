from app.models.base import CreatedAtModel, IDModel, TimestampModel
from app.models.user import User
from app.models.refresh_token import RefreshToken
from app.models.category import Category
from app.models.entity import Entity, EntityAuditLog, EntityCategory
from app.models.report import Report
from app.models.report_history import ReportHistory
from app.models.report_comment import ReportComment
from app.models.report_attachment import ReportAttachment
from app.models.report_file import ReportFile
from app.models.notification import Notification
from app.models.app_rating import AppRating

__all__ = [
    'CreatedAtModel',
    'IDModel',
    'TimestampModel',
    'User',
    'RefreshToken',
    'Category',
    'Entity',
    'EntityAuditLog',
    'EntityCategory',
    'Report',
    'ReportHistory',
    'ReportComment',
    'ReportAttachment',
    'ReportFile',
    'Notification',
    'AppRating',
]
