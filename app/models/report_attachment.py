from sqlmodel import Field, SQLModel
from app.models.base import CreatedAtModel, IDModel
from app.models.enums import AttachmentType, FileType, enum_column


class ReportAttachment(IDModel, CreatedAtModel, SQLModel, table=True):
    __tablename__ = 'report_attachments'

    report_id: str = Field(index=True)
    file_url: str
    file_name: str
    file_type: FileType = Field(sa_column=enum_column(FileType, 'attachment_file_type'))
    file_size: int
    attachment_type: AttachmentType = Field(sa_column=enum_column(AttachmentType, 'attachment_type'))
    uploaded_by: str = Field(index=True)
