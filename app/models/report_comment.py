from sqlmodel import Field, SQLModel
from app.models.base import CreatedAtModel, IDModel


class ReportComment(IDModel, CreatedAtModel, SQLModel, table=True):
    __tablename__ = 'report_comments'

    report_id: str = Field(index=True)
    user_id: str = Field(index=True)
    user_name: str
    comment: str
    is_public: bool = True
    is_internal: bool = False
