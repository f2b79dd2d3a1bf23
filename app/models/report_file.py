from sqlmodel import Field, SQLModel
from app.models.base import CreatedAtModel, IDModel


class ReportFile(IDModel, CreatedAtModel, SQLModel, table=True):
    __tablename__ = 'report_files'

    report_id: str = Field(index=True)
    file_path: str
    file_url: str
