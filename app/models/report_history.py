from typing import Optional
from sqlmodel import Field, SQLModel
from app.models.base import CreatedAtModel, IDModel
from app.models.enums import HistoryAction, enum_column


class ReportHistory(IDModel, CreatedAtModel, SQLModel, table=True):
    __tablename__ = 'report_history'

    report_id: str = Field(index=True)
    changed_by: Optional[str] = None
    changed_by_name: Optional[str] = None
    action: HistoryAction = Field(sa_column=enum_column(HistoryAction, 'history_action'))
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    comment: Optional[str] = None
