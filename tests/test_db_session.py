from sqlmodel import select

from app.db.session import _connect_args, get_session
from app.models.report import Report


def test_session_dependency_yields_working_session():
    gen = get_session()
    session = next(gen)
    assert session.exec(select(Report)).all() == []
    gen.close()


def test_sqlite_connections_shared_across_threads():
    assert _connect_args("sqlite:///./urban_reports.db") == {"check_same_thread": False}
    assert _connect_args("mysql+pymysql://u:p@localhost/db") == {}
