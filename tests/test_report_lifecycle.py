import pytest
from sqlmodel import Session, select

from app.core.config import settings
from app.core.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from app.db.session import engine
from app.models.enums import AttachmentType, FileType, HistoryAction, ReportStatus, UrgencyLevel
from app.models.notification import Notification
from app.models.report import Report
from app.models.report_attachment import ReportAttachment
from app.models.report_file import ReportFile
from app.models.report_history import ReportHistory
from app.schemas.report import ReportCreate, ReportTransition
from app.services import comment_service, subscribers
from app.services.history_service import list_history
from app.services.report_lifecycle import create_report, rate_report, transition_report
from app.services.report_service import require_report
from app.services.storage import IncomingFile


def _create(session, citizen, category, files=None, category_id=None):
    payload = ReportCreate(
        category_id=category_id or category.id,
        urgency_level=UrgencyLevel.HIGH,
        title="Poste sin luz",
        description="La luminaria de la esquina lleva una semana apagada",
        location_address="Calle 10 # 5-20",
        lat=4.6,
        lon=-74.08,
    )
    return create_report(session, citizen, payload, files).report


def _move(session, report, user, status, **fields):
    return transition_report(session, report.id, user, ReportTransition(status=status, **fields))


def _history_for(session, report):
    return session.exec(select(ReportHistory).where(ReportHistory.report_id == report.id)).all()


def test_create_report_starts_received_with_history(session, citizen, category):
    report = _create(session, citizen, category)

    assert report.status == ReportStatus.RECEIVED
    assert report.tracking_code.startswith("RPT-")
    assert len(report.tracking_code) == len("RPT-") + 8
    assert report.citizen_name == "Ana Pérez"
    assert report.citizen_email == "ciudadano@example.com"
    assert report.version == 1

    history = _history_for(session, report)
    assert len(history) == 1
    assert history[0].action == HistoryAction.CREATED
    assert history[0].new_value == "received"
    assert history[0].comment == "Reporte creado por el ciudadano"


def test_create_report_unknown_category(session, citizen, category):
    with pytest.raises(NotFoundError):
        _create(session, citizen, category, category_id="missing")


@pytest.mark.parametrize("field", ["title", "description", "location_address"])
def test_create_report_rejects_blank_required_text(session, citizen, category, field):
    values = {
        "category_id": category.id,
        "title": "Poste sin luz",
        "description": "La luminaria de la esquina lleva una semana apagada",
        "location_address": "Calle 10 # 5-20",
    }
    values[field] = "   "

    with pytest.raises(ValidationError):
        create_report(session, citizen, ReportCreate(**values))

    assert session.exec(select(Report)).all() == []
    assert session.exec(select(ReportHistory)).all() == []


def test_create_report_rejects_non_citizen(session, admin, category):
    with pytest.raises(PermissionDeniedError):
        _create(session, admin, category)


def test_create_report_stores_files(session, citizen, category):
    files = [IncomingFile("foto.jpg", "image/jpeg", b"jpeg-bytes")]
    report = _create(session, citizen, category, files)

    stored = session.exec(select(ReportFile).where(ReportFile.report_id == report.id)).all()
    assert len(stored) == 1
    assert stored[0].file_path.startswith(f"{report.id}/")
    assert stored[0].file_path.endswith(".jpg")
    assert stored[0].file_url == f"/files/{stored[0].file_path}"


def test_create_report_too_many_files_inserts_nothing(session, citizen, category):
    files = [IncomingFile(f"f{i}.png", "image/png", b"x") for i in range(4)]
    with pytest.raises(ValidationError):
        _create(session, citizen, category, files)
    assert session.exec(select(ReportHistory)).all() == []


def test_status_change_appends_one_history_entry(session, citizen, admin, category):
    report = _create(session, citizen, category)

    result = _move(session, report, admin, ReportStatus.IN_REVIEW, admin_notes="Revisando")

    assert result.warnings == []
    assert result.report.status == ReportStatus.IN_REVIEW
    assert result.report.version == 2
    entries = [item for item in _history_for(session, report) if item.action == HistoryAction.STATUS_CHANGE]
    assert len(entries) == 1
    assert entries[0].old_value == "received"
    assert entries[0].new_value == "in_review"
    assert entries[0].comment == "Revisando"
    assert entries[0].changed_by == admin.id
    assert entries[0].changed_by_name == "Administrador"


def test_same_status_edit_produces_no_history(session, citizen, admin, category):
    report = _create(session, citizen, category)
    _move(session, report, admin, ReportStatus.IN_REVIEW)

    result = _move(session, report, admin, ReportStatus.IN_REVIEW, admin_notes="Nota adicional")

    assert result.report.admin_notes == "Nota adicional"
    assert len(_history_for(session, report)) == 2


def test_history_count_tracks_status_changes(session, citizen, admin, category):
    report = _create(session, citizen, category)
    sequence = [
        ReportStatus.IN_REVIEW,
        ReportStatus.IN_REVIEW,
        ReportStatus.IN_PROGRESS,
        ReportStatus.REQUIRES_INFO,
        ReportStatus.IN_PROGRESS,
    ]
    for status in sequence:
        _move(session, report, admin, status)

    history = list_history(session, report.id)
    assert len(history) == 1 + 4
    assert history[-1].action == HistoryAction.CREATED


def test_skipping_review_leaves_reviewed_at_unset(session, citizen, admin, category):
    report = _create(session, citizen, category)

    result = _move(session, report, admin, ReportStatus.IN_PROGRESS)

    assert result.report.started_at is not None
    assert result.report.reviewed_at is None


def test_lifecycle_timestamps_are_set_once(session, citizen, admin, category):
    report = _create(session, citizen, category)
    _move(session, report, admin, ReportStatus.IN_REVIEW)
    first_reviewed = require_report(session, report.id).reviewed_at

    _move(session, report, admin, ReportStatus.IN_PROGRESS)
    _move(session, report, admin, ReportStatus.IN_REVIEW)

    assert require_report(session, report.id).reviewed_at == first_reviewed


def test_resolve_requires_resolution_notes(session, citizen, admin, category):
    report = _create(session, citizen, category)

    with pytest.raises(ValidationError):
        _move(session, report, admin, ReportStatus.RESOLVED, resolution_notes="   ")

    stored = require_report(session, report.id)
    assert stored.status == ReportStatus.RECEIVED
    assert stored.resolved_at is None
    assert stored.version == 1
    assert len(_history_for(session, report)) == 1


def test_reject_requires_reason(session, citizen, admin, category):
    report = _create(session, citizen, category)

    with pytest.raises(ValidationError):
        _move(session, report, admin, ReportStatus.REJECTED)

    assert require_report(session, report.id).status == ReportStatus.RECEIVED


def test_citizen_cannot_transition(session, citizen, category):
    report = _create(session, citizen, category)
    with pytest.raises(PermissionDeniedError):
        _move(session, report, citizen, ReportStatus.IN_REVIEW)


def test_entity_outside_subscription_cannot_transition(session, citizen, entity_user, other_category):
    report = _create(session, citizen, other_category)
    with pytest.raises(PermissionDeniedError):
        _move(session, report, entity_user, ReportStatus.IN_REVIEW)


def test_entity_transition_names_entity(session, citizen, entity_user, category):
    report = _create(session, citizen, category)

    result = _move(session, report, entity_user, ReportStatus.IN_PROGRESS)

    assert result.report.assigned_user_id == entity_user.id
    notification = session.exec(select(Notification).where(Notification.user_id == citizen.id)).one()
    assert notification.payload["entity_name"] == "Empresa de Energía"
    assert notification.payload["old_status"] == "received"
    assert notification.payload["new_status"] == "in_progress"
    assert notification.message == f"Tu reporte #{report.tracking_code} ha cambiado a estado: En Progreso"


def test_stale_expected_version_conflicts(session, citizen, admin, category):
    report = _create(session, citizen, category)
    _move(session, report, admin, ReportStatus.IN_REVIEW, expected_version=1)

    with pytest.raises(ConflictError):
        _move(session, report, admin, ReportStatus.IN_PROGRESS, expected_version=1)

    assert require_report(session, report.id).status == ReportStatus.IN_REVIEW


def test_stale_read_loses_version_race(session, citizen, admin, category):
    report = _create(session, citizen, category)

    with Session(engine) as other:
        stale = require_report(other, report.id)
        assert stale.version == 1

        _move(session, report, admin, ReportStatus.IN_REVIEW, expected_version=1)

        with pytest.raises(ConflictError):
            transition_report(
                other,
                report.id,
                admin,
                ReportTransition(status=ReportStatus.IN_PROGRESS, expected_version=1),
            )

    stored = require_report(session, report.id)
    assert stored.status == ReportStatus.IN_REVIEW
    assert stored.version == 2
    assert stored.started_at is None
    assert len(_history_for(session, report)) == 2


def test_notification_failure_keeps_report_update(session, citizen, admin, category, monkeypatch):
    report = _create(session, citizen, category)

    def _boom(*args, **kwargs):
        raise RuntimeError("notifications down")

    monkeypatch.setattr(subscribers, "create_notification", _boom)

    result = _move(session, report, admin, ReportStatus.IN_REVIEW)

    assert len(result.warnings) == 1
    assert "notifications down" in result.warnings[0]
    assert require_report(session, report.id).status == ReportStatus.IN_REVIEW
    assert len(_history_for(session, report)) == 2
    assert session.exec(select(Notification)).all() == []


def test_resolution_evidence_is_tagged_resolution(session, citizen, admin, category):
    report = _create(session, citizen, category)
    files = [
        IncomingFile("antes.png", "image/png", b"png"),
        IncomingFile("acta.pdf", "application/pdf", b"%PDF"),
    ]

    result = transition_report(
        session,
        report.id,
        admin,
        ReportTransition(status=ReportStatus.RESOLVED, resolution_notes="Luminaria reemplazada"),
        files,
    )

    assert result.warnings == []
    attachments = session.exec(select(ReportAttachment).where(ReportAttachment.report_id == report.id)).all()
    assert {item.attachment_type for item in attachments} == {AttachmentType.RESOLUTION}
    assert {item.file_type for item in attachments} == {FileType.IMAGE, FileType.DOCUMENT}
    assert all(item.uploaded_by == admin.id for item in attachments)


def test_progress_evidence_is_tagged_progress(session, citizen, admin, category):
    report = _create(session, citizen, category)

    transition_report(
        session,
        report.id,
        admin,
        ReportTransition(status=ReportStatus.IN_PROGRESS),
        [IncomingFile("avance.mp4", "video/mp4", b"mp4")],
    )

    attachment = session.exec(select(ReportAttachment)).one()
    assert attachment.attachment_type == AttachmentType.PROGRESS
    assert attachment.file_type == FileType.VIDEO
    assert attachment.file_size == 3


def test_failed_upload_is_skipped_with_warning(session, citizen, admin, category, monkeypatch):
    report = _create(session, citizen, category)

    class _FlakyStorage:
        def upload(self, path, data, content_type):
            if data == b"bad":
                raise OSError("disk full")
            return f"/files/{path}"

    monkeypatch.setattr(comment_service, "get_blob_storage", lambda: _FlakyStorage())

    result = transition_report(
        session,
        report.id,
        admin,
        ReportTransition(status=ReportStatus.IN_PROGRESS),
        [IncomingFile("ok.png", "image/png", b"ok"), IncomingFile("bad.png", "image/png", b"bad")],
    )

    assert result.warnings == ["No se pudo adjuntar bad.png"]
    assert [item.file_name for item in session.exec(select(ReportAttachment)).all()] == ["ok.png"]
    assert require_report(session, report.id).status == ReportStatus.IN_PROGRESS


def test_oversized_evidence_rejected_before_mutation(session, citizen, admin, category, monkeypatch):
    report = _create(session, citizen, category)
    monkeypatch.setattr(settings, "MAX_FILE_SIZE_BYTES", 4)

    with pytest.raises(ValidationError):
        transition_report(
            session,
            report.id,
            admin,
            ReportTransition(status=ReportStatus.IN_PROGRESS),
            [IncomingFile("grande.png", "image/png", b"0123456789")],
        )

    assert require_report(session, report.id).status == ReportStatus.RECEIVED


def _resolved(session, citizen, admin, category):
    report = _create(session, citizen, category)
    _move(session, report, admin, ReportStatus.RESOLVED, resolution_notes="Listo")
    return report


def test_rating_resolved_report(session, citizen, admin, category):
    report = _resolved(session, citizen, admin, category)
    history_before = len(_history_for(session, report))

    rated = rate_report(session, report.id, citizen, 5, "  Muy rápido  ")

    assert rated.citizen_rating == 5
    assert rated.citizen_comment == "Muy rápido"
    assert rated.rated_at is not None
    assert len(_history_for(session, report)) == history_before


def test_rating_twice_conflicts_and_keeps_original(session, citizen, admin, category):
    report = _resolved(session, citizen, admin, category)
    rate_report(session, report.id, citizen, 4, "Bien")

    with pytest.raises(ConflictError):
        rate_report(session, report.id, citizen, 1, "Cambio de opinión")

    stored = require_report(session, report.id)
    assert stored.citizen_rating == 4
    assert stored.citizen_comment == "Bien"


def test_rating_requires_resolved_status(session, citizen, category):
    report = _create(session, citizen, category)
    with pytest.raises(ValidationError):
        rate_report(session, report.id, citizen, 5)


@pytest.mark.parametrize("value", [0, 6])
def test_rating_out_of_range(session, citizen, admin, category, value):
    report = _resolved(session, citizen, admin, category)
    with pytest.raises(ValidationError):
        rate_report(session, report.id, citizen, value)


def test_rating_by_other_user_denied(session, citizen, admin, category):
    report = _resolved(session, citizen, admin, category)
    with pytest.raises(PermissionDeniedError):
        rate_report(session, report.id, admin, 5)
