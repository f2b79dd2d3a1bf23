import anyio
import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.models.enums import NotificationType
from app.services.notification_service import (
    create_notification,
    list_notifications,
    mark_all_read,
    set_read,
    unread_count,
)
from app.services.notification_stream import NotificationBroker, notification_broker

PASSWORD = "secret123"


def test_notifications_listed_newest_first(session, citizen):
    for index in range(3):
        create_notification(session, citizen.id, f"mensaje {index}")

    messages = [item.message for item in list_notifications(session, citizen.id)]
    assert messages == ["mensaje 2", "mensaje 1", "mensaje 0"]
    assert unread_count(session, citizen.id) == 3


def test_set_read_is_idempotent(session, citizen):
    record = create_notification(session, citizen.id, "hola", NotificationType.WARNING, {"report_code": "RPT-1"})

    first = set_read(session, record)
    second = set_read(session, record)

    assert first.is_read is True
    assert second.is_read is True
    assert unread_count(session, citizen.id) == 0
    assert list_notifications(session, citizen.id, unread_only=True) == []


def test_mark_all_read_counts_only_unread(session, citizen, admin):
    first = create_notification(session, citizen.id, "uno")
    create_notification(session, citizen.id, "dos")
    create_notification(session, admin.id, "ajena")
    set_read(session, first)

    assert mark_all_read(session, citizen.id) == 1
    assert unread_count(session, citizen.id) == 0
    assert unread_count(session, admin.id) == 1


def test_notification_endpoints(session, citizen, admin):
    own = create_notification(session, citizen.id, "Tu reporte cambió")
    other = create_notification(session, admin.id, "Privado")

    with TestClient(app) as client:
        login = client.post('/api/v1/auth/login', json={'email': citizen.email, 'password': PASSWORD})
        headers = {'Authorization': f"Bearer {login.json()['access_token']}"}

        assert client.get('/api/v1/notifications/unread-count', headers=headers).json() == {'unread': 1}

        forbidden = client.patch(f'/api/v1/notifications/{other.id}', json={'is_read': True}, headers=headers)
        assert forbidden.status_code == 403

        marked = client.patch(f'/api/v1/notifications/{own.id}', json={'is_read': True}, headers=headers)
        assert marked.status_code == 200
        assert marked.json()['is_read'] is True

        read_all = client.post('/api/v1/notifications/read-all', headers=headers)
        assert read_all.json() == {'status': 'ok', 'updated': 0}


@pytest.mark.anyio
async def test_broker_delivers_to_subscriber():
    broker = NotificationBroker()
    subscription = broker.subscribe("user-1")
    assert broker.subscriber_count("user-1") == 1

    delivered = broker.publish("user-1", {"message": "hola"})
    assert delivered == 1
    assert broker.publish("user-2", {"message": "nadie"}) == 0

    item = await subscription.queue.get()
    assert item == {"message": "hola"}

    broker.unsubscribe(subscription)
    assert broker.subscriber_count("user-1") == 0


@pytest.mark.anyio
async def test_broker_accepts_publish_from_worker_thread():
    broker = NotificationBroker()
    subscription = broker.subscribe("user-1")

    await anyio.to_thread.run_sync(broker.publish, "user-1", {"message": "desde hilo"})

    with anyio.fail_after(2):
        item = await subscription.queue.get()
    assert item["message"] == "desde hilo"
    broker.unsubscribe(subscription)


@pytest.mark.anyio
async def test_created_notification_reaches_stream(session, citizen):
    subscription = notification_broker.subscribe(citizen.id)
    try:
        record = create_notification(session, citizen.id, "en vivo")
        with anyio.fail_after(2):
            item = await subscription.queue.get()
        assert item["id"] == record.id
        assert item["type"] == "info"
        assert item["is_read"] is False
    finally:
        notification_broker.unsubscribe(subscription)
