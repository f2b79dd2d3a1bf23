from fastapi.testclient import TestClient

from app.main import app

PASSWORD = "secret123"


def _auth_headers(client: TestClient, email: str) -> dict:
    login = client.post('/api/v1/auth/login', json={'email': email, 'password': PASSWORD})
    assert login.status_code == 200, login.text
    return {'Authorization': f"Bearer {login.json()['access_token']}"}


def _create_report(client: TestClient, headers: dict, category_id: str, files=None):
    data = {
        'category_id': category_id,
        'title': 'Hueco en la vía',
        'description': 'Hueco profundo frente al colegio',
        'location_address': 'Carrera 7 # 45-10',
        'urgency_level': 'critical',
    }
    return client.post('/api/v1/reports', data=data, files=files, headers=headers)


def test_citizen_creates_report_with_files(citizen, category):
    with TestClient(app) as client:
        headers = _auth_headers(client, citizen.email)
        response = _create_report(
            client,
            headers,
            category.id,
            files=[('files', ('hueco.jpg', b'jpeg-bytes', 'image/jpeg'))],
        )
        assert response.status_code == 201, response.text
        body = response.json()
        assert body['warnings'] == []
        report = body['report']
        assert report['status'] == 'received'
        assert report['status_label'] == 'Recibido'
        assert report['category_name'] == 'Alumbrado público'
        assert report['citizen_email'] == citizen.email

        files = client.get(f"/api/v1/reports/{report['id']}/files", headers=headers)
        assert files.status_code == 200
        assert len(files.json()) == 1

        by_code = client.get(f"/api/v1/reports/by-code/{report['tracking_code']}", headers=headers)
        assert by_code.status_code == 200
        assert by_code.json()['id'] == report['id']


def test_create_report_unknown_category_is_404(citizen, category):
    with TestClient(app) as client:
        headers = _auth_headers(client, citizen.email)
        response = _create_report(client, headers, 'does-not-exist')
        assert response.status_code == 404
        assert response.json()['detail'] == 'Categoría no encontrada'


def test_admin_transition_flow(citizen, admin, category):
    with TestClient(app) as client:
        citizen_headers = _auth_headers(client, citizen.email)
        admin_headers = _auth_headers(client, admin.email)
        report = _create_report(client, citizen_headers, category.id).json()['report']

        missing_notes = client.post(
            f"/api/v1/reports/{report['id']}/transition",
            data={'status': 'resolved'},
            headers=admin_headers,
        )
        assert missing_notes.status_code == 400

        resolved = client.post(
            f"/api/v1/reports/{report['id']}/transition",
            data={'status': 'resolved', 'resolution_notes': 'Vía reparada'},
            files=[('files', ('despues.png', b'png-bytes', 'image/png'))],
            headers=admin_headers,
        )
        assert resolved.status_code == 200, resolved.text
        body = resolved.json()
        assert body['warnings'] == []
        assert body['report']['status'] == 'resolved'
        assert body['report']['resolved_at'] is not None
        assert body['report']['assigned_user_name'] == 'Root'

        attachments = client.get(f"/api/v1/reports/{report['id']}/attachments", headers=citizen_headers)
        assert [item['attachment_type'] for item in attachments.json()] == ['resolution']

        history = client.get(f"/api/v1/reports/{report['id']}/history", headers=citizen_headers)
        actions = [item['action'] for item in history.json()]
        assert actions == ['status_change', 'created']
        assert history.json()[0]['action_label'] == 'Cambio de Estado'

        notifications = client.get('/api/v1/notifications', headers=citizen_headers).json()
        assert len(notifications) == 1
        assert notifications[0]['message'].endswith('ha cambiado a estado: Resuelto')
        assert notifications[0]['payload']['entity_name'] == 'Administrador'

        rating = client.post(
            f"/api/v1/reports/{report['id']}/rating",
            json={'rating': 5, 'comment': 'Excelente'},
            headers=citizen_headers,
        )
        assert rating.status_code == 200
        assert rating.json()['citizen_rating'] == 5

        again = client.post(
            f"/api/v1/reports/{report['id']}/rating",
            json={'rating': 2},
            headers=citizen_headers,
        )
        assert again.status_code == 409

        stats = client.get('/api/v1/reports/stats', headers=admin_headers).json()
        assert stats['total'] == 1
        assert stats['resolved'] == 1
        assert stats['critical_count'] == 1
        assert stats['avg_rating'] == 5.0


def test_citizen_cannot_transition_or_see_others(citizen, admin, category):
    with TestClient(app) as client:
        citizen_headers = _auth_headers(client, citizen.email)
        report = _create_report(client, citizen_headers, category.id).json()['report']

        transition = client.post(
            f"/api/v1/reports/{report['id']}/transition",
            data={'status': 'in_review'},
            headers=citizen_headers,
        )
        assert transition.status_code == 403

        client.post(
            '/api/v1/auth/register',
            json={'email': 'otro@example.com', 'password': PASSWORD, 'full_name': 'Otro'},
        )
        other_headers = _auth_headers(client, 'otro@example.com')
        assert client.get(f"/api/v1/reports/{report['id']}", headers=other_headers).status_code == 403
        assert client.get('/api/v1/reports', headers=other_headers).json() == []


def test_internal_comments_hidden_from_citizen(citizen, admin, category):
    with TestClient(app) as client:
        citizen_headers = _auth_headers(client, citizen.email)
        admin_headers = _auth_headers(client, admin.email)
        report = _create_report(client, citizen_headers, category.id).json()['report']
        url = f"/api/v1/reports/{report['id']}/comments"

        public = client.post(url, json={'comment': 'Gracias por reportar'}, headers=admin_headers)
        assert public.status_code == 201
        assert public.json()['user_name'] == 'Administrador'
        internal = client.post(url, json={'comment': 'Enviar cuadrilla', 'is_internal': True}, headers=admin_headers)
        assert internal.json()['is_public'] is False

        assert client.post(url, json={'comment': '   '}, headers=citizen_headers).status_code == 400
        denied = client.post(url, json={'comment': 'secreto', 'is_internal': True}, headers=citizen_headers)
        assert denied.status_code == 403

        citizen_view = client.get(url, headers=citizen_headers).json()
        assert [item['comment'] for item in citizen_view] == ['Gracias por reportar']
        assert len(client.get(url, headers=admin_headers).json()) == 2


def test_entity_sees_only_subscribed_categories(citizen, entity_user, category, other_category):
    with TestClient(app) as client:
        citizen_headers = _auth_headers(client, citizen.email)
        visible = _create_report(client, citizen_headers, category.id).json()['report']
        hidden = _create_report(client, citizen_headers, other_category.id).json()['report']

        entity_headers = _auth_headers(client, entity_user.email)
        listed = client.get('/api/v1/reports', headers=entity_headers).json()
        assert [item['id'] for item in listed] == [visible['id']]
        assert client.get(f"/api/v1/reports/{hidden['id']}", headers=entity_headers).status_code == 403

        moved = client.post(
            f"/api/v1/reports/{visible['id']}/transition",
            data={'status': 'in_progress', 'expected_version': '1'},
            headers=entity_headers,
        )
        assert moved.status_code == 200
        stale = client.post(
            f"/api/v1/reports/{visible['id']}/transition",
            data={'status': 'in_review', 'expected_version': '1'},
            headers=entity_headers,
        )
        assert stale.status_code == 409


def test_status_labels_endpoint():
    with TestClient(app) as client:
        response = client.get('/api/v1/reports/statuses')
        assert response.status_code == 200
        labels = {item['value']: item['label'] for item in response.json()}
        assert labels['in_review'] == 'En Revisión'
        assert len(labels) == 7
