"""
Tests for the /notifications and /operation-logs endpoints.

These tests verify:
- Notifications are listed per user with pagination and a read filter
- Unread count, mark one and mark all
- Operation logs record create/update/delete with decoded details
"""

from app.models.notification import Notification
from conftest import headers_for


def add_notification(db, user, content="Hello", is_read=False) -> Notification:
    notification = Notification(user_id=user.id, type="invitation", content=content, is_read=is_read)
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


class TestNotificationsApi:
    """Tests for /notifications."""

    def test_list_and_count(self, client, db, test_user, ann, auth_headers):
        add_notification(db, test_user, "one")
        add_notification(db, test_user, "two", is_read=True)
        add_notification(db, ann, "not mine")

        body = client.get("/notifications", headers=auth_headers).json()
        assert body["total"] == 2

        unread = client.get("/notifications", headers=auth_headers, params={"is_read": "false"}).json()
        assert [n["content"] for n in unread["items"]] == ["one"]

        count = client.get("/notifications/unread-count", headers=auth_headers).json()
        assert count == {"count": 1}

    def test_mark_read(self, client, db, test_user, ann, auth_headers):
        mine = add_notification(db, test_user)
        theirs = add_notification(db, ann)

        response = client.put(f"/notifications/{mine.id}/read", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["is_read"] is True

        assert client.put(f"/notifications/{theirs.id}/read", headers=auth_headers).status_code == 404

    def test_mark_all_read(self, client, db, test_user, auth_headers):
        add_notification(db, test_user)
        add_notification(db, test_user)

        response = client.put("/notifications/read-all", headers=auth_headers)

        assert response.json() == {"updated": 2}
        assert client.get("/notifications/unread-count", headers=auth_headers).json() == {"count": 0}


class TestOperationLogsApi:
    """Tests for /operation-logs."""

    def test_history_of_changes(self, client, test_user, auth_headers):
        created = client.post("/events", headers=auth_headers, json={
            "title": "Standup",
            "start_time": "2024-06-01T09:00:00Z",
            "end_time": "2024-06-01T09:15:00Z",
        }).json()
        client.put(f"/events/{created['id']}", headers=auth_headers, json={"title": "Daily standup"})
        client.delete(f"/events/{created['id']}", headers=auth_headers)

        body = client.get("/operation-logs", headers=auth_headers).json()

        assert body["total"] == 3
        assert [i["action"] for i in body["items"]] == ["delete", "update", "create"]
        update = body["items"][1]["detail"]
        assert update["kind"] == "update"
        assert update["before"]["title"] == "Standup"
        assert update["after"]["title"] == "Daily standup"

        only_create = client.get("/operation-logs", headers=auth_headers, params={"action": "create"}).json()
        assert only_create["total"] == 1
        assert only_create["items"][0]["target_title"] == "Standup"

    def test_logs_are_private(self, client, test_user, ann, auth_headers):
        client.post("/events", headers=auth_headers, json={
            "title": "Standup",
            "start_time": "2024-06-01T09:00:00Z",
            "end_time": "2024-06-01T09:15:00Z",
        })

        assert client.get("/operation-logs", headers=headers_for(ann)).json()["total"] == 0
