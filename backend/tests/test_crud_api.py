"""
HTTP tests for users, categories, tasks, comments and activities.
"""

import logging
from datetime import timedelta

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

import models
from tests.conftest import make_task, make_user, create_auth_token

logger = logging.getLogger(__name__)


def test_health(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_requests_without_token_are_401(client: TestClient):
    response = client.get("/api/tasks")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_invalid_token_is_401(client: TestClient):
    response = client.get("/api/tasks", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_expired_token_is_401(client: TestClient, admin_user):
    token = create_auth_token(admin_user, expires_delta=timedelta(minutes=-5))
    response = client.get("/api/tasks", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_inactive_user_is_403(client: TestClient, test_db: Session):
    user = make_user(test_db, "Gone User", "gone@test.com")
    user.account_status = models.AccountStatus.suspended
    test_db.commit()

    response = client.get("/api/tasks", headers={"Authorization": f"Bearer {create_auth_token(user)}"})
    assert response.status_code == 403


# ============== Users ==============


def test_create_and_fetch_user(client: TestClient, auth_headers):
    response = client.post(
        "/api/users",
        json={"name": "New Person", "email": "new@test.com", "password": "s3cretpass", "department": "QA"},
        headers=auth_headers,
    )

    assert response.status_code == 201
    user = response.json()
    assert user["role"] == "member"
    assert user["account_status"] == "active"
    assert "password" not in user and "password_hash" not in user
    assert "last_login_at" not in user

    by_email = client.get("/api/users/email/new@test.com", headers=auth_headers)
    assert by_email.status_code == 200
    assert by_email.json()["id"] == user["id"]
    logger.info(f"✓ User {user['id']} created and found by email")


def test_duplicate_email_is_400(client: TestClient, auth_headers, regular_user):
    response = client.post(
        "/api/users",
        json={"name": "Copy", "email": regular_user.email, "password": "s3cretpass"},
        headers=auth_headers,
    )
    assert response.status_code == 400


def test_member_cannot_create_users(client: TestClient, user_auth_headers):
    response = client.post(
        "/api/users",
        json={"name": "Nope", "email": "nope@test.com", "password": "s3cretpass"},
        headers=user_auth_headers,
    )
    assert response.status_code == 403


def test_user_updates_own_profile_but_not_role(client: TestClient, regular_user, user_auth_headers):
    response = client.put(f"/api/users/{regular_user.id}", json={"department": "Ops"}, headers=user_auth_headers)
    assert response.status_code == 200
    assert response.json()["department"] == "Ops"

    response = client.put(f"/api/users/{regular_user.id}", json={"role": "admin"}, headers=user_auth_headers)
    assert response.status_code == 403


def test_admin_deletes_user(client: TestClient, test_db: Session, regular_user, auth_headers, admin_user):
    response = client.delete(f"/api/users/{regular_user.id}", headers=auth_headers)
    assert response.status_code == 204
    assert client.get(f"/api/users/{regular_user.id}", headers=auth_headers).status_code == 404

    assert client.delete(f"/api/users/{admin_user.id}", headers=auth_headers).status_code == 400


# ============== Categories ==============


def test_category_crud(client: TestClient, auth_headers):
    response = client.post("/api/categories", json={"name": "Backend", "color": "#1a2b3c"}, headers=auth_headers)
    assert response.status_code == 201
    category_id = response.json()["id"]

    response = client.put(f"/api/categories/{category_id}", json={"is_active": False}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    active = client.get("/api/categories", params={"active_only": True}, headers=auth_headers).json()
    assert active == []

    assert client.delete(f"/api/categories/{category_id}", headers=auth_headers).status_code == 204
    assert client.get(f"/api/categories/{category_id}", headers=auth_headers).status_code == 404


def test_category_color_must_be_hex(client: TestClient, auth_headers):
    response = client.post("/api/categories", json={"name": "Bad", "color": "blue"}, headers=auth_headers)
    assert response.status_code == 422


# ============== Tasks ==============


def test_create_task_defaults(client: TestClient, admin_user, auth_headers):
    response = client.post("/api/tasks", json={"title": "Plan sprint"}, headers=auth_headers)

    assert response.status_code == 201
    task = response.json()
    assert task["status"] == "pending"
    assert task["priority"] == "medium"
    assert task["user_id"] == admin_user.id
    assert task["user_name"] == "Admin User"
    assert task["is_overdue"] is False

    activities = client.get(f"/api/tasks/{task['id']}/activities", headers=auth_headers).json()
    assert [a["activity_type"] for a in activities] == ["created"]


def test_create_task_with_unknown_category_is_400(client: TestClient, auth_headers):
    response = client.post("/api/tasks", json={"title": "Plan sprint", "category_id": 77}, headers=auth_headers)
    assert response.status_code == 400


def test_create_task_title_too_short_is_422(client: TestClient, auth_headers):
    response = client.post("/api/tasks", json={"title": "ab"}, headers=auth_headers)
    assert response.status_code == 422


def test_list_tasks_filters(client: TestClient, test_db: Session, admin_user, regular_user, auth_headers):
    make_task(test_db, admin_user, "Admin pending")
    make_task(test_db, admin_user, "Admin done", models.TaskStatus.completed)
    make_task(test_db, regular_user, "User pending")

    all_tasks = client.get("/api/tasks", headers=auth_headers).json()
    assert len(all_tasks) == 3

    mine = client.get("/api/tasks", params={"user_id": admin_user.id}, headers=auth_headers).json()
    assert {t["title"] for t in mine} == {"Admin pending", "Admin done"}

    pending_mine = client.get(
        "/api/tasks", params={"user_id": admin_user.id, "status": "pending"}, headers=auth_headers
    ).json()
    assert [t["title"] for t in pending_mine] == ["Admin pending"]


def test_update_records_one_activity_per_changed_field(client: TestClient, test_db: Session, admin_user,
                                                      regular_user, auth_headers):
    task = make_task(test_db, admin_user, "Old title")

    response = client.put(
        f"/api/tasks/{task.id}",
        json={"title": "New title", "priority": "medium", "user_id": regular_user.id, "description": "Details"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    activities = client.get(f"/api/tasks/{task.id}/activities", headers=auth_headers).json()
    by_type = {a["activity_type"]: a for a in activities}
    # priority was already medium
    assert set(by_type) == {"title_changed", "assignee_changed", "description_changed"}
    assert by_type["title_changed"]["old_value"] == "Old title"
    assert by_type["assignee_changed"]["new_value"] == str(regular_user.id)
    assert by_type["description_changed"]["new_value"] is None


def test_update_rejects_null_title(client: TestClient, test_db: Session, admin_user, auth_headers):
    task = make_task(test_db, admin_user, "Keep me")
    response = client.put(f"/api/tasks/{task.id}", json={"title": None}, headers=auth_headers)
    assert response.status_code == 400


def test_missing_task_is_404(client: TestClient, auth_headers):
    assert client.get("/api/tasks/404", headers=auth_headers).status_code == 404
    assert client.put("/api/tasks/404", json={"title": "Whatever"}, headers=auth_headers).status_code == 404


# ============== Comments ==============


def test_comment_lifecycle(client: TestClient, test_db: Session, admin_user, regular_user, auth_headers,
                           user_auth_headers):
    task = make_task(test_db, admin_user, "Discuss")

    response = client.post(f"/api/tasks/{task.id}/comments", json={"content": "First!"}, headers=user_auth_headers)
    assert response.status_code == 201
    comment = response.json()
    assert comment["user_name"] == "Regular User"

    # Only the author (or an admin) may edit
    other = make_user(test_db, "Other User", "other@test.com")
    other_headers = {"Authorization": f"Bearer {create_auth_token(other)}"}
    response = client.put(
        f"/api/tasks/{task.id}/comments/{comment['id']}", json={"content": "Hijack"}, headers=other_headers
    )
    assert response.status_code == 403

    response = client.put(
        f"/api/tasks/{task.id}/comments/{comment['id']}", json={"content": "Edited"}, headers=user_auth_headers
    )
    assert response.json()["content"] == "Edited"

    comments = client.get(f"/api/tasks/{task.id}/comments", headers=auth_headers).json()
    assert [c["content"] for c in comments] == ["Edited"]

    activities = client.get(f"/api/tasks/{task.id}/activities", headers=auth_headers).json()
    assert activities[0]["activity_type"] == "commented"
    assert activities[0]["user_id"] == regular_user.id

    response = client.delete(f"/api/tasks/{task.id}/comments/{comment['id']}", headers=auth_headers)
    assert response.status_code == 204
    assert client.get(f"/api/tasks/{task.id}/comments", headers=auth_headers).json() == []


def test_empty_comment_is_422(client: TestClient, test_db: Session, admin_user, auth_headers):
    task = make_task(test_db, admin_user, "Discuss")
    response = client.post(f"/api/tasks/{task.id}/comments", json={"content": ""}, headers=auth_headers)
    assert response.status_code == 422
