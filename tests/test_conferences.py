from fastapi import status

import db_models

JSON = {"Accept": "application/json"}

CONFERENCE = {"city": "Paris", "year": "2020", "is_international": False}


def test_list_conferences_is_public(client, conference):
    response = client.get("/api/conferences", headers=JSON)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == [
        {"id": conference.id, "city": "Amsterdam", "year": "2019", "is_international": True}
    ]


def test_get_conference_is_public(client, conference):
    response = client.get(f"/api/conferences/{conference.id}")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["@id"] == f"/api/conferences/{conference.id}"
    assert data["@type"] == "conference"
    assert data["city"] == "Amsterdam"


def test_get_nonexistent_conference(client):
    response = client.get("/api/conferences/99999")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["conference_id"] == 99999


def test_create_conference_requires_admin(client, user_headers):
    response = client.post("/api/conferences", json=CONFERENCE)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

    response = client.post("/api/conferences", json=CONFERENCE, headers=user_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_create_conference_as_admin(client, admin_headers):
    response = client.post(
        "/api/conferences", json=CONFERENCE, headers={**admin_headers, **JSON}
    )

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["city"] == "Paris"
    assert data["year"] == "2020"
    assert data["is_international"] is False
    assert "id" in data


def test_create_conference_validation(client, admin_headers):
    response = client.post(
        "/api/conferences",
        json={"city": "   ", "year": "20"},
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    violations = {v["propertyPath"]: v["message"] for v in response.json()["violations"]}
    assert violations == {
        "city": "This value should not be blank.",
        "year": "The year must be made of 4 digits",
    }


def test_patch_conference_as_admin(client, admin_headers, conference):
    response = client.patch(
        f"/api/conferences/{conference.id}",
        json={"is_international": False},
        headers={**admin_headers, **JSON},
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["is_international"] is False
    assert response.json()["city"] == "Amsterdam"


def test_replace_conference_as_admin(client, admin_headers, conference):
    response = client.put(
        f"/api/conferences/{conference.id}",
        json=CONFERENCE,
        headers={**admin_headers, **JSON},
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["city"] == "Paris"


def test_update_conference_forbidden_for_regular_user(client, user_headers, conference):
    response = client.patch(
        f"/api/conferences/{conference.id}", json={"city": "Lyon"}, headers=user_headers
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_delete_conference_removes_its_comments(
    client, admin_headers, conference, comment_data, db_session
):
    response = client.post("/api/commentaires", json=comment_data)
    assert response.status_code == status.HTTP_201_CREATED

    response = client.delete(f"/api/conferences/{conference.id}", headers=admin_headers)
    assert response.status_code == status.HTTP_204_NO_CONTENT

    assert db_session.query(db_models.Conference).count() == 0
    assert db_session.query(db_models.Comment).count() == 0
