from fastapi import status

import db_models

JSON = {"Accept": "application/json"}


def create_comment(client, payload):
    response = client.post("/api/commentaires", json=payload, headers=JSON)
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


def test_create_comment_anonymously(client, comment_data, conference):
    """Anyone can leave a comment; the response uses the read group"""

    # ACT
    response = client.post("/api/commentaires", json=comment_data)

    # ASSERT
    assert response.status_code == status.HTTP_201_CREATED
    assert response.headers["content-type"].startswith("application/ld+json")

    data = response.json()
    assert data["@id"] == f"/api/commentaires/{data['id']}"
    assert data["@type"] == "commentaire"
    assert data["author"] == "Alice123"
    assert data["email"] == "alice@guestbook.fr"
    assert data["note"] == 4
    assert data["conference"] == f"/api/conferences/{conference.id}"
    assert data["shorttext"] == "What a great confere..."
    assert data["age"] == "Créé il y a 0 jours 0 heures et 0 minutes"
    assert "created_at" not in data


def test_create_comment_end_to_end_example(client):
    data = create_comment(
        client, {"author": "Alice123", "email": "a@b.com", "text": "Short", "note": 3}
    )

    assert data["shorttext"] == "Short"
    assert data["age"] == "Créé il y a 0 jours 0 heures et 0 minutes"
    assert data["conference"] is None


def test_created_at_cannot_be_written(client, comment_data, db_session):
    data = create_comment(
        client, {**comment_data, "created_at": "2000-01-01T00:00:00+00:00"}
    )

    comment = db_session.get(db_models.Comment, data["id"])
    assert comment.created_at.year != 2000
    assert data["age"].startswith("Créé il y a 0 jours")


def test_create_comment_validation_errors(client):
    # ACT
    response = client.post(
        "/api/commentaires",
        json={"author": "Bob", "email": "not-an-email", "text": "Hi", "note": 6},
    )

    # ASSERT
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    violations = {v["propertyPath"]: v["message"] for v in response.json()["violations"]}
    assert violations == {
        "author": "L'auteur doit contenir au moins 5 caractères",
        "email": "This value is not a valid email address.",
        "note": "You must be between 1 and 5 to enter",
    }


def test_create_comment_with_unknown_conference(client, comment_data):
    response = client.post(
        "/api/commentaires", json={**comment_data, "conference": "/api/conferences/999"}
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["iri"] == "/api/conferences/999"


def test_create_comment_with_malformed_iri(client, comment_data):
    response = client.post(
        "/api/commentaires", json={**comment_data, "conference": "/api/commentaires/1"}
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


# --- Collection (ROLE_ADMIN) ---


def test_list_comments_requires_authentication(client):
    response = client.get("/api/commentaires")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_authentication_checked_before_format(client):
    response = client.get("/api/commentaires", headers={"Accept": "application/xml"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_list_comments_forbidden_for_regular_user(client, user_headers):
    response = client.get("/api/commentaires", headers=user_headers)

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_list_comments_as_admin_is_paginated(client, admin_headers, comment_data):
    # ARRANGE
    for i in range(5):
        create_comment(client, {**comment_data, "author": f"Author{i}"})

    # ACT
    response = client.get("/api/commentaires", headers=admin_headers)

    # ASSERT
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["@type"] == "hydra:Collection"
    assert data["hydra:totalItems"] == 5
    assert [m["author"] for m in data["hydra:member"]] == ["Author0", "Author1"]
    assert data["hydra:view"]["hydra:first"] == "/api/commentaires?page=1"
    assert data["hydra:view"]["hydra:last"] == "/api/commentaires?page=3"
    assert data["hydra:view"]["hydra:next"] == "/api/commentaires?page=2"
    assert "hydra:previous" not in data["hydra:view"]


def test_list_comments_last_page(client, admin_headers, comment_data):
    for i in range(5):
        create_comment(client, {**comment_data, "author": f"Author{i}"})

    response = client.get("/api/commentaires?page=3", headers=admin_headers)

    data = response.json()
    assert [m["author"] for m in data["hydra:member"]] == ["Author4"]
    assert data["hydra:view"]["hydra:previous"] == "/api/commentaires?page=2"
    assert "hydra:next" not in data["hydra:view"]


def test_list_comments_plain_json(client, admin_headers, comment_data):
    create_comment(client, comment_data)

    response = client.get("/api/commentaires", headers={**admin_headers, **JSON})

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert isinstance(data, list)
    assert data[0]["author"] == "Alice123"
    assert "created_at" not in data[0]


def test_list_comments_rejects_page_zero(client, admin_headers):
    response = client.get("/api/commentaires?page=0", headers=admin_headers)

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


# --- Item ---


def test_get_comment_requires_authentication(client, comment_data):
    comment = create_comment(client, comment_data)

    response = client.get(f"/api/commentaires/{comment['id']}")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_get_comment_as_user(client, user_headers, comment_data):
    comment = create_comment(client, comment_data)

    response = client.get(
        f"/api/commentaires/{comment['id']}", headers={**user_headers, **JSON}
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["id"] == comment["id"]
    assert response.json()["text"] == comment_data["text"]


def test_get_nonexistent_comment(client, user_headers):
    response = client.get("/api/commentaires/99999", headers=user_headers)

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["comment_id"] == 99999


def test_replace_comment_without_authentication(client, comment_data, db_session):
    comment = create_comment(client, comment_data)

    response = client.put(
        f"/api/commentaires/{comment['id']}",
        json={"author": "Someone Else", "email": "else@guestbook.fr", "text": "Replaced"},
        headers=JSON,
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["author"] == "Someone Else"
    assert data["text"] == "Replaced"
    # Omitted optional fields are cleared by a replacement
    assert data["note"] is None
    assert data["conference"] is None
    assert db_session.get(db_models.Comment, comment["id"]) is not None


def test_replace_comment_validates(client, comment_data):
    comment = create_comment(client, comment_data)

    response = client.put(
        f"/api/commentaires/{comment['id']}",
        json={**comment_data, "author": "x" * 51},
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_patch_comment_only_changes_sent_fields(client, comment_data):
    comment = create_comment(client, comment_data)

    response = client.patch(
        f"/api/commentaires/{comment['id']}", json={"note": 5}, headers=JSON
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["note"] == 5
    assert data["author"] == comment_data["author"]
    assert data["conference"] == comment_data["conference"]


def test_patch_comment_can_detach_conference(client, comment_data, db_session, conference):
    comment = create_comment(client, comment_data)

    response = client.patch(
        f"/api/commentaires/{comment['id']}", json={"conference": None}, headers=JSON
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["conference"] is None

    # The comment survives; only the link is removed
    stored = db_session.get(db_models.Comment, comment["id"])
    assert stored is not None
    assert stored.conference is None
    assert conference.comments == []


def test_patch_comment_rejects_invalid_note(client, comment_data):
    comment = create_comment(client, comment_data)

    response = client.patch(f"/api/commentaires/{comment['id']}", json={"note": 0})

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_patch_nonexistent_comment(client):
    response = client.patch("/api/commentaires/99999", json={"note": 2})

    assert response.status_code == status.HTTP_404_NOT_FOUND


# --- Delete (ROLE_ADMIN) ---


def test_delete_comment_forbidden_for_regular_user(client, user_headers, comment_data):
    comment = create_comment(client, comment_data)

    response = client.delete(f"/api/commentaires/{comment['id']}", headers=user_headers)

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_delete_comment_as_admin(client, admin_headers, comment_data):
    comment = create_comment(client, comment_data)

    response = client.delete(f"/api/commentaires/{comment['id']}", headers=admin_headers)
    assert response.status_code == status.HTTP_204_NO_CONTENT

    # Verify comment was removed
    response = client.get(f"/api/commentaires/{comment['id']}", headers=admin_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND
