import os

import pytest

from conftest import auth_header

PDF_BYTES = b"%PDF-1.4\n1 0 obj<<>>endobj\ntrailer<<>>\n%%EOF\n"


@pytest.fixture
def person(client, user_token):
    resp = client.post(
        "/api/people",
        json={"firstName": "Ivan", "lastName": "Petrov", "status": "new"},
        headers=auth_header(user_token),
    )
    return resp.json()


def _upload(client, token, person_id, name="passport.pdf", content=PDF_BYTES, content_type="application/pdf"):
    return client.post(
        f"/api/documents/person/{person_id}",
        files={"document": (name, content, content_type)},
        headers=auth_header(token),
    )


def _stored_files(settings):
    return os.listdir(settings.UPLOAD_DIR)


def test_upload_list_download_delete(client, settings, user_token, person):
    resp = _upload(client, user_token, person["id"])
    assert resp.status_code == 201, resp.text
    doc = resp.json()
    assert doc["originalName"] == "passport.pdf"
    assert doc["mimeType"] == "application/pdf"
    assert doc["size"] == len(PDF_BYTES)
    assert doc["fileName"].endswith("-passport.pdf")
    assert _stored_files(settings) == [doc["fileName"]]

    listed = client.get(f"/api/documents/person/{person['id']}", headers=auth_header(user_token)).json()
    assert [d["id"] for d in listed] == [doc["id"]]

    download = client.get(f"/api/documents/{doc['id']}/download", headers=auth_header(user_token))
    assert download.status_code == 200
    assert download.content == PDF_BYTES
    assert download.headers["content-disposition"].startswith("attachment")
    assert "passport.pdf" in download.headers["content-disposition"]

    content = client.get(f"/api/documents/{doc['id']}/content", headers=auth_header(user_token))
    assert content.status_code == 200
    assert content.headers["content-disposition"].startswith("inline")

    assert client.delete(f"/api/documents/{doc['id']}", headers=auth_header(user_token)).status_code == 200
    assert _stored_files(settings) == []
    assert client.get(f"/api/documents/{doc['id']}/download", headers=auth_header(user_token)).status_code == 404
    assert client.delete(f"/api/documents/{doc['id']}", headers=auth_header(user_token)).status_code == 404


def test_oversized_upload_leaves_nothing_behind(client, settings, user_token, person):
    resp = _upload(client, user_token, person["id"], name="huge.pdf", content=b"x" * (15 * 1024 * 1024))

    assert resp.status_code == 400
    assert _stored_files(settings) == []
    listed = client.get(f"/api/documents/person/{person['id']}", headers=auth_header(user_token)).json()
    assert listed == []


@pytest.mark.parametrize("name,content_type", [
    ("script.exe", "application/octet-stream"),
    ("notes.txt", "text/plain"),
    ("photo.png", "application/pdf"),
])
def test_unsupported_types_are_rejected(client, settings, user_token, person, name, content_type):
    resp = _upload(client, user_token, person["id"], name=name, content_type=content_type)
    assert resp.status_code == 400
    assert _stored_files(settings) == []


def test_upload_for_unknown_person(client, settings, user_token):
    resp = _upload(client, user_token, "missing")
    assert resp.status_code == 404
    assert _stored_files(settings) == []


def test_upload_without_file(client, user_token, person):
    resp = client.post(f"/api/documents/person/{person['id']}", headers=auth_header(user_token))
    assert resp.status_code == 400


def test_deleting_person_removes_documents(client, settings, user_token, person):
    for i in range(3):
        assert _upload(client, user_token, person["id"], name=f"page{i}.png", content=b"\x89PNG", content_type="image/png").status_code == 201

    assert client.delete(f"/api/people/{person['id']}", headers=auth_header(user_token)).status_code == 200

    listed = client.get(f"/api/documents/person/{person['id']}", headers=auth_header(user_token)).json()
    assert listed == []
    assert _stored_files(settings) == []


def test_documents_require_authentication(client, person):
    assert client.get(f"/api/documents/person/{person['id']}").status_code == 401
