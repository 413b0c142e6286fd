import os

from app.models.models import Conversation, ProjectFile


def create_project(client, **overrides):
    payload = {"name": "  Launch plan  ", "description": "US expansion"}
    payload.update(overrides)
    return client.post("/api/projects", json=payload)


def test_project_name_is_trimmed_and_required(client):
    response = create_project(client)
    assert response.status_code == 201
    assert response.json()["name"] == "Launch plan"

    response = create_project(client, name="   ")
    assert response.status_code == 400
    assert response.json()["field"] == "name"


def test_update_project(client):
    project_id = create_project(client).json()["id"]

    response = client.patch(f"/api/projects/{project_id}", json={"system_prompt": "Answer in Arabic."})

    assert response.json()["system_prompt"] == "Answer in Arabic."
    assert response.json()["name"] == "Launch plan"
    assert client.patch("/api/projects/999", json={"name": "x"}).status_code == 404


def test_upload_and_delete_project_file(client, storage):
    project_id = create_project(client).json()["id"]

    response = client.post(
        f"/api/projects/{project_id}/files",
        files={"file": ("articles.pdf", b"%PDF-1.4 test", "application/pdf")},
    )

    assert response.status_code == 201
    uploaded = response.json()
    assert uploaded["name"] == "articles.pdf"
    assert uploaded["type"] == "pdf"
    assert uploaded["size"] == len(b"%PDF-1.4 test")
    stored = os.path.join(storage.upload_dir, uploaded["path"])
    assert os.path.exists(stored)

    detail = client.get(f"/api/projects/{project_id}").json()
    assert [f["name"] for f in detail["files"]] == ["articles.pdf"]

    assert client.delete(f"/api/project-files/{uploaded['id']}").status_code == 204
    assert not os.path.exists(stored)
    assert client.delete(f"/api/project-files/{uploaded['id']}").status_code == 404


def test_upload_rejects_disallowed_extension(client):
    project_id = create_project(client).json()["id"]

    response = client.post(
        f"/api/projects/{project_id}/files",
        files={"file": ("payload.exe", b"MZ", "application/octet-stream")},
    )

    assert response.status_code == 400


def test_delete_project_removes_files_and_detaches_conversations(client, db):
    project_id = create_project(client).json()["id"]
    client.post(f"/api/projects/{project_id}/files", files={"file": ("notes.txt", b"hello", "text/plain")})
    conversation_id = client.post("/api/conversations", json={"project_id": project_id}).json()["id"]

    assert client.delete(f"/api/projects/{project_id}").status_code == 204

    db.expire_all()
    assert db.query(ProjectFile).count() == 0
    assert db.get(Conversation, conversation_id).project_id is None
    assert client.get(f"/api/projects/{project_id}").status_code == 404


def test_conversation_with_unknown_project_is_rejected(client):
    response = client.post("/api/conversations", json={"project_id": 404})
    assert response.status_code == 400


def test_chat_upload_returns_file_descriptors(client):
    response = client.post("/api/upload/chat", files=[
        ("files", ("shot.png", b"\x89PNG", "image/png")),
        ("files", ("data.csv", b"a,b\n1,2\n", "text/csv")),
    ])

    assert response.status_code == 200
    files = response.json()["files"]
    assert [f["type"] for f in files] == ["image", "spreadsheet"]
    assert files[0]["url"].startswith("chat/")
