from app.models.models import OutputTemplate


def test_skill_crud(client):
    response = client.post("/api/skills", json={
        "name": "Legal drafting", "system_prompt": "Draft in plain English.", "tools": ["search"],
    })
    assert response.status_code == 201
    skill = response.json()
    assert skill["user_id"] == "user-1"
    assert skill["is_active"] is True

    updated = client.put(f"/api/skills/{skill['id']}", json={"is_default": True}).json()
    assert updated["is_default"] is True
    assert updated["tools"] == ["search"]

    assert [s["name"] for s in client.get("/api/skills").json()] == ["Legal drafting"]
    assert client.delete(f"/api/skills/{skill['id']}").status_code == 204
    assert client.get(f"/api/skills/{skill['id']}").status_code == 404


def test_skill_requires_name(client):
    response = client.post("/api/skills", json={"description": "nameless"})
    assert response.status_code == 400
    assert response.json()["field"] == "name"


def test_output_template_crud(client):
    template = client.post("/api/output-templates", json={
        "name": "Invoice", "system_prompt": "Format as an invoice.", "css": "table { width: 100% }",
    }).json()
    assert template["is_builtin"] is False

    renamed = client.put(f"/api/output-templates/{template['id']}", json={"name": "Tax invoice"}).json()
    assert renamed["name"] == "Tax invoice"
    assert renamed["css"] == "table { width: 100% }"

    assert client.delete(f"/api/output-templates/{template['id']}").status_code == 204
    assert client.get("/api/output-templates").json() == []


def test_builtin_template_cannot_be_deleted(client, db):
    builtin = OutputTemplate(name="Report", is_builtin=True)
    db.add(builtin)
    db.commit()

    response = client.delete(f"/api/output-templates/{builtin.id}")

    assert response.status_code == 403
