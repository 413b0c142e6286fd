from app.models.models import Agent, MarketplaceCategory
from app.utils.seed import seed_database


def create_agent(client, **overrides):
    payload = {"name": "Contract reviewer", "role": "contract_analyzer", "description": "Reviews contracts"}
    payload.update(overrides)
    return client.post("/api/agents", json=payload)


def test_create_agent_exposes_role_label_and_icon(client):
    response = create_agent(client, config={"icon": "FileSearch", "nameEn": "Contract Analyzer"})

    assert response.status_code == 201
    agent = response.json()
    assert agent["role_label"] == "Contract Analyzer"
    assert agent["icon"] == "FileSearch"
    assert agent["is_active"] is True


def test_unknown_icon_falls_back_to_bot(client):
    agent = create_agent(client, config={"icon": "Rocket"}).json()
    assert agent["icon"] == "Bot"


def test_agent_role_is_a_closed_set(client):
    response = create_agent(client, role="astrologer")
    assert response.status_code == 400
    assert response.json()["field"] == "role"


def test_get_and_update_agent(client):
    agent_id = create_agent(client).json()["id"]

    response = client.put(f"/api/agents/{agent_id}", json={"is_active": False, "role": "data_analyst"})

    assert response.status_code == 200
    assert response.json()["is_active"] is False
    assert response.json()["role_label"] == "Data Analyst"
    assert client.get(f"/api/agents/{agent_id}").json()["name"] == "Contract reviewer"
    assert client.get("/api/agents/999").status_code == 404
    assert client.put("/api/agents/999", json={"name": "x"}).status_code == 404


def test_tasks_filter_by_agent_and_status(client):
    agent_id = create_agent(client).json()["id"]
    client.post("/api/tasks", json={"title": "Review NDA", "description": "Mutual NDA", "agentId": None})
    client.post("/api/tasks", json={"title": "Review lease", "description": "Office lease", "agent_id": agent_id})
    client.post("/api/tasks", json={"title": "Summarise", "description": "Board pack",
                                    "agent_id": agent_id, "status": "completed"})

    everything = client.get("/api/tasks").json()
    assert [t["title"] for t in everything] == ["Summarise", "Review lease", "Review NDA"]
    assert everything[-1]["status"] == "pending"
    assert everything[-1]["priority"] == "medium"

    for_agent = client.get(f"/api/tasks?agentId={agent_id}").json()
    assert len(for_agent) == 2
    completed = client.get(f"/api/tasks?agentId={agent_id}&status=completed").json()
    assert [t["title"] for t in completed] == ["Summarise"]


def test_task_requires_existing_agent(client):
    response = client.post("/api/tasks", json={"title": "t", "description": "d", "agent_id": 42})
    assert response.status_code == 400
    assert response.json()["message"] == "Agent does not exist"


def test_update_task(client):
    task = client.post("/api/tasks", json={"title": "Draft SOP", "description": "Onboarding"}).json()

    response = client.patch(f"/api/tasks/{task['id']}", json={"status": "in_progress", "priority": "high"})

    assert response.status_code == 200
    assert response.json()["status"] == "in_progress"
    assert response.json()["priority"] == "high"
    assert response.json()["updated_at"] >= task["updated_at"]
    assert client.patch("/api/tasks/999", json={"status": "failed"}).status_code == 404


def test_task_status_is_validated(client):
    response = client.post("/api/tasks", json={"title": "t", "description": "d", "status": "someday"})
    assert response.status_code == 400
    assert response.json()["field"] == "status"


def test_knowledge_docs(client):
    response = client.post("/api/knowledge", json={
        "title": "Delaware franchise tax", "content": "Due March 1st", "tags": ["tax", "delaware"],
    })
    assert response.status_code == 201
    assert response.json()["category"] == "general"

    docs = client.get("/api/knowledge").json()
    assert [d["title"] for d in docs] == ["Delaware franchise tax"]
    assert docs[0]["tags"] == ["tax", "delaware"]


def test_knowledge_requires_title(client):
    response = client.post("/api/knowledge", json={"content": "orphan"})
    assert response.status_code == 400
    assert response.json()["field"] == "title"


def test_seed_runs_once(db):
    seed_database(db)
    seed_database(db)

    assert db.query(Agent).count() == 6
    assert db.query(MarketplaceCategory).count() == 5


def test_unknown_route_uses_message_body(client):
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    assert response.json() == {"message": "Not Found"}
