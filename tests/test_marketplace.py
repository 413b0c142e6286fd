import pytest

from app.main import app
from app.models.models import MarketplaceAgent, Skill, User
from app.utils.auth import auth_dependency
from app.utils.seed import seed_database


def publish(client, **overrides):
    payload = {
        "name": "مستشار الضرائب",
        "name_en": "Tax Advisor",
        "description": "Sales tax nexus checks",
        "category": "Finance",
        "system_prompt": "You are a US sales tax advisor.",
        "tools": ["web_search"],
        "tags": ["tax", "nexus"],
        "is_published": True,
    }
    payload.update(overrides)
    return client.post("/api/marketplace", json=payload)


@pytest.fixture
def other_user(db):
    other = User(id="user-2", email="rival@example.com")
    db.add(other)
    db.commit()
    db.refresh(other)
    db.expunge(other)
    return other


def act_as(user):
    app.dependency_overrides[auth_dependency] = lambda: user


def test_publish_and_read_publicly(client, anon_client):
    agent_id = publish(client).json()["id"]
    app.dependency_overrides.pop(auth_dependency)

    listing = anon_client.get("/api/marketplace").json()
    assert [a["name_en"] for a in listing] == ["Tax Advisor"]
    assert listing[0]["creator_id"] == "user-1"
    assert anon_client.get(f"/api/marketplace/{agent_id}").status_code == 200
    assert anon_client.get("/api/marketplace/999").status_code == 404
    assert anon_client.get("/api/marketplace/installed").status_code == 401


def test_unpublished_agents_are_hidden(client):
    publish(client, is_published=False)
    assert client.get("/api/marketplace").json() == []
    assert len(client.get("/api/marketplace/my-agents").json()) == 1


def test_search_category_and_featured(client):
    publish(client)
    publish(client, name="Brand voice", name_en="Brand Voice", description="Copywriting",
            category="Marketing", tags=["copy"], is_featured=True)

    assert [a["name_en"] for a in client.get("/api/marketplace?search=nexus").json()] == ["Tax Advisor"]
    assert [a["name_en"] for a in client.get("/api/marketplace?search=copy").json()] == ["Brand Voice"]
    assert [a["name_en"] for a in client.get("/api/marketplace?category=Marketing").json()] == ["Brand Voice"]
    assert [a["name_en"] for a in client.get("/api/marketplace/featured").json()] == ["Brand Voice"]


def test_only_creator_can_change_or_delete(client, other_user):
    agent_id = publish(client).json()["id"]

    act_as(other_user)
    assert client.put(f"/api/marketplace/{agent_id}", json={"name": "Stolen"}).status_code == 403
    assert client.delete(f"/api/marketplace/{agent_id}").status_code == 403

    act_as(User(id="user-1"))
    assert client.put(f"/api/marketplace/{agent_id}", json={"version": "1.1"}).json()["version"] == "1.1"
    assert client.delete(f"/api/marketplace/{agent_id}").json() == {"success": True}
    assert client.get(f"/api/marketplace/{agent_id}").status_code == 404


def test_install_once_creates_skill_and_counts_download(client, db):
    agent_id = publish(client).json()["id"]

    assert client.post(f"/api/marketplace/{agent_id}/install").json() == {"success": True}
    duplicate = client.post(f"/api/marketplace/{agent_id}/install")
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "Already installed"

    assert client.get(f"/api/marketplace/{agent_id}").json()["downloads_count"] == 1
    skill = db.query(Skill).one()
    assert skill.name == "مستشار الضرائب"
    assert skill.system_prompt == "You are a US sales tax advisor."
    assert skill.tools == ["web_search"]

    installed = client.get("/api/marketplace/installed").json()
    assert installed[0]["agent"]["id"] == agent_id

    client.delete(f"/api/marketplace/{agent_id}/install")
    assert client.get("/api/marketplace/installed").json() == []


def test_install_missing_agent_is_404(client):
    assert client.post("/api/marketplace/999/install").status_code == 404


def test_rating_once_and_average(client, other_user):
    agent_id = publish(client).json()["id"]

    assert client.post(f"/api/marketplace/{agent_id}/rate", json={"rating": 5, "review": "Spot on"}).status_code == 200
    assert client.post(f"/api/marketplace/{agent_id}/rate", json={"rating": 1}).status_code == 400

    act_as(other_user)
    client.post(f"/api/marketplace/{agent_id}/rate", json={"rating": 2})

    agent = client.get(f"/api/marketplace/{agent_id}").json()
    assert agent["ratings_count"] == 2
    assert agent["rating_avg"] == pytest.approx(3.5)
    assert len(client.get(f"/api/marketplace/{agent_id}/ratings").json()) == 2


@pytest.mark.parametrize("rating", [0, 6])
def test_rating_out_of_range(client, rating):
    agent_id = publish(client).json()["id"]
    response = client.post(f"/api/marketplace/{agent_id}/rate", json={"rating": rating})
    assert response.status_code == 400
    assert response.json()["field"] == "rating"


def test_sort_by_rating_and_newest(client, db):
    first = publish(client, name="First").json()["id"]
    second = publish(client, name="Second").json()["id"]
    db.get(MarketplaceAgent, first).rating_avg = 4.5
    db.get(MarketplaceAgent, second).downloads_count = 10
    db.commit()

    assert [a["id"] for a in client.get("/api/marketplace").json()] == [second, first]
    assert [a["id"] for a in client.get("/api/marketplace?sort=rating").json()] == [first, second]
    assert [a["id"] for a in client.get("/api/marketplace?sort=newest").json()] == [second, first]


def test_categories_are_public(anon_client, db):
    seed_database(db)

    categories = anon_client.get("/api/marketplace/categories").json()

    assert [c["name_en"] for c in categories] == ["Business", "Legal", "Marketing", "Finance", "Technology"]
