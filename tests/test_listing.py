"""Tests for the public, author and grouped post listings."""

from conftest import auth_header


def twenty_words():
    return " ".join(f"word{i}" for i in range(1, 21))


def test_categories_are_seeded(client):
    response = client.get("/api/blog/categories")

    assert response.status_code == 200
    categories = response.json()["data"]
    assert [(c["id"], c["name"]) for c in categories] == [
        (1, "Mental Health"),
        (2, "Heart Disease"),
        (3, "Covid19"),
        (4, "Immunization"),
    ]
    assert categories[1]["description"] == "Information about cardiovascular health"


def test_public_listing_excludes_drafts_and_truncates(client, register, create_post):
    doctor, token = register("drjohn")
    published = create_post(token, title="Published Post", summary=twenty_words())
    create_post(token, title="Draft Post", is_draft=True)

    response = client.get("/api/blog/posts")

    assert response.status_code == 200
    posts = response.json()["data"]
    assert [p["id"] for p in posts] == [published["id"]]
    assert posts[0]["summary"] == " ".join(f"word{i}" for i in range(1, 16)) + "..."
    assert posts[0]["author"] == {"id": doctor["id"], "full_name": doctor["full_name"]}
    assert posts[0]["category"] == {"id": 1, "name": "Mental Health"}


def test_public_listing_is_newest_first(client, register, create_post):
    _, token = register("drjohn")
    first = create_post(token, title="First Post")
    second = create_post(token, title="Second Post")
    third = create_post(token, title="Third Post")

    posts = client.get("/api/blog/posts").json()["data"]
    assert [p["id"] for p in posts] == [third["id"], second["id"], first["id"]]


def test_public_listing_is_repeatable(client, register, create_post):
    _, token = register("drjohn")
    create_post(token, title="First Post")
    create_post(token, title="Second Post", category_id=2)

    assert client.get("/api/blog/posts").json() == client.get("/api/blog/posts").json()


def test_public_listing_filters_by_category(client, register, create_post):
    _, token = register("drjohn")
    create_post(token, title="Mind Matters", category_id=1)
    heart = create_post(token, title="Heart Health", category_id=2)

    posts = client.get("/api/blog/posts", params={"category_id": 2}).json()["data"]
    assert [p["id"] for p in posts] == [heart["id"]]

    assert client.get("/api/blog/posts", params={"category_id": 4}).json()["data"] == []


def test_public_listing_rejects_non_integer_category(client):
    response = client.get("/api/blog/posts", params={"category_id": "heart"})
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_my_posts_includes_drafts_with_full_summary(client, register, create_post):
    _, token = register("drjohn")
    _, other_token = register("drjane")
    published = create_post(token, title="Published Post", summary=twenty_words())
    draft = create_post(token, title="Draft Post", is_draft=True)
    create_post(other_token, title="Not Mine At All")

    response = client.get("/api/blog/posts/my-posts", headers=auth_header(token))

    assert response.status_code == 200
    posts = response.json()["data"]
    assert [p["id"] for p in posts] == [draft["id"], published["id"]]
    assert posts[1]["summary"] == twenty_words()
    assert posts[0]["category"] == {"id": 1, "name": "Mental Health"}
    assert "author" not in posts[0]


def test_by_category_lists_every_category(client, register, create_post):
    doctor, token = register("drjohn")
    older = create_post(token, title="Older Heart Post", category_id=2, summary=twenty_words())
    newer = create_post(token, title="Newer Heart Post", category_id=2)
    create_post(token, title="Draft Heart Post", category_id=2, is_draft=True)

    response = client.get("/api/blog/posts/by-category")

    assert response.status_code == 200
    groups = {group["id"]: group for group in response.json()["data"]}
    assert set(groups) == {1, 2, 3, 4}
    assert groups[1]["posts"] == []
    assert groups[3]["posts"] == []
    assert groups[4]["posts"] == []
    assert groups[2]["name"] == "Heart Disease"
    assert groups[2]["description"] == "Information about cardiovascular health"

    heart_posts = groups[2]["posts"]
    assert [p["id"] for p in heart_posts] == [newer["id"], older["id"]]
    assert heart_posts[1]["summary"].endswith("word15...")
    assert heart_posts[0]["author"] == {"id": doctor["id"], "full_name": doctor["full_name"]}


def test_by_category_with_no_posts(client):
    groups = client.get("/api/blog/posts/by-category").json()["data"]
    assert len(groups) == 4
    assert all(group["posts"] == [] for group in groups)


def test_draft_isolation_across_views(client, register, create_post):
    _, author_token = register("drjohn")
    _, patient_token = register("patient1", role="patient")
    draft = create_post(author_token, title="Secret Draft", is_draft=True)

    assert client.get("/api/blog/posts").json()["data"] == []
    grouped = client.get("/api/blog/posts/by-category").json()["data"]
    assert all(group["posts"] == [] for group in grouped)

    mine = client.get("/api/blog/posts/my-posts", headers=auth_header(author_token)).json()["data"]
    assert [p["id"] for p in mine] == [draft["id"]]

    url = f"/api/blog/posts/{draft['id']}"
    assert client.get(url, headers=auth_header(patient_token)).status_code == 404
    assert client.get(url, headers=auth_header(author_token)).status_code == 200


def test_end_to_end_doctor_publishes_and_patient_reads(client):
    register = client.post("/api/auth/register", json={
        "full_name": "Dr. John Smith",
        "username": "drjohn",
        "email": "drjohn@clinic.org",
        "password": "password123",
        "role": "doctor",
    })
    assert register.status_code == 201
    doctor = register.json()["data"]["user"]

    login = client.post("/api/auth/login", json={"login": "drjohn", "password": "password123"})
    assert login.status_code == 200
    token = login.json()["data"]["token"]

    summary = " ".join(f"s{i}" for i in range(1, 21))
    content = " ".join(f"c{i}" for i in range(1, 61))
    created = client.post(
        "/api/blog/posts",
        data={
            "title": "Managing Hypertension",
            "summary": summary,
            "content": content,
            "category_id": "2",
            "is_draft": "false",
        },
        headers=auth_header(token),
    )
    assert created.status_code == 201
    post_id = created.json()["data"]["id"]

    posts = client.get("/api/blog/posts").json()["data"]
    listed = next(p for p in posts if p["id"] == post_id)
    assert listed["title"] == "Managing Hypertension"
    assert listed["summary"] == " ".join(f"s{i}" for i in range(1, 16)) + "..."
    assert listed["category"] == {"id": 2, "name": "Heart Disease"}
    assert listed["author"] == {"id": doctor["id"], "full_name": "Dr. John Smith"}
