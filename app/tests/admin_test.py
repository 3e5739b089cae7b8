def test_admin_requires_auth(client):
    response = client.get("/api/urls")
    assert response.status_code == 401


def test_admin_accepts_query_token(client, auth_token):
    response = client.get("/api/urls", params={"auth": auth_token})
    assert response.status_code == 200


def test_admin_accepts_raw_header_token(client, auth_token):
    response = client.get("/api/urls", headers={"Authorization": auth_token})
    assert response.status_code == 200


def test_create_url(client, auth_headers):
    response = client.post("/api/urls", json={"url": "https://example.com/test"}, headers=auth_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["url"] == "https://example.com/test"
    assert len(data["code"]) == 10
    assert data["short_url"].endswith(data["code"])
    assert data["clicks"] == 0
    assert "created_at" in data


def test_create_url_with_custom_code(client, auth_headers):
    response = client.post("/api/urls", json={"url": "https://example.com/custom", "code": "mybrand"}, headers=auth_headers)
    assert response.status_code == 201
    assert response.json()["code"] == "mybrand"


def test_create_url_custom_code_collision(client, auth_headers):
    """Test that duplicate custom code returns error."""
    client.post("/api/urls", json={"url": "https://example.com/first", "code": "taken"}, headers=auth_headers)

    response = client.post("/api/urls", json={"url": "https://example.com/second", "code": "taken"}, headers=auth_headers)
    assert response.status_code == 409
    assert response.json()["error"] == "CodeConflict"
    assert "already exists" in response.json()["detail"].lower()


def test_create_url_reserved_code(client, auth_headers):
    response = client.post("/api/urls", json={"url": "https://example.com", "code": "admin"}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "ReservedCode"


def test_create_url_missing_url(client, auth_headers):
    response = client.post("/api/urls", json={"code": "abc"}, headers=auth_headers)
    assert response.status_code == 422


def test_get_url_not_found(client, auth_headers):
    """Test getting stats for non-existent URL."""
    response = client.get("/api/urls/nonexistent", headers=auth_headers)
    assert response.status_code == 404


def test_list_urls_empty(client, auth_headers):
    """Test listing URLs when the store is empty."""
    response = client.get("/api/urls", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 0
    assert data["urls"] == []


def test_list_urls_with_data(client, auth_headers, sample_urls):
    for url in sample_urls:
        client.post("/api/urls", json={"url": url}, headers=auth_headers)

    response = client.get("/api/urls", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == len(sample_urls)
    assert [u["url"] for u in data["urls"]] == sample_urls
    assert all(u["short_url"].startswith("https://sho.rt/") for u in data["urls"])


def test_update_url_and_rename(client, auth_headers):
    created = client.post("/api/urls", json={"url": "https://example.org"}, headers=auth_headers).json()

    response = client.patch(
        f"/api/urls/{created['code']}",
        json={"url": "https://example.org/v2", "code": "MYLINK"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["code"] == "MYLINK"
    assert data["url"] == "https://example.org/v2"
    assert data["updated_at"] is not None

    assert client.get("/MYLINK", follow_redirects=False).headers["location"] == "https://example.org/v2"
    assert client.get(f"/{created['code']}", follow_redirects=False).status_code == 404


def test_update_rename_conflict(client, auth_headers):
    client.post("/api/urls", json={"url": "https://example.com/a", "code": "first"}, headers=auth_headers)
    client.post("/api/urls", json={"url": "https://example.com/b", "code": "second"}, headers=auth_headers)

    response = client.patch("/api/urls/first", json={"code": "second"}, headers=auth_headers)
    assert response.status_code == 409


def test_update_not_found(client, auth_headers):
    response = client.patch("/api/urls/missing", json={"url": "https://example.com"}, headers=auth_headers)
    assert response.status_code == 404


def test_delete_url(client, auth_headers):
    client.post("/api/urls", json={"url": "https://example.com/gone", "code": "gone"}, headers=auth_headers)

    response = client.delete("/api/urls/gone", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["url"] == "https://example.com/gone"

    assert client.get("/gone", follow_redirects=False).status_code == 404
    assert client.delete("/api/urls/gone", headers=auth_headers).status_code == 404


def test_storage_failure_is_reported(client, auth_headers, settings):
    with open(settings.STORAGE_PATH, "w") as f:
        f.write("{corrupt")

    response = client.get("/api/urls", headers=auth_headers)
    assert response.status_code == 500
    assert response.json()["error"] == "StorageFailure"
