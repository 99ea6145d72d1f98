def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["checks"] == {"database": True}


def test_metrics_exposition(client, student):
    client.post("/api/auth/login", json={"email": student.email, "password": "wrong-password"})
    response = client.get("/metrics")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "login_attempts_total" in response.text


def test_root(client):
    assert "version" in client.get("/").json()
