def test_signup_returns_public_projection(client):
    response = client.post("/api/auth/signup", json={"email": "a@x.com", "password": "password1"})

    assert response.status_code == 200
    body = response.json()
    assert body["email"] == "a@x.com"
    assert body["id"]
    assert body["created_at"]
    assert "password" not in body


def test_signup_duplicate_email_is_rejected(client):
    first = client.post("/api/auth/signup", json={"email": "a@x.com", "password": "password1"})
    second = client.post("/api/auth/signup", json={"email": "a@x.com", "password": "password2"})

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json()["errorCode"] == "DUPLICATE_EMAIL"


def test_signup_rejects_short_password(client):
    response = client.post("/api/auth/signup", json={"email": "a@x.com", "password": "short"})

    assert response.status_code == 400
    assert response.json()["errorCode"] == "VALIDATION_ERROR"


def test_signup_rejects_malformed_email(client):
    response = client.post("/api/auth/signup", json={"email": "not-an-email", "password": "password1"})

    assert response.status_code == 400


def test_signin_returns_user_and_token(client):
    client.post("/api/auth/signup", json={"email": "a@x.com", "password": "password1"})

    response = client.post("/api/auth/signin", json={"email": "a@x.com", "password": "password1"})

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["email"] == "a@x.com"
    assert body["token"].count(".") == 2


def test_signin_failures_are_indistinguishable(client):
    client.post("/api/auth/signup", json={"email": "a@x.com", "password": "password1"})

    wrong_password = client.post("/api/auth/signin", json={"email": "a@x.com", "password": "password2"})
    unknown_email = client.post("/api/auth/signin", json={"email": "b@x.com", "password": "password1"})

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()


def test_password_with_angle_brackets_round_trips(client):
    # Brackets are escaped the same way on signup and signin
    password = "<secret>pass"
    client.post("/api/auth/signup", json={"email": "a@x.com", "password": password})

    response = client.post("/api/auth/signin", json={"email": "a@x.com", "password": password})

    assert response.status_code == 200


def test_me_requires_token(client):
    response = client.get("/api/users/me")

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_me_rejects_garbage_token(client):
    response = client.get("/api/users/me", headers={"Authorization": "Bearer not.a.jwt"})

    assert response.status_code == 401


def test_me_returns_caller_profile(client, owner_headers):
    response = client.get("/api/users/me", headers=owner_headers)

    assert response.status_code == 200
    assert response.json()["email"] == "owner@academy.io"
