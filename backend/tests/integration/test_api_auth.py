"""Registration, login and current user endpoints."""


class TestAuthApi:

    async def test_register_and_me(self, client, role_ids):
        response = await client.post("/auth/register", json={
            "email": "cfo@acme-consulting.com",
            "password": "secret",
            "full_name": "Chief Finance",
            "role_ids": [role_ids["cfo"]],
        })
        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["roles"] == ["cfo"]
        assert body["user"]["can_view_financials"] is True

        me = await client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.status_code == 200
        assert me.json()["email"] == "cfo@acme-consulting.com"

    async def test_register_duplicate_email(self, client):
        payload = {"email": "am@acme-consulting.com", "password": "secret", "full_name": "Account Manager"}
        assert (await client.post("/auth/register", json=payload)).status_code == 200
        response = await client.post("/auth/register", json=payload)
        assert response.status_code == 400
        assert response.json()["detail"] == "Email already registered"

    async def test_login(self, client, role_ids):
        await client.post("/auth/register", json={
            "email": "viewer@acme-consulting.com",
            "password": "secret",
            "full_name": "Viewer",
            "role_ids": [role_ids["viewer"]],
        })
        ok = await client.post("/auth/login", json={"email": "viewer@acme-consulting.com", "password": "secret"})
        assert ok.status_code == 200
        assert ok.json()["user"]["can_view_financials"] is False

        bad = await client.post("/auth/login", json={"email": "viewer@acme-consulting.com", "password": "wrong"})
        assert bad.status_code == 401

    async def test_me_requires_token(self, client):
        assert (await client.get("/auth/me")).status_code == 401
        response = await client.get("/auth/me", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401

    async def test_health(self, client):
        response = await client.get("/health")
        assert response.json() == {"status": "ok"}
