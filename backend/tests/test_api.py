import uuid
from unittest.mock import AsyncMock, MagicMock

from zalna.models.enums import HallStatus
from zalna.services.media_service import media_service
from zalna.services.supabase_client import AuthSession, IdentityProviderError, IdentityUser, supabase_client

from factories import add_priced_product, make_active_hall, make_hall


class TestShell:
    async def test_health(self, client):
        resp = await client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "service": "zalna"}

    async def test_missing_token(self, client):
        resp = await client.get("/api/admin/halls")
        assert resp.status_code == 401

    async def test_malformed_token(self, client):
        resp = await client.get("/api/auth/me", headers={"Authorization": "Token abc"})
        assert resp.status_code == 401


class TestAuth:
    async def test_bearer_token_provisions_user(self, client, monkeypatch):
        identity = IdentityUser(id=str(uuid.uuid4()), email="new@example.com", user_metadata={"name": "Nia"})
        monkeypatch.setattr(supabase_client, "verify_access_token", AsyncMock(return_value=identity))

        resp = await client.get("/api/auth/me", headers={"Authorization": "Bearer good"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["id"] == identity.id
        assert body["first_name"] == "Nia"
        assert body["role"] == "CLIENT"

    async def test_rejected_token(self, client, monkeypatch):
        monkeypatch.setattr(
            supabase_client, "verify_access_token", AsyncMock(side_effect=IdentityProviderError("Invalid or expired token"))
        )
        resp = await client.get("/api/auth/me", headers={"Authorization": "Bearer bad"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid or expired token"

    async def test_email_login(self, client, monkeypatch):
        identity = IdentityUser(id=str(uuid.uuid4()), email="guest@example.com")
        session = AuthSession(
            access_token="access", refresh_token="refresh", expires_in=3600, expires_at=None,
            token_type="bearer", user=identity,
        )
        monkeypatch.setattr(supabase_client, "sign_in_with_password", AsyncMock(return_value=session))

        resp = await client.post("/api/auth/login/email", json={
            "email": "guest@example.com", "password": "pw", "avatar_url": "https://img.test/a.png",
        })

        assert resp.status_code == 200
        body = resp.json()
        assert body["session"]["access_token"] == "access"
        assert body["user"]["id"] == identity.id
        assert body["user"]["avatar_url"] == "https://img.test/a.png"

    async def test_email_login_refused(self, client, monkeypatch):
        monkeypatch.setattr(
            supabase_client, "sign_in_with_password", AsyncMock(side_effect=IdentityProviderError("Invalid email or password"))
        )
        resp = await client.post("/api/auth/login/email", json={"email": "guest@example.com", "password": "x"})
        assert resp.status_code == 401


class TestAdminHalls:
    async def test_create_and_fetch(self, client, admin_user, login_as):
        login_as(admin_user)

        resp = await client.post("/api/admin/halls", json={"name": "Salle Étoile", "city": "Kinshasa"})
        assert resp.status_code == 201
        hall = resp.json()
        assert hall["slug"] == "salle-etoile-kinshasa"
        assert hall["status"] == "DRAFT"

        fetched = await client.get(f"/api/admin/halls/{hall['id']}")
        assert fetched.json()["name"] == "Salle Étoile"

    async def test_client_is_forbidden(self, client, client_user, login_as):
        login_as(client_user)
        resp = await client.post("/api/admin/halls", json={"name": "Nope"})
        assert resp.status_code == 403

    async def test_invalid_body_is_400(self, client, admin_user, login_as):
        login_as(admin_user)
        resp = await client.post("/api/admin/halls", json={"name": "", "capacity": -1})
        assert resp.status_code == 400
        fields = {tuple(err["loc"])[-1] for err in resp.json()["detail"]}
        assert {"name", "capacity"} <= fields

    async def test_unknown_hall_is_404(self, client, admin_user, login_as):
        login_as(admin_user)
        resp = await client.get(f"/api/admin/halls/{uuid.uuid4()}")
        assert resp.status_code == 404
        assert resp.json() == {"detail": "Hall not found"}

    async def test_list_and_patch(self, client, db, admin_user, client_user, login_as):
        hall = await make_hall(db, name="Jardin")
        login_as(admin_user)

        listed = await client.get("/api/admin/halls", params={"city": "kinshasa"})
        assert listed.json()["total"] == 1

        resp = await client.patch(
            f"/api/admin/halls/{hall.id}",
            json={"status": "ACTIVE", "gerant_id": str(client_user.id)},
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "ACTIVE"
        assert resp.json()["gerant_id"] == str(client_user.id)


class TestHostHalls:
    async def test_owner_sees_only_own_halls(self, client, db, admin_user, client_user, login_as):
        mine = await make_hall(db, name="Mine", gerant_id=client_user.id)
        await make_hall(db, name="Theirs", gerant_id=admin_user.id)
        login_as(client_user)

        resp = await client.get("/api/host/halls")
        assert [h["id"] for h in resp.json()["data"]] == [str(mine.id)]

    async def test_foreign_hall_is_forbidden(self, client, db, admin_user, client_user, login_as):
        theirs = await make_hall(db, gerant_id=admin_user.id)
        login_as(client_user)

        assert (await client.get(f"/api/host/halls/{theirs.id}")).status_code == 403
        assert (await client.patch(f"/api/host/halls/{theirs.id}", json={"name": "Taken"})).status_code == 403

    async def test_owner_updates_hall(self, client, db, client_user, login_as):
        hall = await make_hall(db, gerant_id=client_user.id)
        login_as(client_user)

        resp = await client.patch(f"/api/host/halls/{hall.id}", json={"capacity": 250})
        assert resp.status_code == 200
        assert resp.json()["capacity"] == 250
        assert resp.json()["gerant_id"] == str(client_user.id)


class TestPricing:
    async def test_product_rate_and_addon(self, client, db, admin_user, login_as):
        hall = await make_hall(db)
        login_as(admin_user)
        base = f"/api/admin/halls/{hall.id}/pricing"

        product = (await client.post(f"{base}/products", json={"name": "Wedding", "category": "WEDDING"})).json()
        rate = await client.post(f"{base}/products/{product['id']}/rates", json={
            "label": "Weekend", "price": 1200.5, "billing_unit": "EVENT", "currency": "USD",
        })
        assert rate.status_code == 201
        assert rate.json()["price"] == 1200.5

        addon = await client.post(f"{base}/addons", json={
            "name": "Chairs", "pricing_model": "PER_PACK", "unit_price": 15, "pack_size": 10, "redevance_amount": 1.5,
        })
        assert addon.status_code == 201
        assert addon.json()["redevance_amount"] == 1.5

        rates = await client.get(f"{base}/products/{product['id']}/rates")
        assert [r["label"] for r in rates.json()] == ["Weekend"]

    async def test_product_of_another_hall_is_400(self, client, db, admin_user, login_as):
        hall = await make_hall(db, name="A")
        other = await make_hall(db, name="B")
        product, _ = await add_priced_product(db, other.id, 100)
        login_as(admin_user)

        resp = await client.get(f"/api/admin/halls/{hall.id}/pricing/products/{product.id}")
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Product does not belong to this hall"

    async def test_invalid_billing_unit_is_400(self, client, db, admin_user, login_as):
        hall = await make_hall(db)
        product, _ = await add_priced_product(db, hall.id, 100)
        login_as(admin_user)

        resp = await client.post(
            f"/api/admin/halls/{hall.id}/pricing/products/{product.id}/rates",
            json={"label": "x", "price": 10, "billing_unit": "WEEK"},
        )
        assert resp.status_code == 400

    async def test_blocked_dates(self, client, db, admin_user, login_as):
        hall = await make_hall(db)
        login_as(admin_user)
        base = f"/api/admin/halls/{hall.id}/pricing/blocked-dates"

        bad = await client.post(base, json={"start_date": "2026-05-10", "end_date": "2026-05-01"})
        assert bad.status_code == 400

        created = await client.post(base, json={"start_date": "2026-05-01", "reason": "Works"})
        assert created.status_code == 201
        assert created.json()["created_by_user_id"] == str(admin_user.id)

        listed = await client.get(base, params={"from_date": "2026-04-01", "to_date": "2026-05-31"})
        assert len(listed.json()) == 1

        deleted = await client.delete(f"{base}/{created.json()['id']}")
        assert deleted.status_code == 204
        assert (await client.get(base)).json() == []


class TestPublicHalls:
    async def test_search_and_detail(self, client, db):
        hall = await make_active_hall(db, name="Salle Bleue", capacity=200)
        await make_hall(db, name="Brouillon")
        await add_priced_product(db, hall.id, 300)

        resp = await client.get("/api/public/halls", params={"price_max": 500, "sort_by": "price_asc"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["total"] == 1
        card = body["data"][0]
        assert card["slug"] == "salle-bleue-kinshasa"
        assert card["starting_from_price"] == 300
        assert card["starting_from_currency"] == "USD"

        detail = await client.get("/api/public/halls/salle-bleue-kinshasa")
        assert detail.status_code == 200
        assert detail.json()["products"][0]["rates"][0]["price"] == 300

    async def test_unknown_sort_and_oversized_limit_are_tolerated(self, client, db):
        await make_active_hall(db)
        resp = await client.get("/api/public/halls", params={"sort_by": "cheapest", "limit": 500, "page": 0})
        assert resp.status_code == 200
        assert resp.json()["limit"] == 50
        assert resp.json()["page"] == 1

    async def test_date_filter(self, client, db, admin_user, login_as):
        hall = await make_active_hall(db)
        login_as(admin_user)
        await client.post(
            f"/api/admin/halls/{hall.id}/pricing/blocked-dates",
            json={"start_date": "2026-07-01", "end_date": "2026-07-02"},
        )

        blocked = await client.get("/api/public/halls", params={"date": "2026-07-02"})
        free = await client.get("/api/public/halls", params={"date": "2026-07-03"})
        assert blocked.json()["total"] == 0
        assert free.json()["total"] == 1

    async def test_draft_detail_is_404(self, client, db):
        hall = await make_hall(db, status=HallStatus.DRAFT)
        resp = await client.get(f"/api/public/halls/{hall.slug}")
        assert resp.status_code == 404


class TestMedia:
    async def test_upload_then_list(self, client, db, admin_user, login_as, monkeypatch):
        storage = MagicMock()
        storage.ensure_bucket = AsyncMock()
        storage.upload_object = AsyncMock(side_effect=lambda bucket, path, content, ctype: path)
        storage.public_url = MagicMock(side_effect=lambda bucket, path: f"https://cdn.test/{bucket}/{path}")
        monkeypatch.setattr(media_service, "storage", storage)

        hall = await make_active_hall(db)
        login_as(admin_user)

        resp = await client.post(
            f"/api/admin/halls/{hall.id}/media",
            files=[
                ("file", ("front.jpg", b"one", "image/jpeg")),
                ("file", ("side.png", b"two", "image/png")),
            ],
            data={"tag_name": "HERO", "is_primary": "true", "sort_order": "1"},
        )

        assert resp.status_code == 201
        body = resp.json()
        assert len(body["media"]) == 2
        assert [t["is_primary"] for t in body["tags"]] == [True, False]

        public = await client.get(f"/api/public/halls/{hall.id}/media", params={"tag_name": "hero"})
        assert len(public.json()) == 2

        detail = await client.get(f"/api/public/halls/{hall.slug}")
        assert detail.json()["hero_image_url"] == body["media"][0]["file_url"]

    async def test_non_image_rejected(self, client, db, admin_user, login_as):
        hall = await make_hall(db)
        login_as(admin_user)

        resp = await client.post(
            f"/api/admin/halls/{hall.id}/media",
            files=[("file", ("notes.txt", b"hello", "text/plain"))],
        )
        assert resp.status_code == 400


class TestHostApplications:
    async def test_apply_and_approve(self, client, db, admin_user, client_user, login_as):
        login_as(client_user)
        resp = await client.post("/api/public/host-applications", json={
            "hall_name": "Salle Horizon",
            "city": "Goma",
            "contact_name": "Amani",
            "contact_email": "Amani@Example.com",
        })
        assert resp.status_code == 201
        application = resp.json()
        assert application["status"] == "NEW"
        assert application["applicant_user_id"] == str(client_user.id)
        assert application["contact_email"] == "amani@example.com"

        login_as(admin_user)
        listed = await client.get("/api/admin/host-applications", params={"search": "horizon"})
        assert listed.json()["total"] == 1

        approved = await client.patch(
            f"/api/admin/host-applications/{application['id']}/status",
            json={"status": "APPROVED", "admin_notes": "Visited"},
        )
        assert approved.status_code == 200
        assert approved.json()["reviewed_by_user_id"] == str(admin_user.id)
        assert approved.json()["reviewed_at"] is not None

        login_as(client_user)
        halls = await client.get("/api/host/halls")
        assert [h["name"] for h in halls.json()["data"]] == ["Salle Horizon"]
        assert halls.json()["data"][0]["status"] == "DRAFT"

    async def test_invalid_email_is_400(self, client, client_user, login_as):
        login_as(client_user)
        resp = await client.post("/api/public/host-applications", json={
            "hall_name": "X", "contact_name": "Y", "contact_email": "not-an-email",
        })
        assert resp.status_code == 400

    async def test_unknown_status_is_400(self, client, admin_user, login_as):
        login_as(admin_user)
        resp = await client.patch(
            f"/api/admin/host-applications/{uuid.uuid4()}/status", json={"status": "MAYBE"}
        )
        assert resp.status_code == 400
