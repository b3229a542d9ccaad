"""
End-to-end tests through the HTTP API.
"""

import pytest
import uuid
from datetime import date, timedelta

from httpx import AsyncClient

from estate_api.models.user import User, UserRole
from estate_api.models.property import Property, PropertyStatus
from estate_api.models.schedule import ScheduleStatus
from estate_api.repositories.property import PropertyRepository
from estate_api.repositories.schedule import ScheduleRepository
from estate_api.repositories.user import UserRepository
from tests.conftest import (
    PropertyFactory,
    ScheduleFactory,
    TEST_PASSWORD,
    auth_headers,
    make_image_bytes
)

pytestmark = pytest.mark.integration


class TestAuthEndpoints:

    @pytest.mark.asyncio
    async def test_register_twice(self, async_client: AsyncClient, user_repository: UserRepository):
        body = {"email": "alice@example.com", "password": "secret1", "full_name": "Alice", "role": "buyer"}

        first = await async_client.post("/api/auth/register", json=body)
        second = await async_client.post("/api/auth/register", json=body)

        assert first.status_code == 201
        data = first.json()
        assert data["token"]
        assert data["token_type"] == "bearer"
        assert data["user"]["email"] == "alice@example.com"
        assert data["user"]["role"] == "user"
        assert "password_hash" not in data["user"]

        assert second.status_code == 400
        assert second.json()["error"]["message"] == "Email already registered"
        assert second.json()["error"]["code"] == "DUPLICATE_EMAIL"
        assert len(await user_repository.list_users()) == 1

    @pytest.mark.asyncio
    async def test_register_admin_rejected(self, async_client: AsyncClient):
        response = await async_client.post("/api/auth/register", json={
            "email": "root@example.com", "password": "secret1", "full_name": "Root", "role": "admin"
        })

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_register_as_seller_yields_user(self, async_client: AsyncClient):
        response = await async_client.post("/api/auth/register", json={
            "email": "bob@example.com", "password": "secret1", "full_name": "Bob", "role": "seller"
        })

        assert response.status_code == 201
        assert response.json()["user"]["role"] == "user"

        profile = await async_client.get("/api/auth/profile", headers={
            "Authorization": f"Bearer {response.json()['token']}"
        })
        assert profile.json()["role"] == "user"

    @pytest.mark.asyncio
    async def test_register_schema_errors(self, async_client: AsyncClient):
        response = await async_client.post("/api/auth/register", json={
            "email": "not-an-email", "password": "123", "full_name": "X"
        })

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        fields = {detail["field"] for detail in error["details"]}
        assert "body -> email" in fields
        assert "body -> password" in fields

    @pytest.mark.asyncio
    async def test_login_and_profile(self, async_client: AsyncClient, test_agent: User):
        login = await async_client.post("/api/auth/login", json={
            "email": "Agent@Example.com", "password": TEST_PASSWORD
        })
        assert login.status_code == 200
        token = login.json()["token"]

        profile = await async_client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})

        assert profile.status_code == 200
        assert profile.json()["id"] == str(test_agent.id)
        assert profile.json()["role"] == "agent"

    @pytest.mark.asyncio
    async def test_login_errors_identical(self, async_client: AsyncClient, test_agent: User):
        unknown = await async_client.post("/api/auth/login", json={
            "email": "ghost@example.com", "password": TEST_PASSWORD
        })
        wrong = await async_client.post("/api/auth/login", json={
            "email": test_agent.email, "password": "wrongpassword"
        })

        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json()["error"]["message"] == wrong.json()["error"]["message"]
        assert unknown.json()["error"]["code"] == wrong.json()["error"]["code"]

    @pytest.mark.asyncio
    async def test_profile_requires_token(self, async_client: AsyncClient):
        missing = await async_client.get("/api/auth/profile")
        garbage = await async_client.get("/api/auth/profile", headers={"Authorization": "Bearer nope"})

        assert missing.status_code == 401
        assert garbage.status_code == 401
        assert missing.headers["WWW-Authenticate"] == "Bearer"


class TestPropertyEndpoints:

    @pytest.mark.asyncio
    async def test_create_and_search_austin_condo(self, async_client: AsyncClient, test_agent: User):
        created = await async_client.post(
            "/api/properties",
            json=PropertyFactory.create_payload(),
            headers=auth_headers(test_agent)
        )
        assert created.status_code == 201
        property_id = created.json()["property"]["id"]

        response = await async_client.get("/api/properties", params={"city": "austin", "bedrooms": 2})

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        found = data["properties"][0]
        assert found["id"] == property_id
        assert found["city"] == "Austin"
        assert found["agent"]["email"] == test_agent.email
        assert found["is_public"] is True

    @pytest.mark.asyncio
    async def test_city_wildcard_matches_nothing(self, async_client: AsyncClient, test_property: Property):
        response = await async_client.get("/api/properties", params={"city": "%"})

        assert response.status_code == 200
        assert response.json()["total"] == 0

    @pytest.mark.asyncio
    async def test_create_requires_agent_role(self, async_client: AsyncClient, test_user: User):
        response = await async_client.post(
            "/api/properties",
            json=PropertyFactory.create_payload(),
            headers=auth_headers(test_user)
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_create_requires_authentication(self, async_client: AsyncClient):
        response = await async_client.post("/api/properties", json=PropertyFactory.create_payload())

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_rejects_non_positive_price(self, async_client: AsyncClient, test_agent: User):
        response = await async_client.post(
            "/api/properties",
            json=PropertyFactory.create_payload(price=0),
            headers=auth_headers(test_agent)
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_upload_then_create_with_images(self, async_client: AsyncClient, test_agent: User):
        files = [
            ("images", (f"photo{i}.jpg", make_image_bytes(color=(i * 40, 90, 120)), "image/jpeg"))
            for i in range(3)
        ]
        upload = await async_client.post("/api/upload/images", files=files, headers=auth_headers(test_agent))
        assert upload.status_code == 200
        urls = upload.json()["images"]
        assert len(urls) == 3

        created = await async_client.post(
            "/api/properties",
            json=PropertyFactory.create_payload(images=urls),
            headers=auth_headers(test_agent)
        )
        assert created.status_code == 201

        detail = await async_client.get(f"/api/properties/{created.json()['property']['id']}")
        images = detail.json()["images"]

        assert [img["image_url"] for img in images] == urls
        assert [img["is_primary"] for img in images] == [True, False, False]
        assert detail.json()["primary_image"]["image_url"] == urls[0]

        served = await async_client.get(urls[0])
        assert served.status_code == 200

    @pytest.mark.asyncio
    async def test_upload_requires_authentication(self, async_client: AsyncClient):
        files = [("images", ("photo.jpg", make_image_bytes(), "image/jpeg"))]

        response = await async_client.post("/api/upload/images", files=files)

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_upload_rejects_non_image(self, async_client: AsyncClient, test_agent: User):
        files = [("images", ("notes.jpg", b"plain text", "image/jpeg"))]

        response = await async_client.post("/api/upload/images", files=files, headers=auth_headers(test_agent))

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_non_owner_update_forbidden_and_unchanged(
        self,
        async_client: AsyncClient,
        property_repository: PropertyRepository,
        test_property: Property,
        other_agent: User
    ):
        response = await async_client.put(
            f"/api/properties/{test_property.id}",
            json={"title": "Hijacked", "price": 1},
            headers=auth_headers(other_agent)
        )

        assert response.status_code == 403
        stored = await property_repository.get_by_id(test_property.id)
        assert stored.title == "Test Property"
        assert stored.price == test_property.price

    @pytest.mark.asyncio
    async def test_owner_update_with_image_edits(
        self,
        async_client: AsyncClient,
        test_property: Property,
        test_agent: User
    ):
        primary = test_property.primary_image

        response = await async_client.put(
            f"/api/properties/{test_property.id}",
            json={
                "title": "Refreshed Listing",
                "featured": True,
                "images": ["/uploads/properties/third.jpg"],
                "remove_image_ids": [str(primary.id)]
            },
            headers=auth_headers(test_agent)
        )

        assert response.status_code == 200
        prop = response.json()["property"]
        assert prop["title"] == "Refreshed Listing"
        assert prop["featured"] is True
        assert [img["image_url"] for img in prop["images"]] == [
            "/uploads/properties/second.jpg",
            "/uploads/properties/third.jpg"
        ]
        assert prop["primary_image"]["image_url"] == "/uploads/properties/second.jpg"

    @pytest.mark.asyncio
    async def test_update_rejects_null_required_field(
        self,
        async_client: AsyncClient,
        test_property: Property,
        test_agent: User
    ):
        response = await async_client.put(
            f"/api/properties/{test_property.id}",
            json={"title": None},
            headers=auth_headers(test_agent)
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_get_missing_property(self, async_client: AsyncClient):
        response = await async_client.get(f"/api/properties/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_sold_and_rented_hidden_from_listing(
        self,
        async_client: AsyncClient,
        property_repository: PropertyRepository,
        test_agent: User,
        test_admin: User
    ):
        await PropertyFactory.create_property(property_repository, agent_id=test_agent.id, title="Open")
        sold = await PropertyFactory.create_property(
            property_repository, agent_id=test_agent.id, title="Sold", status=PropertyStatus.SOLD
        )
        await PropertyFactory.create_property(
            property_repository, agent_id=test_agent.id, title="Rented", status=PropertyStatus.RENTED
        )

        public = await async_client.get("/api/properties")
        admin_view = await async_client.get("/api/properties", headers=auth_headers(test_admin))
        own = await async_client.get(
            "/api/properties", params={"agent_id": str(test_agent.id)}, headers=auth_headers(test_agent)
        )
        sold_detail = await async_client.get(f"/api/properties/{sold.id}")

        assert [p["title"] for p in public.json()["properties"]] == ["Open"]
        assert admin_view.json()["total"] == 3
        assert own.json()["total"] == 3
        assert sold_detail.status_code == 200
        assert sold_detail.json()["is_public"] is False

    @pytest.mark.asyncio
    async def test_list_filters_and_pagination(
        self,
        async_client: AsyncClient,
        property_repository: PropertyRepository,
        test_agent: User
    ):
        for i in range(5):
            await PropertyFactory.create_property(
                property_repository, agent_id=test_agent.id, title=f"Listing {i}", price=1000 * (i + 1)
            )

        page = await async_client.get("/api/properties", params={"page": 2, "page_size": 2})
        priced = await async_client.get("/api/properties", params={"min_price": 2000, "max_price": 4000})
        inverted = await async_client.get("/api/properties", params={"min_price": 5000, "max_price": 10})
        bad_type = await async_client.get("/api/properties", params={"property_type": "castle"})

        assert page.json()["total"] == 5
        assert page.json()["total_pages"] == 3
        assert [p["title"] for p in page.json()["properties"]] == ["Listing 2", "Listing 1"]
        assert priced.json()["total"] == 3
        assert inverted.status_code == 400
        assert bad_type.status_code == 400

    @pytest.mark.asyncio
    async def test_status_patch(
        self,
        async_client: AsyncClient,
        test_property: Property,
        test_agent: User
    ):
        invalid = await async_client.patch(
            f"/api/properties/{test_property.id}/status",
            json={"status": "demolished"},
            headers=auth_headers(test_agent)
        )
        sold = await async_client.patch(
            f"/api/properties/{test_property.id}/status",
            json={"status": "sold"},
            headers=auth_headers(test_agent)
        )
        listing = await async_client.get("/api/properties")

        assert invalid.status_code == 400
        assert sold.status_code == 200
        assert sold.json()["property"]["status"] == "sold"
        assert listing.json()["total"] == 0

    @pytest.mark.asyncio
    async def test_delete_property(
        self,
        async_client: AsyncClient,
        schedule_repository: ScheduleRepository,
        test_property: Property,
        test_agent: User,
        other_agent: User,
        test_user: User
    ):
        schedule = await ScheduleFactory.create_schedule(schedule_repository, test_property, test_user)

        forbidden = await async_client.delete(
            f"/api/properties/{test_property.id}", headers=auth_headers(other_agent)
        )
        deleted = await async_client.delete(
            f"/api/properties/{test_property.id}", headers=auth_headers(test_agent)
        )
        missing = await async_client.get(f"/api/properties/{test_property.id}")

        assert forbidden.status_code == 403
        assert deleted.status_code == 204
        assert missing.status_code == 404
        assert await schedule_repository.get_by_id(schedule.id) is None


class TestScheduleEndpoints:

    def _body(self, property_id, **overrides) -> dict:
        body = {
            "property_id": str(property_id),
            "visit_date": (date.today() + timedelta(days=5)).isoformat(),
            "visit_time": "14:30",
            "message": "Can I bring my dog?"
        }
        body.update(overrides)
        return body

    @pytest.mark.asyncio
    async def test_schedule_on_agentless_property(
        self,
        async_client: AsyncClient,
        agentless_property: Property,
        test_user: User
    ):
        response = await async_client.post(
            "/api/schedules", json=self._body(agentless_property.id), headers=auth_headers(test_user)
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Property has no assigned agent"

    @pytest.mark.asyncio
    async def test_schedule_missing_fields(self, async_client: AsyncClient, test_user: User):
        response = await async_client.post(
            "/api/schedules", json={"message": "hello"}, headers=auth_headers(test_user)
        )

        assert response.status_code == 400
        assert len(response.json()["error"]["details"]) == 3

    @pytest.mark.asyncio
    async def test_full_viewing_workflow(
        self,
        async_client: AsyncClient,
        test_property: Property,
        test_user: User,
        test_agent: User,
        test_admin: User
    ):
        created = await async_client.post(
            "/api/schedules", json=self._body(test_property.id), headers=auth_headers(test_user)
        )
        assert created.status_code == 201
        schedule = created.json()["schedule"]
        assert schedule["status"] == "pending"
        assert schedule["agent_id"] == str(test_agent.id)
        assert schedule["property_title"] == "Test Property"

        mine = await async_client.get("/api/schedules/user", headers=auth_headers(test_user))
        assert [s["id"] for s in mine.json()["schedules"]] == [schedule["id"]]

        agent_view = await async_client.get("/api/schedules/agent", headers=auth_headers(test_agent))
        assert agent_view.json()["total"] == 1
        assert agent_view.json()["schedules"][0]["user_email"] == test_user.email

        confirmed = await async_client.patch(
            f"/api/schedules/{schedule['id']}/status",
            json={"status": "confirmed", "admin_notes": "Lobby at 14:25"},
            headers=auth_headers(test_agent)
        )
        assert confirmed.status_code == 200
        assert confirmed.json()["schedule"]["status"] == "confirmed"

        all_view = await async_client.get("/api/schedules/all", headers=auth_headers(test_admin))
        assert all_view.json()["schedules"][0]["admin_notes"] == "Lobby at 14:25"

    @pytest.mark.asyncio
    async def test_invalid_status_rejected_and_unchanged(
        self,
        async_client: AsyncClient,
        schedule_repository: ScheduleRepository,
        test_property: Property,
        test_user: User,
        test_admin: User
    ):
        schedule = await ScheduleFactory.create_schedule(schedule_repository, test_property, test_user)

        response = await async_client.patch(
            f"/api/schedules/{schedule.id}/status",
            json={"status": "approved"},
            headers=auth_headers(test_admin)
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Invalid status"
        stored = await schedule_repository.get_by_id(schedule.id)
        assert stored.status == ScheduleStatus.PENDING

    @pytest.mark.asyncio
    async def test_all_schedules_admin_only(self, async_client: AsyncClient, test_user: User):
        response = await async_client.get("/api/schedules/all", headers=auth_headers(test_user))

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_agent_view_requires_agent_role(self, async_client: AsyncClient, test_user: User):
        response = await async_client.get("/api/schedules/agent", headers=auth_headers(test_user))

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_delete_schedule_admin_only(
        self,
        async_client: AsyncClient,
        schedule_repository: ScheduleRepository,
        test_property: Property,
        test_user: User,
        test_admin: User
    ):
        schedule = await ScheduleFactory.create_schedule(schedule_repository, test_property, test_user)

        as_user = await async_client.delete(f"/api/schedules/{schedule.id}", headers=auth_headers(test_user))
        as_admin = await async_client.delete(f"/api/schedules/{schedule.id}", headers=auth_headers(test_admin))

        assert as_user.status_code == 403
        assert as_admin.status_code == 204


class TestUserEndpoints:

    @pytest.mark.asyncio
    async def test_admin_promotes_user(
        self,
        async_client: AsyncClient,
        user_repository: UserRepository,
        test_user: User,
        test_admin: User
    ):
        response = await async_client.patch(
            f"/api/users/{test_user.id}/role", json={"role": "seller"}, headers=auth_headers(test_admin)
        )

        assert response.status_code == 200
        assert response.json()["role"] == "agent"
        assert (await user_repository.get_by_id(test_user.id)).role == UserRole.AGENT

    @pytest.mark.asyncio
    async def test_list_users_requires_admin(
        self,
        async_client: AsyncClient,
        test_user: User,
        test_agent: User,
        test_admin: User
    ):
        forbidden = await async_client.get("/api/users", headers=auth_headers(test_agent))
        agents = await async_client.get("/api/users", params={"role": "agent"}, headers=auth_headers(test_admin))

        assert forbidden.status_code == 403
        assert [u["email"] for u in agents.json()["users"]] == [test_agent.email]


class TestServiceEndpoints:

    @pytest.mark.asyncio
    async def test_health(self, async_client: AsyncClient):
        response = await async_client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "OK"
        assert response.json()["database"] == "Connected"

    @pytest.mark.asyncio
    async def test_root_banner(self, async_client: AsyncClient):
        response = await async_client.get("/")

        assert response.status_code == 200
        assert response.json()["health"] == "/api/health"

    @pytest.mark.asyncio
    async def test_request_id_header_and_error_body(self, async_client: AsyncClient):
        response = await async_client.get("/api/does-not-exist", headers={"X-Request-ID": "req-123"})

        assert response.status_code == 404
        assert response.headers["X-Request-ID"] == "req-123"
        assert response.json()["error"]["request_id"] == "req-123"
