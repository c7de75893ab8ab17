"""
Tests for Children API Endpoints

Registration, listing, updates, admin search and score statistics.
"""

import pytest
from httpx import AsyncClient

from atec.core.models import Role

CHILD = {"name": "Kwame", "date_of_birth": "2019-04-21", "gender": True}


@pytest.fixture
async def registered_child(client: AsyncClient, parent_user, auth_header):
    response = await client.post("/v1/children", json=CHILD, headers=auth_header(parent_user))
    assert response.status_code == 200
    return response.json()["data"]


class TestChildren:
    """Test child management."""

    async def test_register_and_list(
        self, client: AsyncClient, parent_user, auth_header, registered_child
    ):
        response = await client.get("/v1/children", headers=auth_header(parent_user))

        assert response.status_code == 200
        children = response.json()["data"]
        assert [c["id"] for c in children] == [registered_child["id"]]
        assert children[0]["parent_username"] == parent_user.username

    async def test_register_requires_login(self, client: AsyncClient):
        response = await client.post("/v1/children", json=CHILD)

        assert response.status_code == 401

    async def test_parent_updates_child(
        self, client: AsyncClient, parent_user, auth_header, registered_child
    ):
        response = await client.put(
            f"/v1/children/{registered_child['id']}",
            json={"guardian_name": "Grandma"},
            headers=auth_header(parent_user),
        )

        assert response.status_code == 200
        assert response.json()["data"]["guardian_name"] == "Grandma"
        assert response.json()["data"]["name"] == "Kwame"

    @pytest.mark.parametrize("field", ["name", "date_of_birth", "gender"])
    async def test_update_rejects_null_required_field(
        self, client: AsyncClient, parent_user, auth_header, registered_child, field
    ):
        response = await client.put(
            f"/v1/children/{registered_child['id']}",
            json={field: None},
            headers=auth_header(parent_user),
        )

        assert response.status_code == 400
        assert field in response.json()["error_message"]
        assert "must not be null" in response.json()["error_message"]

    async def test_update_clears_guardian_name(
        self, client: AsyncClient, parent_user, auth_header, registered_child
    ):
        headers = auth_header(parent_user)
        await client.put(
            f"/v1/children/{registered_child['id']}",
            json={"guardian_name": "Grandma"},
            headers=headers,
        )

        response = await client.put(
            f"/v1/children/{registered_child['id']}",
            json={"guardian_name": None},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["guardian_name"] is None
        assert response.json()["data"]["name"] == "Kwame"

    async def test_other_parent_cannot_update(
        self, client: AsyncClient, create_user, auth_header, registered_child
    ):
        stranger = await create_user(Role.PARENT)

        response = await client.put(
            f"/v1/children/{registered_child['id']}",
            json={"name": "Hijacked"},
            headers=auth_header(stranger),
        )

        assert response.status_code == 403

    async def test_search_is_admin_only(
        self, client: AsyncClient, admin_user, parent_user, auth_header, registered_child
    ):
        admin = await client.get(
            "/v1/children/search", params={"name": "kwa"}, headers=auth_header(admin_user)
        )
        parent = await client.get("/v1/children/search", headers=auth_header(parent_user))

        assert admin.status_code == 200
        assert admin.json()["data"][0]["id"] == registered_child["id"]
        assert parent.status_code == 403


class TestStatistics:
    """Test GET /v1/children/{child_id}/stats."""

    async def test_statistics_after_submissions(
        self, client: AsyncClient, active_package, answer_sheet, parent_user, create_user,
        auth_header, registered_child,
    ):
        headers = auth_header(parent_user)
        for option in (0, 1):
            response = await client.post(
                "/v1/atec/questionnaires",
                json={
                    "package_id": str(active_package.id),
                    "child_id": registered_child["id"],
                    "answers": answer_sheet(option),
                },
                headers=headers,
            )
            assert response.status_code == 200

        stats = await client.get(f"/v1/children/{registered_child['id']}/stats", headers=headers)
        assert stats.status_code == 200
        assert [s["total"] for s in stats.json()["data"]] == [0, 77]

        therapist = await create_user(Role.THERAPIST)
        seen = await client.get(
            f"/v1/children/{registered_child['id']}/stats", headers=auth_header(therapist)
        )
        assert seen.status_code == 200

        stranger = await create_user(Role.PARENT)
        hidden = await client.get(
            f"/v1/children/{registered_child['id']}/stats", headers=auth_header(stranger)
        )
        assert hidden.status_code == 403

    async def test_statistics_without_results(
        self, client: AsyncClient, parent_user, auth_header, registered_child
    ):
        response = await client.get(
            f"/v1/children/{registered_child['id']}/stats", headers=auth_header(parent_user)
        )

        assert response.status_code == 404
