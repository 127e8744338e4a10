"""
Integration tests for user endpoints and application-level routes.

Tests:
- Technician directory (admin only, name order)
- Own profile
- Role-specific dashboard counters
- Health, root banner, response headers
"""

import pytest

from db import RequestStatus, utc_now
from tests.factories import MaintenanceRequestFactory, UserFactory


class TestTechnicianDirectory:
    @pytest.mark.asyncio
    async def test_admin_lists_technicians_by_name(
        self, client, admin, resident, technician, other_technician, headers_for
    ):
        response = await client.get("/api/users/technicians", headers=headers_for(admin))

        assert response.status_code == 200
        technicians = response.json()["technicians"]
        assert [t["firstName"] for t in technicians] == ["Ann", "Tom"]
        assert technicians[1]["phoneNumber"] == "5550001111"
        assert "passwordHash" not in technicians[0]

    @pytest.mark.asyncio
    async def test_non_admins_forbidden(self, client, resident, technician, headers_for):
        for user in (resident, technician):
            response = await client.get("/api/users/technicians", headers=headers_for(user))
            assert response.status_code == 403


class TestProfile:
    @pytest.mark.asyncio
    async def test_returns_own_account(self, client, resident, headers_for):
        response = await client.get("/api/users/profile", headers=headers_for(resident))

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["id"] == resident.id
        assert user["email"] == resident.email
        assert user["role"] == "resident"
        assert user["apartmentNumber"] == "4B"
        assert "passwordHash" not in user

    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        response = await client.get("/api/users/profile")
        assert response.status_code == 401


class TestDashboardStats:
    @pytest.mark.asyncio
    async def test_admin_stats(self, client, db_session, admin, resident, technician, headers_for):
        db_session.add_all(
            [
                MaintenanceRequestFactory.create(resident),
                MaintenanceRequestFactory.create(
                    resident, technician, status=RequestStatus.IN_PROGRESS
                ),
                MaintenanceRequestFactory.create(
                    resident, technician, status=RequestStatus.COMPLETED,
                    completed_at=utc_now(),
                ),
            ]
        )
        await db_session.commit()

        response = await client.get("/api/users/dashboard-stats", headers=headers_for(admin))

        assert response.status_code == 200
        assert response.json()["stats"] == {
            "totalRequests": 3,
            "newRequests": 1,
            "inProgressRequests": 1,
            "completedRequests": 1,
            "totalTechnicians": 1,
            "totalResidents": 1,
        }

    @pytest.mark.asyncio
    async def test_technician_stats(
        self, client, db_session, resident, technician, other_technician, headers_for
    ):
        db_session.add_all(
            [
                MaintenanceRequestFactory.create(resident, technician),
                MaintenanceRequestFactory.create(
                    resident, technician, status=RequestStatus.IN_PROGRESS
                ),
                MaintenanceRequestFactory.create(
                    resident, technician, status=RequestStatus.COMPLETED,
                    completed_at=utc_now(),
                ),
                MaintenanceRequestFactory.create(resident, other_technician),
            ]
        )
        await db_session.commit()

        response = await client.get(
            "/api/users/dashboard-stats", headers=headers_for(technician)
        )

        assert response.json()["stats"] == {
            "assignedRequests": 1,
            "inProgressRequests": 1,
            "completedToday": 1,
        }

    @pytest.mark.asyncio
    async def test_resident_stats(
        self, client, db_session, resident, other_resident, technician, headers_for
    ):
        db_session.add_all(
            [
                MaintenanceRequestFactory.create(resident),
                MaintenanceRequestFactory.create(resident, technician),
                MaintenanceRequestFactory.create(
                    resident, technician, status=RequestStatus.COMPLETED,
                    completed_at=utc_now(),
                ),
                MaintenanceRequestFactory.create(
                    resident, status=RequestStatus.CANCELLED
                ),
                MaintenanceRequestFactory.create(other_resident),
            ]
        )
        await db_session.commit()

        response = await client.get("/api/users/dashboard-stats", headers=headers_for(resident))

        assert response.json()["stats"] == {
            "totalRequests": 4,
            "pendingRequests": 2,
            "completedRequests": 1,
        }

    @pytest.mark.asyncio
    async def test_empty_dashboard(self, client, db_session, headers_for):
        newcomer = UserFactory.create_resident()
        db_session.add(newcomer)
        await db_session.commit()
        await db_session.refresh(newcomer)

        response = await client.get("/api/users/dashboard-stats", headers=headers_for(newcomer))

        assert response.json()["stats"] == {
            "totalRequests": 0,
            "pendingRequests": 0,
            "completedRequests": 0,
        }


class TestApplicationRoutes:
    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "OK"
        assert body["services"]["database"] == "healthy"
        assert body["timestamp"].endswith("Z")

    @pytest.mark.asyncio
    async def test_root_banner(self, client):
        response = await client.get("/")

        assert response.status_code == 200
        assert response.json()["docs"] == "/api/docs"

    @pytest.mark.asyncio
    async def test_security_headers(self, client):
        response = await client.get("/")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"

    @pytest.mark.asyncio
    async def test_correlation_id_echoed(self, client):
        response = await client.get("/", headers={"X-Correlation-ID": "trace-123"})
        assert response.headers["X-Correlation-ID"] == "trace-123"

    @pytest.mark.asyncio
    async def test_correlation_id_generated(self, client):
        response = await client.get("/")
        assert response.headers["X-Correlation-ID"]

    @pytest.mark.asyncio
    async def test_unknown_route(self, client):
        response = await client.get("/api/nowhere")
        assert response.status_code == 404
