"""
Integration tests for the maintenance request endpoints.

Tests:
- Create request (form fields, attachments, validation, role gate)
- Resident and technician listings with ownership checks
- Status updates by assigned technician and admin
- Admin listing with pagination and filters
- Technician assignment
- Full resident -> admin -> technician scenario
"""

import pytest
import pytest_asyncio

from db import RequestCategory, RequestPriority, RequestStatus
from tests.factories import MaintenanceRequestFactory

VALID_FORM = {
    "title": "Leaking sink",
    "description": "Water is dripping from the kitchen sink pipe",
    "category": "plumbing",
    "priority": "high",
}


@pytest_asyncio.fixture
async def assigned_ticket(db_session, resident, technician):
    ticket = MaintenanceRequestFactory.create(resident, technician)
    db_session.add(ticket)
    await db_session.commit()
    await db_session.refresh(ticket)
    return ticket


class TestCreateRequest:
    @pytest.mark.asyncio
    async def test_resident_creates_ticket(self, client, resident, headers_for):
        response = await client.post(
            "/api/requests", data=VALID_FORM, headers=headers_for(resident)
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Request created successfully"
        ticket = body["request"]
        assert ticket["status"] == "new"
        assert ticket["priority"] == "high"
        assert ticket["category"] == "plumbing"
        assert ticket["residentId"] == resident.id
        assert ticket["residentName"] == "Alice Lee"
        assert ticket["apartmentNumber"] == "4B"
        assert ticket["technicianId"] is None
        assert ticket["mediaUrls"] == []
        assert ticket["completedAt"] is None

    @pytest.mark.asyncio
    async def test_priority_defaults_to_medium(self, client, resident, headers_for):
        form = {"description": "Hallway light flickers all night", "category": "electrical"}
        response = await client.post("/api/requests", data=form, headers=headers_for(resident))

        assert response.status_code == 201
        assert response.json()["request"]["priority"] == "medium"
        assert response.json()["request"]["title"] is None

    @pytest.mark.asyncio
    async def test_attachments_are_stored_in_order(
        self, client, resident, headers_for, upload_dir
    ):
        files = [
            ("files", ("before.jpg", b"first-image", "image/jpeg")),
            ("files", ("leak.png", b"second-image", "image/png")),
        ]
        response = await client.post(
            "/api/requests", data=VALID_FORM, files=files, headers=headers_for(resident)
        )

        assert response.status_code == 201
        media = response.json()["request"]["mediaUrls"]
        assert len(media) == 2
        assert media[0].startswith("/uploads/") and media[0].endswith(".jpg")
        assert media[1].endswith(".png")
        assert (upload_dir / media[0].rsplit("/", 1)[1]).read_bytes() == b"first-image"

        served = await client.get(media[1])
        assert served.status_code == 200
        assert served.content == b"second-image"

    @pytest.mark.asyncio
    async def test_disallowed_attachment_type(self, client, resident, headers_for, upload_dir):
        files = [("files", ("script.exe", b"MZ", "application/octet-stream"))]
        response = await client.post(
            "/api/requests", data=VALID_FORM, files=files, headers=headers_for(resident)
        )

        assert response.status_code == 400
        assert list(upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_more_than_five_attachments(self, client, resident, headers_for):
        files = [("files", (f"p{i}.jpg", b"x", "image/jpeg")) for i in range(6)]
        response = await client.post(
            "/api/requests", data=VALID_FORM, files=files, headers=headers_for(resident)
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [
            {"description": ""},
            {"description": "short"},
            {"category": "gardening"},
            {"priority": "whenever"},
        ],
    )
    async def test_invalid_form(self, client, resident, headers_for, overrides):
        form = {**VALID_FORM, **overrides}
        response = await client.post("/api/requests", data=form, headers=headers_for(resident))

        assert response.status_code == 400
        assert response.json()["detail"] == "Validation failed"

    @pytest.mark.asyncio
    async def test_missing_category(self, client, resident, headers_for):
        form = {"description": "Something broke in the laundry room"}
        response = await client.post("/api/requests", data=form, headers=headers_for(resident))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_only_residents_create(self, client, technician, admin, headers_for):
        for user in (technician, admin):
            response = await client.post(
                "/api/requests", data=VALID_FORM, headers=headers_for(user)
            )
            assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        response = await client.post("/api/requests", data=VALID_FORM)
        assert response.status_code == 401


class TestResidentListing:
    @pytest.mark.asyncio
    async def test_resident_sees_own_tickets(
        self, client, resident, assigned_ticket, headers_for
    ):
        response = await client.get(
            f"/api/requests/resident/{resident.id}", headers=headers_for(resident)
        )

        assert response.status_code == 200
        tickets = response.json()["requests"]
        assert [t["id"] for t in tickets] == [assigned_ticket.id]
        assert tickets[0]["technicianName"] == "Tom Fixer"
        assert tickets[0]["technicianPhone"] == "5550001111"

    @pytest.mark.asyncio
    async def test_resident_cannot_see_others(
        self, client, resident, other_resident, headers_for
    ):
        response = await client.get(
            f"/api/requests/resident/{resident.id}", headers=headers_for(other_resident)
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_technician_is_rejected_by_role(self, client, resident, technician, headers_for):
        response = await client.get(
            f"/api/requests/resident/{resident.id}", headers=headers_for(technician)
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_sees_any_resident(self, client, resident, admin, assigned_ticket, headers_for):
        response = await client.get(
            f"/api/requests/resident/{resident.id}", headers=headers_for(admin)
        )
        assert response.status_code == 200
        assert len(response.json()["requests"]) == 1


class TestTechnicianListing:
    @pytest.mark.asyncio
    async def test_queue_is_ordered_by_priority(
        self, client, db_session, resident, technician, headers_for
    ):
        low = MaintenanceRequestFactory.create(resident, technician, priority=RequestPriority.LOW)
        urgent = MaintenanceRequestFactory.create(
            resident, technician, priority=RequestPriority.URGENT
        )
        db_session.add_all([low, urgent])
        await db_session.commit()

        response = await client.get(
            f"/api/requests/technician/{technician.id}", headers=headers_for(technician)
        )

        assert response.status_code == 200
        assert [t["priority"] for t in response.json()["requests"]] == ["urgent", "low"]

    @pytest.mark.asyncio
    async def test_other_technician_forbidden(
        self, client, technician, other_technician, headers_for
    ):
        response = await client.get(
            f"/api/requests/technician/{technician.id}", headers=headers_for(other_technician)
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_resident_forbidden(self, client, technician, resident, headers_for):
        response = await client.get(
            f"/api/requests/technician/{technician.id}", headers=headers_for(resident)
        )
        assert response.status_code == 403


class TestUpdateStatus:
    @pytest.mark.asyncio
    async def test_assigned_technician_updates_with_notes(
        self, client, technician, assigned_ticket, headers_for
    ):
        response = await client.put(
            f"/api/requests/{assigned_ticket.id}/status",
            json={"status": "in-progress", "workNotes": "Shut off the valve"},
            headers=headers_for(technician),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Request status updated successfully"
        assert body["request"]["status"] == "in-progress"
        assert body["request"]["workNotes"] == "Shut off the valve"
        assert body["request"]["completedAt"] is None

    @pytest.mark.asyncio
    async def test_completion_sets_completed_at(
        self, client, technician, assigned_ticket, headers_for
    ):
        response = await client.put(
            f"/api/requests/{assigned_ticket.id}/status",
            json={"status": "completed"},
            headers=headers_for(technician),
        )

        assert response.status_code == 200
        completed_at = response.json()["request"]["completedAt"]
        assert completed_at is not None and completed_at.endswith("Z")

    @pytest.mark.asyncio
    async def test_unassigned_technician_forbidden(
        self, client, other_technician, assigned_ticket, headers_for
    ):
        response = await client.put(
            f"/api/requests/{assigned_ticket.id}/status",
            json={"status": "completed"},
            headers=headers_for(other_technician),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_resident_forbidden(self, client, resident, assigned_ticket, headers_for):
        response = await client.put(
            f"/api/requests/{assigned_ticket.id}/status",
            json={"status": "cancelled"},
            headers=headers_for(resident),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_missing_ticket(self, client, admin, headers_for):
        response = await client.put(
            "/api/requests/9999/status", json={"status": "completed"}, headers=headers_for(admin)
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_invalid_status(self, client, admin, assigned_ticket, headers_for):
        response = await client.put(
            f"/api/requests/{assigned_ticket.id}/status",
            json={"status": "new"},
            headers=headers_for(admin),
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_terminal_ticket_conflicts(
        self, client, db_session, resident, technician, headers_for
    ):
        ticket = MaintenanceRequestFactory.create(
            resident, technician, status=RequestStatus.CANCELLED
        )
        db_session.add(ticket)
        await db_session.commit()

        response = await client.put(
            f"/api/requests/{ticket.id}/status",
            json={"status": "in-progress"},
            headers=headers_for(technician),
        )
        assert response.status_code == 409


class TestAdminListing:
    @pytest_asyncio.fixture
    async def seeded(self, db_session, resident, technician):
        tickets = [
            MaintenanceRequestFactory.create(resident, category=RequestCategory.PLUMBING),
            MaintenanceRequestFactory.create(resident, category=RequestCategory.HVAC),
            MaintenanceRequestFactory.create(
                resident, technician, category=RequestCategory.HVAC
            ),
        ]
        db_session.add_all(tickets)
        await db_session.commit()
        return tickets

    @pytest.mark.asyncio
    async def test_pagination(self, client, admin, seeded, headers_for):
        response = await client.get(
            "/api/requests", params={"page": 2, "limit": 2}, headers=headers_for(admin)
        )

        assert response.status_code == 200
        body = response.json()
        assert len(body["requests"]) == 1
        assert body["pagination"] == {"page": 2, "limit": 2, "total": 3, "totalPages": 2}

    @pytest.mark.asyncio
    async def test_filters(self, client, admin, seeded, headers_for):
        response = await client.get(
            "/api/requests",
            params={"status": "new", "category": "hvac"},
            headers=headers_for(admin),
        )

        body = response.json()
        assert body["pagination"]["total"] == 1
        assert body["requests"][0]["category"] == "hvac"
        assert body["requests"][0]["status"] == "new"
        assert body["requests"][0]["residentName"] == "Alice Lee"

    @pytest.mark.asyncio
    async def test_default_page_size(self, client, admin, seeded, headers_for):
        response = await client.get("/api/requests", headers=headers_for(admin))
        assert response.json()["pagination"]["limit"] == 10

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "params", [{"page": 0}, {"limit": 0}, {"limit": 101}, {"status": "lost"}]
    )
    async def test_invalid_query(self, client, admin, headers_for, params):
        response = await client.get("/api/requests", params=params, headers=headers_for(admin))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_admin_only(self, client, resident, technician, headers_for):
        for user in (resident, technician):
            response = await client.get("/api/requests", headers=headers_for(user))
            assert response.status_code == 403


class TestAssign:
    @pytest_asyncio.fixture
    async def new_ticket(self, db_session, resident):
        ticket = MaintenanceRequestFactory.create(resident)
        db_session.add(ticket)
        await db_session.commit()
        await db_session.refresh(ticket)
        return ticket

    @pytest.mark.asyncio
    async def test_assign(self, client, admin, technician, new_ticket, headers_for):
        response = await client.put(
            f"/api/requests/{new_ticket.id}/assign",
            json={"technicianId": technician.id},
            headers=headers_for(admin),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Technician assigned successfully"
        assert body["request"]["technicianId"] == technician.id
        assert body["request"]["status"] == "assigned"
        assert body["request"]["technicianName"] == "Tom Fixer"

    @pytest.mark.asyncio
    async def test_assign_to_non_technician(self, client, admin, resident, new_ticket, headers_for):
        response = await client.put(
            f"/api/requests/{new_ticket.id}/assign",
            json={"technicianId": resident.id},
            headers=headers_for(admin),
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_assign_missing_ticket(self, client, admin, technician, headers_for):
        response = await client.put(
            "/api/requests/9999/assign",
            json={"technicianId": technician.id},
            headers=headers_for(admin),
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_assign_requires_positive_id(self, client, admin, new_ticket, headers_for):
        response = await client.put(
            f"/api/requests/{new_ticket.id}/assign",
            json={"technicianId": 0},
            headers=headers_for(admin),
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_admin_only(self, client, technician, new_ticket, headers_for):
        response = await client.put(
            f"/api/requests/{new_ticket.id}/assign",
            json={"technicianId": technician.id},
            headers=headers_for(technician),
        )
        assert response.status_code == 403


class TestLifecycleScenario:
    @pytest.mark.asyncio
    async def test_register_file_assign_complete(
        self, client, admin, technician, headers_for
    ):
        registered = await client.post(
            "/api/auth/register",
            json={
                "email": "alice@x.com",
                "password": "secret1",
                "firstName": "Alice",
                "lastName": "Lee",
                "role": "resident",
            },
        )
        assert registered.status_code == 201
        alice_token = registered.json()["token"]
        alice_id = registered.json()["user"]["id"]
        alice = {"Authorization": f"Bearer {alice_token}"}

        bad_login = await client.post(
            "/api/auth/login", json={"email": "alice@x.com", "password": "wrong"}
        )
        assert bad_login.status_code == 401

        created = await client.post(
            "/api/requests",
            data={"description": "Bathroom pipe burst behind the wall", "category": "plumbing"},
            headers=alice,
        )
        assert created.status_code == 201
        assert created.json()["request"]["status"] == "new"
        request_id = created.json()["request"]["id"]

        assigned = await client.put(
            f"/api/requests/{request_id}/assign",
            json={"technicianId": technician.id},
            headers=headers_for(admin),
        )
        assert assigned.json()["request"]["status"] == "assigned"

        completed = await client.put(
            f"/api/requests/{request_id}/status",
            json={"status": "completed", "workNotes": "Replaced the pipe section"},
            headers=headers_for(technician),
        )
        assert completed.status_code == 200
        assert completed.json()["request"]["completedAt"] is not None

        listing = await client.get(f"/api/requests/resident/{alice_id}", headers=alice)
        (ticket,) = listing.json()["requests"]
        assert ticket["status"] == "completed"
        assert ticket["completedAt"] == completed.json()["request"]["completedAt"]
        assert ticket["workNotes"] == "Replaced the pipe section"
