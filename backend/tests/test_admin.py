"""Tests for staff administration."""


class TestStaffAdmin:
    def test_register_staff(self, client, admin_headers, test_admin):
        res = client.post("/api/admin/staff/register", json={
            "first_name": "New",
            "last_name": "Hire",
            "email": "New.Hire@gym.test",
            "password": "hirepass1",
            "role": "staff",
        }, headers=admin_headers)
        assert res.status_code == 201
        staff = res.json()["staff"]
        assert staff["email"] == "new.hire@gym.test"
        assert staff["role"] == "staff"
        assert staff["is_active"] is True

        res = client.post("/api/auth/staff/login", json={
            "email": "new.hire@gym.test",
            "password": "hirepass1",
        })
        assert res.status_code == 200

    def test_register_duplicate_email(self, client, admin_headers, test_staff):
        res = client.post("/api/admin/staff/register", json={
            "first_name": "Dup",
            "last_name": "Desk",
            "email": "desk@gym.test",
            "password": "duppass1",
        }, headers=admin_headers)
        assert res.status_code == 400
        assert res.json() == {"error": "Staff with this email already exists", "kind": "conflict"}

    def test_register_invalid_role(self, client, admin_headers):
        res = client.post("/api/admin/staff/register", json={
            "first_name": "Bad",
            "last_name": "Role",
            "email": "bad.role@gym.test",
            "password": "badrole1",
            "role": "owner",
        }, headers=admin_headers)
        assert res.status_code == 400

    def test_list_staff(self, client, admin_headers, test_staff):
        res = client.get("/api/admin/staff", headers=admin_headers)
        assert res.status_code == 200
        emails = {s["email"] for s in res.json()}
        assert emails == {"admin@gym.test", "desk@gym.test"}
        assert all("password_hash" not in s for s in res.json())

    def test_users_overview(self, client, admin_headers, test_staff, test_member):
        res = client.get("/api/admin/users", headers=admin_headers)
        assert res.status_code == 200
        data = res.json()
        assert data["staff_count"] == 2
        assert data["member_count"] == 1
        assert data["members"][0]["username"] == "jane_doe"


class TestStaffDeactivation:
    def test_deactivated_staff_cannot_login(self, client, admin_headers, test_staff):
        res = client.patch(
            f"/api/admin/staff/{test_staff.id}/status",
            json={"is_active": False},
            headers=admin_headers,
        )
        assert res.status_code == 200
        assert res.json()["message"] == "Staff deactivated successfully"

        res = client.post("/api/auth/staff/login", json={
            "email": "desk@gym.test",
            "password": "staffpass123",
        })
        assert res.status_code == 401
        assert res.json()["error"] == "Account is deactivated"

    def test_existing_token_rejected_after_deactivation(self, client, admin_headers, staff_headers, test_staff):
        assert client.get("/api/members", headers=staff_headers).status_code == 200

        client.patch(f"/api/admin/staff/{test_staff.id}/status", json={"is_active": False}, headers=admin_headers)

        res = client.get("/api/members", headers=staff_headers)
        assert res.status_code == 401
        assert res.json()["error"] == "Account is deactivated"

    def test_reactivate(self, client, admin_headers, test_staff):
        client.patch(f"/api/admin/staff/{test_staff.id}/status", json={"is_active": False}, headers=admin_headers)
        res = client.patch(f"/api/admin/staff/{test_staff.id}/status", json={"is_active": True}, headers=admin_headers)
        assert res.json()["staff"]["is_active"] is True

    def test_cannot_deactivate_self(self, client, admin_headers, test_admin):
        res = client.patch(f"/api/admin/staff/{test_admin.id}/status", json={"is_active": False}, headers=admin_headers)
        assert res.status_code == 400
        assert res.json()["error"] == "Cannot deactivate your own account"

    def test_unknown_staff(self, client, admin_headers):
        res = client.patch("/api/admin/staff/9999/status", json={"is_active": False}, headers=admin_headers)
        assert res.status_code == 404

    def test_demoted_admin_loses_admin_routes(self, client, db_session, admin_headers, test_admin):
        from gymaccess.models.staff import StaffRole

        test_admin.role = StaffRole.STAFF
        db_session.commit()
        res = client.get("/api/admin/staff", headers=admin_headers)
        assert res.status_code == 403
