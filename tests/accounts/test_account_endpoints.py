"""Tests for account, statistics and moderation endpoints."""

import pytest
from httpx import AsyncClient

from ucp import messages
from ucp.db.models import LOG_TABLES, LogCategory

API = "/internal-ucp-api/v1"


class TestPrivilegeGate:
    @pytest.mark.parametrize(
        ("method", "path"),
        [
            ("GET", "/get-data"),
            ("GET", "/restricted/check"),
            ("POST", "/restricted/ajail"),
            ("POST", "/restricted/logs"),
            ("GET", "/restricted/ban-list"),
            ("POST", "/restricted/ban"),
            ("POST", "/restricted/unban"),
        ],
    )
    async def test_anonymous_refused(self, client: AsyncClient, method, path):
        response = await client.request(method, f"{API}{path}", json={})
        assert response.status_code == 401
        assert response.json() == {"detail": messages.NOT_LOGGED_IN}

    @pytest.mark.parametrize(
        ("method", "path"),
        [
            ("GET", "/restricted/check"),
            ("POST", "/restricted/ajail"),
            ("POST", "/restricted/logs"),
            ("GET", "/restricted/ban-list"),
            ("POST", "/restricted/ban"),
        ],
    )
    async def test_player_refused(self, client: AsyncClient, player_headers, method, path):
        response = await client.request(method, f"{API}{path}", json={}, headers=player_headers)
        assert response.status_code == 403
        assert response.json() == {"detail": messages.NO_PRIVILEGE}

    @pytest.mark.parametrize(
        ("method", "path"),
        [("GET", "/restricted/ban-list"), ("POST", "/restricted/ban"), ("POST", "/restricted/unban")],
    )
    async def test_tester_refused_on_admin_routes(self, client: AsyncClient, tester_headers, method, path):
        response = await client.request(method, f"{API}{path}", json={}, headers=tester_headers)
        assert response.status_code == 403

    async def test_check_reports_flags(self, client: AsyncClient, tester_headers):
        response = await client.get(f"{API}/restricted/check", headers=tester_headers)
        assert response.status_code == 200
        assert response.json() == {"user": "tina", "is_admin": False, "is_tester": True}


class TestStatisticsEndpoints:
    async def test_get_data(self, client: AsyncClient, seed_account, character_service, player_headers):
        await seed_account("alice", admin=0)
        await character_service.propose("alice", "Ana_Popescu", 25, 0, "Romania")

        response = await client.get(f"{API}/get-data", headers=player_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["username"] == "alice"
        assert data["characters"] == 1
        assert data["character_list"] == [
            {"character_name": "Ana_Popescu", "character_status": 0, "character_level": 1, "playing_hours": 0}
        ]

    async def test_get_data_for_deleted_account(self, client: AsyncClient, make_headers):
        response = await client.get(f"{API}/get-data", headers=make_headers("ghost"))
        assert response.status_code == 404

    async def test_get_staff_is_public(self, client: AsyncClient, seed_account):
        await seed_account("adam", admin=4)
        await seed_account("tina", tester=1)

        response = await client.get(f"{API}/get-staff")

        assert response.status_code == 200
        assert response.json() == {
            "data": [{"username": "adam", "role": "Admin"}, {"username": "tina", "role": "Tester"}]
        }

    async def test_server_stats(self, client: AsyncClient, seed_account):
        await seed_account("alice")
        response = await client.get(f"{API}/server-stats")
        assert response.status_code == 200
        assert response.json() == {
            "data": {
                "players_online": 0,
                "total_bans": 0,
                "total_houses": 0,
                "total_staff": 0,
                "total_accounts": 1,
                "total_characters": 0,
            }
        }


class TestModerationEndpoints:
    async def test_ban_then_list_then_unban(self, client: AsyncClient, seed_account, admin_headers):
        await seed_account("alice")

        response = await client.post(
            f"{API}/restricted/ban",
            json={"username": "alice", "expire": 7, "reason": "cheats"},
            headers=admin_headers,
        )
        assert response.status_code == 200

        response = await client.get(f"{API}/restricted/ban-list", headers=admin_headers)
        bans = response.json()
        assert [(b["username"], b["admin"], b["reason"]) for b in bans] == [("alice", "adam", "cheats")]

        response = await client.post(f"{API}/restricted/unban", json={"username": "alice"}, headers=admin_headers)
        assert response.status_code == 200

        response = await client.get(f"{API}/restricted/ban-list", headers=admin_headers)
        assert response.json() == []

    async def test_ban_invalid_expiry(self, client: AsyncClient, seed_account, admin_headers):
        await seed_account("alice")
        response = await client.post(
            f"{API}/restricted/ban",
            json={"username": "alice", "expire": 30, "reason": "cheats"},
            headers=admin_headers,
        )
        assert response.status_code == 422
        assert response.json() == {"detail": messages.BAN_INVALID_EXPIRE}

    async def test_ban_unknown_player(self, client: AsyncClient, admin_headers):
        response = await client.post(
            f"{API}/restricted/ban",
            json={"username": "ghost", "expire": 3, "reason": "cheats"},
            headers=admin_headers,
        )
        assert response.status_code == 404
        assert response.json() == {"detail": messages.BAN_SUBJECT_NOT_FOUND}

    async def test_unban_without_ban(self, client: AsyncClient, seed_account, admin_headers):
        await seed_account("alice")
        response = await client.post(f"{API}/restricted/unban", json={"username": "alice"}, headers=admin_headers)
        assert response.status_code == 404
        assert response.json() == {"detail": messages.UNBAN_NOT_FOUND}

    async def test_ajail(self, client: AsyncClient, seed_account, character_service, tester_headers):
        await seed_account("alice")
        await character_service.propose("alice", "Ana_Popescu", 25, 0, "Romania")

        response = await client.post(
            f"{API}/restricted/ajail",
            json={"character": "Ana_Popescu", "time": 10, "reason": "DM"},
            headers=tester_headers,
        )
        assert response.status_code == 200

    async def test_ajail_unknown_character(self, client: AsyncClient, tester_headers):
        response = await client.post(
            f"{API}/restricted/ajail",
            json={"character": "Nobody_Here", "time": 10, "reason": "DM"},
            headers=tester_headers,
        )
        assert response.status_code == 404
        assert response.json() == {"detail": messages.JAIL_FAILED}

    async def test_logs(self, client: AsyncClient, db_session, tester_headers):
        table = LOG_TABLES[LogCategory.WARN]
        await db_session.execute(table.insert().values(Player="Ana_Popescu", Details="warn: DM", IP="9.9.9.9"))
        await db_session.commit()

        response = await client.post(f"{API}/restricted/logs", json={"type": "logs_warn"}, headers=tester_headers)

        assert response.status_code == 200
        logs = response.json()["logs"]
        assert len(logs) == 1
        assert logs[0]["player"] == "Ana_Popescu"
        assert "9.9.9.9" not in response.text

    async def test_logs_unknown_type(self, client: AsyncClient, tester_headers):
        response = await client.post(f"{API}/restricted/logs", json={"type": "accounts"}, headers=tester_headers)
        assert response.status_code == 422
        assert response.json() == {"detail": messages.LOG_CATEGORY_INVALID}
