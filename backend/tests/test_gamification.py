"""Tests for leaderboard, profiles, stats, notifications and badges."""

import uuid
from datetime import date, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from gymaccess.core.clock import local_now
from gymaccess.models.gamification import (
    Badge, DailyPoints, MemberBadge, Notification, NotificationType,
)
from gymaccess.models.member import Member
from gymaccess.services.badge_catalog import DEFAULT_BADGES, RARITY_POINTS, seed_badges
from gymaccess.services.gamification_service import GamificationService


def _member(db, username, points, last_visit_days_ago=None, **extra):
    member = Member(
        username=username,
        first_name=username.title(),
        last_name="Tester",
        email=f"{username}@example.com",
        qr_code=str(uuid.uuid4()),
        total_points=points,
        experience=points,
        level=points // 1000 + 1,
        last_visit_date=(
            local_now() - timedelta(days=last_visit_days_ago)
            if last_visit_days_ago is not None else None
        ),
        **extra,
    )
    db.add(member)
    db.commit()
    db.refresh(member)
    return member


# ============== Leaderboard ==============

class TestLeaderboard:
    def test_all_time_ranking(self, client, db_session):
        _member(db_session, "alice", 500)
        _member(db_session, "bob", 1500)
        _member(db_session, "carol", 900)

        res = client.get("/api/leaderboard")
        assert res.status_code == 200
        data = res.json()
        assert data["type"] == "all"
        assert [e["username"] for e in data["leaderboard"]] == ["bob", "carol", "alice"]
        assert [e["rank"] for e in data["leaderboard"]] == [1, 2, 3]
        assert data["leaderboard"][0]["display_name"] == "bob"
        assert data["leaderboard"][0]["level"] == 2

    def test_weekly_filters_recent_visitors(self, client, db_session):
        _member(db_session, "recent", 100, last_visit_days_ago=2)
        _member(db_session, "stale", 5000, last_visit_days_ago=20)
        _member(db_session, "never", 9000)

        res = client.get("/api/leaderboard", params={"type": "weekly"})
        assert [e["username"] for e in res.json()["leaderboard"]] == ["recent"]

    def test_monthly_ranks_by_all_time_points(self, client, db_session):
        _member(db_session, "recent", 100, last_visit_days_ago=1)
        _member(db_session, "stale", 5000, last_visit_days_ago=20)

        res = client.get("/api/leaderboard", params={"type": "monthly"})
        assert [e["username"] for e in res.json()["leaderboard"]] == ["stale", "recent"]

    def test_limit(self, client, db_session):
        for i in range(5):
            _member(db_session, f"user{i}", i * 10)
        res = client.get("/api/leaderboard", params={"limit": 2})
        assert len(res.json()["leaderboard"]) == 2

    @pytest.mark.parametrize("params", [{"type": "yearly"}, {"limit": 0}, {"limit": 101}])
    def test_invalid_params(self, client, params):
        res = client.get("/api/leaderboard", params=params)
        assert res.status_code == 400


# ============== Profile and stats ==============

class TestProfile:
    def test_profile_has_rank_and_progress(self, client, db_session, member_headers, test_member):
        _member(db_session, "leader", 5000)
        test_member.total_points = 1250
        test_member.experience = 1250
        test_member.level = 2
        db_session.add(DailyPoints(
            member_id=test_member.id,
            date=date(2025, 6, 15),
            base_points=100,
            streak_multiplier=1.0,
            total_points=100,
        ))
        db_session.commit()

        res = client.get(f"/api/user/profile/{test_member.id}", headers=member_headers)
        assert res.status_code == 200
        data = res.json()
        assert data["member"]["rank"] == 2
        assert data["member"]["exp_to_next_level"] == 750
        assert data["recent_points"][0]["date"] == "2025-06-15"

    def test_profile_requires_token(self, client, test_member):
        res = client.get(f"/api/user/profile/{test_member.id}")
        assert res.status_code == 401

    def test_profile_unknown_member(self, client, member_headers):
        res = client.get("/api/user/profile/9999", headers=member_headers)
        assert res.status_code == 404

    def test_update_own_profile(self, client, member_headers, test_member):
        res = client.patch(f"/api/user/profile/{test_member.id}", json={
            "bio": "Leg day <b>every</b> day",
            "avatar_url": "https://img.example.com/jane.png",
        }, headers=member_headers)
        assert res.status_code == 200
        member = res.json()["member"]
        assert member["bio"] == "Leg day &lt;b&gt;every&lt;/b&gt; day"
        assert member["avatar_url"] == "https://img.example.com/jane.png"

    def test_empty_values_leave_profile_untouched(self, client, db_session, member_headers, test_member):
        test_member.bio = "Original"
        test_member.avatar_url = "https://img.example.com/original.png"
        db_session.commit()
        res = client.patch(
            f"/api/user/profile/{test_member.id}",
            json={"bio": "", "avatar_url": ""},
            headers=member_headers,
        )
        assert res.status_code == 200
        assert res.json()["member"]["bio"] == "Original"
        assert res.json()["member"]["avatar_url"] == "https://img.example.com/original.png"

    def test_cannot_update_someone_elses_profile(self, client, db_session, member_headers):
        other = _member(db_session, "other", 0)
        res = client.patch(f"/api/user/profile/{other.id}", json={"bio": "hacked"}, headers=member_headers)
        assert res.status_code == 403

    def test_staff_can_update_any_profile(self, client, staff_headers, test_member):
        res = client.patch(f"/api/user/profile/{test_member.id}", json={"bio": "Set by desk"}, headers=staff_headers)
        assert res.status_code == 200

    @pytest.mark.parametrize("avatar_url", [
        "not a url",
        "javascript:alert(1)",
        "ftp://img.example.com/a.png",
        "https://img.example.com/" + "a" * 500,
    ])
    def test_invalid_avatar_url_rejected(self, client, db_session, member_headers, test_member, avatar_url):
        res = client.patch(
            f"/api/user/profile/{test_member.id}",
            json={"avatar_url": avatar_url},
            headers=member_headers,
        )
        assert res.status_code == 400
        assert res.json()["kind"] == "validation"
        db_session.refresh(test_member)
        assert test_member.avatar_url is None

    def test_bio_too_long(self, client, member_headers, test_member):
        res = client.patch(f"/api/user/profile/{test_member.id}", json={"bio": "x" * 501}, headers=member_headers)
        assert res.status_code == 400


class TestStats:
    def test_stats_after_visit(self, client, staff_headers, member_headers, test_member, active_membership):
        client.post("/api/access/validate", json={"qr_code": test_member.qr_code}, headers=staff_headers)
        client.post("/api/access/validate", json={"qr_code": test_member.qr_code}, headers=staff_headers)

        res = client.get(f"/api/user/stats/{test_member.id}", headers=member_headers)
        assert res.status_code == 200
        data = res.json()
        assert data["total_visits"] == 2
        assert data["weekly_visits"] == 2
        assert data["monthly_visits"] == 2
        assert data["total_days_with_points"] == 1
        assert data["total_points"] == 100
        assert data["avg_points_per_visit"] == 50.0

    def test_stats_no_visits(self, client, member_headers, test_member):
        res = client.get(f"/api/user/stats/{test_member.id}", headers=member_headers)
        assert res.json()["avg_points_per_visit"] == 0


# ============== Notifications ==============

class TestNotifications:
    @pytest.fixture
    def notifications(self, db_session, test_member):
        rows = [
            Notification(member_id=test_member.id, title="Welcome", message="Hi",
                         type=NotificationType.SUCCESS, is_read=True),
            Notification(member_id=test_member.id, title="Promo", message="Deal",
                         type=NotificationType.PROMOTION),
        ]
        db_session.add_all(rows)
        db_session.commit()
        return rows

    def test_list_notifications(self, client, member_headers, test_member, notifications):
        res = client.get(f"/api/user/notifications/{test_member.id}", headers=member_headers)
        assert res.status_code == 200
        assert len(res.json()) == 2

    def test_unread_only(self, client, member_headers, test_member, notifications):
        res = client.get(
            f"/api/user/notifications/{test_member.id}",
            params={"unread_only": "true"},
            headers=member_headers,
        )
        assert [n["title"] for n in res.json()] == ["Promo"]

    def test_cannot_read_other_members_notifications(self, client, db_session, member_headers):
        other = _member(db_session, "other", 0)
        res = client.get(f"/api/user/notifications/{other.id}", headers=member_headers)
        assert res.status_code == 403

    def test_mark_read(self, client, db_session, member_headers, notifications):
        promo = notifications[1]
        res = client.patch(f"/api/user/notifications/{promo.id}/read", headers=member_headers)
        assert res.status_code == 200
        assert res.json()["notification"]["is_read"] is True
        db_session.refresh(promo)
        assert promo.is_read is True

    def test_mark_read_of_foreign_notification(self, client, db_session, headers_for_member, notifications):
        other = _member(db_session, "other", 0)
        res = client.patch(
            f"/api/user/notifications/{notifications[1].id}/read",
            headers=headers_for_member(other),
        )
        assert res.status_code == 404


# ============== Badges ==============

class TestBadgeAward:
    def test_award_badge(self, client, db_session, admin_headers, test_member, test_badge):
        res = client.post("/api/admin/badges/award", json={
            "member_id": test_member.id,
            "badge_id": test_badge.id,
        }, headers=admin_headers)
        assert res.status_code == 200
        data = res.json()
        assert data["points_awarded"] == 500
        assert data["total_points"] == 500
        assert data["member_badge"]["badge"]["name"] == "Streak Master"

        notification = db_session.query(Notification).filter(Notification.member_id == test_member.id).one()
        assert notification.type == NotificationType.ACHIEVEMENT
        assert "Streak Master" in notification.message

    def test_award_twice_is_conflict(self, client, db_session, admin_headers, test_member, test_badge):
        payload = {"member_id": test_member.id, "badge_id": test_badge.id}
        client.post("/api/admin/badges/award", json=payload, headers=admin_headers)
        res = client.post("/api/admin/badges/award", json=payload, headers=admin_headers)
        assert res.status_code == 400
        assert res.json() == {"error": "Member already has this badge", "kind": "conflict"}

        db_session.refresh(test_member)
        assert test_member.total_points == 500
        assert db_session.query(MemberBadge).count() == 1

    def test_award_losing_unique_race_is_conflict(
        self, client, db_session, admin_headers, test_member, test_badge, monkeypatch,
    ):
        db_session.add(MemberBadge(member_id=test_member.id, badge_id=test_badge.id, earned_date=local_now()))
        db_session.commit()
        # A concurrent award commits after the lookup
        monkeypatch.setattr(GamificationService, "_has_badge", lambda self, member_id, badge_id: False)

        res = client.post("/api/admin/badges/award", json={
            "member_id": test_member.id,
            "badge_id": test_badge.id,
        }, headers=admin_headers)
        assert res.status_code == 400
        assert res.json() == {"error": "Member already has this badge", "kind": "conflict"}

        db_session.refresh(test_member)
        assert test_member.total_points == 0
        assert test_member.experience == 0
        assert db_session.query(MemberBadge).count() == 1
        assert db_session.query(Notification).count() == 0

    def test_one_badge_row_per_member(self, db_session, test_member, test_badge):
        for _ in range(2):
            db_session.add(MemberBadge(member_id=test_member.id, badge_id=test_badge.id, earned_date=local_now()))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_award_can_level_up(self, client, db_session, admin_headers, test_member, test_badge):
        test_member.total_points = 600
        test_member.experience = 600
        db_session.commit()

        res = client.post("/api/admin/badges/award", json={
            "member_id": test_member.id,
            "badge_id": test_badge.id,
        }, headers=admin_headers)
        assert res.json()["level"] == 2
        titles = {n.title for n in db_session.query(Notification).all()}
        assert "Level Up! 🎉" in titles

    def test_award_unknown_badge(self, client, admin_headers, test_member):
        res = client.post("/api/admin/badges/award", json={
            "member_id": test_member.id,
            "badge_id": 9999,
        }, headers=admin_headers)
        assert res.status_code == 404
        assert res.json()["error"] == "Badge not found"

    def test_award_requires_admin(self, client, staff_headers, test_member, test_badge):
        res = client.post("/api/admin/badges/award", json={
            "member_id": test_member.id,
            "badge_id": test_badge.id,
        }, headers=staff_headers)
        assert res.status_code == 403

    def test_profile_lists_awarded_badge(self, client, admin_headers, member_headers, test_member, test_badge):
        client.post("/api/admin/badges/award", json={
            "member_id": test_member.id,
            "badge_id": test_badge.id,
        }, headers=admin_headers)
        res = client.get(f"/api/user/profile/{test_member.id}", headers=member_headers)
        assert [b["name"] for b in res.json()["badges"]] == ["Streak Master"]


class TestBadgeCatalog:
    def test_seed_creates_full_catalog(self, db_session):
        assert seed_badges(db_session) == len(DEFAULT_BADGES) == 29
        legend = db_session.query(Badge).filter(Badge.name == "Gym Legend").one()
        assert legend.point_value == 1000

    def test_seed_is_idempotent(self, db_session):
        seed_badges(db_session)
        assert seed_badges(db_session) == 0
        assert db_session.query(Badge).count() == 29

    def test_rarity_points(self, db_session):
        seed_badges(db_session)
        for badge in db_session.query(Badge).all():
            assert badge.point_value == RARITY_POINTS[badge.rarity]

    def test_admin_lists_catalog(self, client, db_session, admin_headers):
        seed_badges(db_session)
        res = client.get("/api/admin/badges", headers=admin_headers)
        assert res.status_code == 200
        assert len(res.json()) == 29
