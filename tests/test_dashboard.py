"""Tests for dashboard rollups."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from app.db.models import ContractStatus, ContractType, Notification, NotificationType, TaskStatus, UserRole


class TestScope:
    def test_viewer_sees_owned_contracts_and_related_tasks(
        self, services, make_user, make_contract, make_task
    ):
        viewer = make_user(UserRole.viewer)
        manager = make_user(UserRole.manager)
        mine = make_contract(viewer)
        theirs = make_contract(manager, type=ContractType.supplier)
        make_task(mine, manager, title="On my contract")
        make_task(theirs, manager, title="Assigned to me", assigned_to_id=viewer.id)
        make_task(theirs, manager, title="Not mine")

        stats = services.dashboard.get_stats(viewer)

        assert stats["contracts"]["total"] == 1
        assert stats["contracts"]["by_type"]["service"] == 1
        assert stats["contracts"]["by_type"]["supplier"] == 0
        assert stats["tasks"]["total"] == 2
        assert {t.title for t in stats["recent_tasks"]} == {"On my contract", "Assigned to me"}

    def test_admin_sees_everything(self, services, make_user, make_contract, make_task):
        admin = make_user(UserRole.admin)
        manager = make_user(UserRole.manager)
        contract = make_contract(manager)
        make_contract(manager, status=ContractStatus.draft)
        make_task(contract, manager)

        stats = services.dashboard.get_stats(admin)

        assert stats["contracts"]["total"] == 2
        assert stats["contracts"]["by_status"]["active"] == 1
        assert stats["contracts"]["by_status"]["draft"] == 1
        assert stats["contracts"]["by_status"]["expired"] == 0
        assert stats["tasks"]["total"] == 1
        assert stats["tasks"]["by_status"]["pending"] == 1


class TestLists:
    def test_expiring_and_overdue(self, services, clock, make_user, make_contract, make_task):
        admin = make_user(UserRole.admin)
        today = clock.today()
        later = make_contract(admin, title="Later", expiry_date=today + timedelta(days=20))
        sooner = make_contract(admin, title="Sooner", expiry_date=today + timedelta(days=5))
        make_contract(admin, title="Far", expiry_date=today + timedelta(days=45))
        make_contract(admin, title="Lapsed", expiry_date=today - timedelta(days=1))
        make_contract(admin, title="Draft", status=ContractStatus.draft, expiry_date=today + timedelta(days=3))
        late = make_task(sooner, admin, title="Late", due_date=today - timedelta(days=2))
        make_task(sooner, admin, title="Due today", due_date=today)
        make_task(sooner, admin, title="Done late", status=TaskStatus.completed, due_date=today - timedelta(days=2))

        stats = services.dashboard.get_stats(admin)

        assert [c.id for c in stats["expiring_contracts"]] == [sooner.id, later.id]
        assert [t.id for t in stats["overdue_tasks"]] == [late.id]
        assert stats["tasks"]["overdue"] == 1

    def test_recent_lists_are_capped(self, services, make_user, make_contract):
        admin = make_user(UserRole.admin)
        for i in range(7):
            make_contract(admin, title=f"Contract {i}")

        stats = services.dashboard.get_stats(admin)

        assert stats["contracts"]["total"] == 7
        assert stats["contracts"]["this_month"] == 7
        assert len(stats["recent_contracts"]) == 5


class TestNotificationCounts:
    def test_counts_only_own_notifications(self, services, make_user):
        user = make_user(UserRole.viewer)
        other = make_user(UserRole.viewer)
        for recipient in (user, user, other):
            services.fanout.create_notification(
                type=NotificationType.system_alert,
                title="Heads up",
                message="Something happened.",
                recipient=recipient,
            )
        first = services.fanout.get_user_notifications(user.id)[0]
        services.fanout.mark_as_read(first.id, user.id)

        counts = services.dashboard.get_stats(user)["notifications"]

        assert counts == {"total": 2, "unread": 1, "this_week": 2}

    def test_old_notifications_fall_out_of_the_week(self, services, db_session, clock, make_user):
        user = make_user(UserRole.viewer)
        note = services.fanout.create_notification(
            type=NotificationType.system_alert, title="Old", message="Old news.", recipient=user
        )
        note.created_at = clock.now() - timedelta(days=10)
        db_session.flush()

        counts = services.dashboard.get_stats(user)["notifications"]

        assert counts["total"] == 1
        assert counts["this_week"] == 0
        assert db_session.get(Notification, note.id) is not None


class TestValueAnalytics:
    def test_only_active_contracts_and_missing_values_are_zero(self, services, make_user, make_contract):
        admin = make_user(UserRole.admin)
        make_contract(admin, contract_value=Decimal("1500.50"))
        make_contract(admin, type=ContractType.supplier, contract_value=Decimal("499.50"))
        make_contract(admin, type=ContractType.employee, contract_value=None)
        make_contract(admin, status=ContractStatus.draft, contract_value=Decimal("9999"))

        value = services.dashboard.get_value_analytics(admin)

        assert value["total_value"] == 2000.0
        assert value["value_by_type"] == {"supplier": 499.5, "service": 1500.5, "employee": 0.0}
        assert value["contract_count"] == 3

    def test_scoped_to_owner_for_viewers(self, services, make_user, make_contract):
        viewer = make_user(UserRole.viewer)
        manager = make_user(UserRole.manager)
        make_contract(viewer, contract_value=Decimal("100"))
        make_contract(manager, contract_value=Decimal("900"))

        assert services.dashboard.get_value_analytics(viewer)["total_value"] == 100.0
        assert services.dashboard.get_value_analytics(make_user(UserRole.finance))["total_value"] == 1000.0
