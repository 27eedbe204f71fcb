"""
Unit Tests for Activity Recorder and Dashboard
"""
import pytest
from sqlalchemy import select

from drawhub.core.config import settings
from drawhub.models import ActivityLog, ActivityAction, EntityType, FileRecord, FileStatus, UserRole
from drawhub.services.activity_recorder import (
    ActivityRecorder,
    DashboardService,
    approval_rate,
    clamp_limit,
)


class TestApprovalRate:

    def test_no_files(self):
        assert approval_rate(0, 0) == 0

    def test_three_of_four(self):
        assert approval_rate(3, 4) == 75

    def test_rounds_half_up(self):
        assert approval_rate(1, 8) == 13   # 12.5
        assert approval_rate(1, 3) == 33
        assert approval_rate(2, 3) == 67

    def test_all_approved(self):
        assert approval_rate(5, 5) == 100


class TestClampLimit:

    def test_default(self):
        assert clamp_limit(None) == settings.ACTIVITY_DEFAULT_LIMIT == 10

    def test_maximum(self):
        assert clamp_limit(1000) == settings.ACTIVITY_MAX_LIMIT == 100

    def test_minimum(self):
        assert clamp_limit(0) == 1


class TestRecorder:

    async def test_record_is_part_of_callers_transaction(self, db_session, admin_user):
        recorder = ActivityRecorder(db_session)
        recorder.record(admin_user.id, ActivityAction.LOGIN, EntityType.USER, admin_user.id)
        await db_session.rollback()

        result = await db_session.execute(select(ActivityLog))
        assert result.scalars().all() == []

    async def test_recent_activity_newest_first(self, db_session, admin_user):
        recorder = ActivityRecorder(db_session)
        for action in (ActivityAction.LOGIN, ActivityAction.CREATE_PROJECT, ActivityAction.LOGOUT):
            recorder.record(admin_user.id, action, EntityType.USER, admin_user.id)
            await db_session.commit()

        rows = await recorder.recent_activity()

        assert [entry.action for entry, _ in rows] == ["logout", "create_project", "login"]
        assert all(name == admin_user.name for _, name in rows)

    async def test_limit(self, db_session, admin_user):
        recorder = ActivityRecorder(db_session)
        for _ in range(12):
            recorder.record(admin_user.id, ActivityAction.LOGIN, EntityType.USER, admin_user.id)
        await db_session.commit()

        assert len(await recorder.recent_activity()) == 10
        assert len(await recorder.recent_activity(limit=3)) == 3

    async def test_activity_for_user_filters(self, db_session, admin_user, analista_user):
        recorder = ActivityRecorder(db_session)
        recorder.record(admin_user.id, ActivityAction.LOGIN, EntityType.USER, admin_user.id)
        recorder.record(analista_user.id, ActivityAction.LOGIN, EntityType.USER, analista_user.id)
        await db_session.commit()

        rows = await recorder.activity_for_user(analista_user.id)

        assert [entry.user_id for entry, _ in rows] == [analista_user.id]

    async def test_visible_activity_scoped_by_role(self, db_session, admin_user, analista_user):
        recorder = ActivityRecorder(db_session)
        recorder.record(admin_user.id, ActivityAction.LOGIN, EntityType.USER, admin_user.id)
        recorder.record(analista_user.id, ActivityAction.LOGIN, EntityType.USER, analista_user.id)
        await db_session.commit()

        assert len(await recorder.activity_visible_to(admin_user)) == 2
        assert len(await recorder.activity_visible_to(analista_user)) == 1

    async def test_entries_are_immutable(self, db_session, admin_user):
        entry = ActivityRecorder(db_session).record(admin_user.id, ActivityAction.LOGIN, EntityType.USER)
        await db_session.commit()

        entry.action = "logout"
        with pytest.raises(RuntimeError):
            await db_session.commit()
        await db_session.rollback()

    async def test_entries_cannot_be_deleted(self, db_session, admin_user):
        entry = ActivityRecorder(db_session).record(admin_user.id, ActivityAction.LOGIN, EntityType.USER)
        await db_session.commit()

        await db_session.delete(entry)
        with pytest.raises(RuntimeError):
            await db_session.commit()
        await db_session.rollback()


class TestDashboard:

    @pytest.fixture
    def add_files(self, db_session):
        async def _add(project, uploader, statuses):
            for i, status in enumerate(statuses):
                db_session.add(FileRecord(
                    project_id=project.id,
                    uploaded_by_id=uploader.id,
                    name=f"f{i}.pdf",
                    original_name=f"f{i}.pdf",
                    base_name=f"f{i}",
                    version=1,
                    path=f"/tmp/f{i}.pdf",
                    size=1,
                    mime_type="application/pdf",
                    status=status,
                ))
            await db_session.commit()
        return _add

    async def test_empty_dashboard(self, db_session, admin_user):
        stats = await DashboardService(db_session).stats_for(admin_user)

        assert stats.total_users == 1
        assert stats.total_projects == 0
        assert stats.total_files == 0
        assert stats.approval_rate == 0

    async def test_global_stats_for_managers(self, db_session, admin_user, make_user, make_project, add_files):
        await make_user(UserRole.ANALISTA, is_active=False)
        project = await make_project(admin_user)
        await add_files(project, admin_user, [
            FileStatus.APROVADO, FileStatus.APROVADO, FileStatus.APROVADO, FileStatus.REJEITADO,
        ])

        stats = await DashboardService(db_session).stats_for(admin_user)

        assert stats.total_users == 1  # inactive users are not counted
        assert stats.total_projects == 1
        assert stats.total_files == 4
        assert stats.approved_files == 3
        assert stats.approval_rate == 75

    async def test_scoped_stats_for_other_roles(self, db_session, admin_user, make_user, make_project, add_files):
        member = await make_user(UserRole.PROJETISTA)
        colleague = await make_user(UserRole.ANALISTA)
        mine = await make_project(admin_user, assigned=[member, colleague])
        other = await make_project(admin_user)
        await add_files(mine, member, [FileStatus.APROVADO, FileStatus.PENDENTE])
        await add_files(other, admin_user, [FileStatus.APROVADO])

        stats = await DashboardService(db_session).stats_for(member)

        assert stats.total_projects == 1
        assert stats.total_files == 2
        assert stats.approval_rate == 50
        assert stats.total_users == 2

    async def test_unassigned_user_sees_zeroes(self, db_session, admin_user, analista_user, make_project):
        await make_project(admin_user)

        stats = await DashboardService(db_session).stats_for(analista_user)

        assert (stats.total_users, stats.total_projects, stats.total_files, stats.approval_rate) == (0, 0, 0, 0)
