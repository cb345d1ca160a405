"""Tests for database models."""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.clock import as_utc, end_of_day, start_of_day, utcnow
from app.models import (
    Assignment,
    AssignmentStatus,
    Checklist,
    ChecklistType,
    PasswordResetToken,
    User,
)

from tests.conftest import make_user


class TestUserModel:
    """Tests for the User model."""

    def test_defaults(self, session: Session):
        """Test a new user is a non-admin with no reset attempts."""
        user = make_user(session, "newbie")

        assert user.is_admin is False
        assert user.password_reset_attempt_count == 0
        assert user.last_password_reset_attempt is None
        assert user.created_at is not None

    def test_full_name(self, employee: User):
        assert employee.full_name == "Wendy Worker"

    def test_username_unique(self, session: Session, employee: User):
        """Test that usernames must be unique."""
        session.add(
            User(
                username="worker",
                first_name="Another",
                last_name="Worker",
                password_hash="x",
                security_question_1_id=1,
                security_answer_1_hash="x",
                security_question_2_id=2,
                security_answer_2_hash="x",
            )
        )
        with pytest.raises(IntegrityError):
            session.commit()


class TestChecklistModel:
    """Tests for the Checklist model."""

    def test_filename_unique(self, session: Session):
        session.add(Checklist(filename="a.html", title="A", type=ChecklistType.daily))
        session.commit()
        session.add(Checklist(filename="a.html", title="B", type=ChecklistType.weekly))
        with pytest.raises(IntegrityError):
            session.commit()

    def test_type_stored_as_value(self, session: Session, weekly_checklist: Checklist):
        retrieved = session.exec(
            select(Checklist).where(Checklist.type == ChecklistType.weekly)
        ).one()
        assert retrieved.id == weekly_checklist.id
        assert retrieved.last_assigned_at is None


class TestAssignmentModel:
    """Tests for the Assignment model."""

    def test_defaults_and_relationships(
        self, session: Session, employee: User, daily_checklists: list[Checklist]
    ):
        """Test a new assignment starts as assigned and links both sides."""
        assignment = Assignment(user_id=employee.id, checklist_id=daily_checklists[0].id)
        session.add(assignment)
        session.commit()
        session.refresh(assignment)

        assert assignment.status == AssignmentStatus.assigned
        assert assignment.completed_at is None
        assert assignment.assigned_by is None
        assert assignment.user.username == "worker"
        assert assignment.checklist.filename == daily_checklists[0].filename

        session.refresh(employee)
        assert [a.id for a in employee.assignments] == [assignment.id]

    def test_one_active_assignment_per_user(
        self, session: Session, employee: User, daily_checklists: list[Checklist]
    ):
        """The partial unique index rejects a second active assignment."""
        session.add(Assignment(user_id=employee.id, checklist_id=daily_checklists[0].id))
        session.commit()

        session.add(Assignment(user_id=employee.id, checklist_id=daily_checklists[1].id))
        with pytest.raises(IntegrityError):
            session.commit()

    def test_inactive_assignments_do_not_conflict(
        self, session: Session, employee: User, daily_checklists: list[Checklist]
    ):
        """Completed and cancelled rows can sit beside one active row."""
        for status in (AssignmentStatus.completed, AssignmentStatus.cancelled):
            session.add(
                Assignment(
                    user_id=employee.id,
                    checklist_id=daily_checklists[1].id,
                    status=status,
                )
            )
        session.add(Assignment(user_id=employee.id, checklist_id=daily_checklists[0].id))
        session.commit()

        rows = session.exec(select(Assignment).where(Assignment.user_id == employee.id)).all()
        assert len(rows) == 3

    def test_audit_relationships(
        self,
        session: Session,
        employee: User,
        admin: User,
        daily_checklists: list[Checklist],
    ):
        assignment = Assignment(
            user_id=employee.id,
            checklist_id=daily_checklists[0].id,
            status=AssignmentStatus.cancelled,
            assigned_by_user_id=admin.id,
            cancelled_by_user_id=admin.id,
            cancelled_at=utcnow(),
        )
        session.add(assignment)
        session.commit()
        session.refresh(assignment)

        assert assignment.assigned_by.id == admin.id
        assert assignment.cancelled_by.id == admin.id
        assert assignment.validator is None


class TestPasswordResetTokenModel:
    """Tests for the PasswordResetToken model."""

    def test_is_expired(self):
        now = utcnow()
        token = PasswordResetToken(
            username="worker", token="abc", expires_at=now + timedelta(minutes=5)
        )

        assert token.is_expired(now) is False
        assert token.is_expired(now + timedelta(minutes=6)) is True


class TestTimestamps:
    """Tests for UTC timestamp handling."""

    def test_utcnow_is_aware(self):
        assert utcnow().tzinfo is UTC

    def test_day_bounds_are_aware_utc(self):
        moment = datetime(2024, 3, 5, 23, 30, tzinfo=timezone(timedelta(hours=-5)))

        assert start_of_day(moment) == datetime(2024, 3, 6, tzinfo=UTC)
        assert end_of_day(date(2024, 3, 5)) == datetime(2024, 3, 5, 23, 59, 59, 999999, tzinfo=UTC)

    def test_as_utc_treats_naive_as_utc(self):
        assert as_utc(datetime(2024, 1, 1, 12)) == datetime(2024, 1, 1, 12, tzinfo=UTC)

    def test_aware_timestamps_round_trip(
        self, session: Session, employee: User, daily_checklists: list[Checklist]
    ):
        """Aware values are stored and compared without losing the instant."""
        stamp = utcnow() - timedelta(hours=2)
        assignment = Assignment(
            user_id=employee.id,
            checklist_id=daily_checklists[0].id,
            assigned_at=stamp,
        )
        session.add(assignment)
        session.commit()
        session.expire_all()

        retrieved = session.get(Assignment, assignment.id)
        assert as_utc(retrieved.assigned_at) == stamp
        assert as_utc(retrieved.created_at) > stamp

        earlier = session.exec(
            select(Assignment).where(Assignment.assigned_at < utcnow())
        ).all()
        assert [a.id for a in earlier] == [assignment.id]
