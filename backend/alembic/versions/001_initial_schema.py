"""Initial schema - reference data, gradebook, attendance, workflows, audit and report history.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _flag(name: str) -> sa.Column:
    return sa.Column(name, sa.Boolean, nullable=False, server_default=sa.false())


def upgrade() -> None:
    op.create_table(
        "students",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("student_number", sa.String(32), nullable=False, unique=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("grade_level", sa.String(30), nullable=False),
        sa.Column("active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "staff_users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(64), nullable=False, unique=True),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "courses",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(32), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("term", sa.String(30), nullable=True),
        *_timestamps(),
    )

    # ─── Gradebook ──────────────────────────────────────────────

    op.create_table(
        "assignments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "course_id", sa.Integer,
            sa.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column("max_points", sa.Float, nullable=False, server_default="100"),
        sa.Column("weight", sa.Float, nullable=False, server_default="1"),
        sa.Column("term", sa.String(30), nullable=True),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        _flag("published"),
        sa.Column("created_by", sa.String(64), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_assignments_course_id", "assignments", ["course_id"])

    op.create_table(
        "assignment_grades",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "assignment_id", sa.Integer,
            sa.ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("student_id", sa.Integer, sa.ForeignKey("students.id"), nullable=False),
        sa.Column("score", sa.Float, nullable=True),
        sa.Column("percentage", sa.Float, nullable=True),
        sa.Column("letter_grade", sa.String(2), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("comments", sa.Text, nullable=True),
        sa.Column("excused_reason", sa.Text, nullable=True),
        sa.Column("graded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("graded_by", sa.String(64), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("assignment_id", "student_id", name="uq_grade_assignment_student"),
    )
    op.create_index("ix_assignment_grades_assignment_id", "assignment_grades", ["assignment_id"])
    op.create_index("ix_assignment_grades_student_id", "assignment_grades", ["student_id"])

    # ─── Attendance ─────────────────────────────────────────────

    op.create_table(
        "attendance_records",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("student_id", sa.Integer, sa.ForeignKey("students.id"), nullable=False),
        sa.Column("attendance_date", sa.Date, nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("recorded_by", sa.String(64), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("student_id", "attendance_date", name="uq_attendance_student_date"),
    )
    op.create_index("ix_attendance_records_student_id", "attendance_records", ["student_id"])
    op.create_index(
        "ix_attendance_records_attendance_date", "attendance_records", ["attendance_date"],
    )

    # ─── Enrollment workflows ───────────────────────────────────

    op.create_table(
        "pre_registrations",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("registration_number", sa.String(20), nullable=False, unique=True),
        sa.Column("student_id", sa.Integer, sa.ForeignKey("students.id"), nullable=False),
        sa.Column("target_school_year", sa.String(9), nullable=False),
        sa.Column("current_grade", sa.String(30), nullable=True),
        sa.Column("next_grade", sa.String(30), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="DRAFT"),
        sa.Column("parent_name", sa.String(200), nullable=True),
        sa.Column("parent_phone", sa.String(30), nullable=True),
        sa.Column("parent_email", sa.String(200), nullable=True),
        sa.Column("current_address", sa.String(500), nullable=True),
        _flag("address_changed"),
        sa.Column("new_address", sa.String(500), nullable=True),
        _flag("emergency_contacts_verified"),
        _flag("interested_in_ap_honors"),
        _flag("interested_in_dual_enrollment"),
        _flag("interested_in_cte"),
        _flag("interested_in_athletics"),
        _flag("interested_in_fine_arts"),
        _flag("interested_in_stem"),
        _flag("continue_iep"),
        _flag("continue_504"),
        _flag("continue_esl"),
        sa.Column("language_proficiency_level", sa.String(30), nullable=True),
        _flag("continue_gifted"),
        _flag("needs_special_transportation"),
        sa.Column("transportation_type", sa.String(50), nullable=True),
        sa.Column("medical_accommodations", sa.Text, nullable=True),
        sa.Column("lunch_program_status", sa.String(30), nullable=True),
        _flag("needs_lunch_application"),
        _flag("technology_fee_waiver_requested"),
        _flag("activity_fee_waiver_requested"),
        sa.Column("estimated_total_fees", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("preferred_start_time", sa.String(20), nullable=True),
        _flag("study_hall_preference"),
        sa.Column("lunch_period_preference", sa.String(20), nullable=True),
        _flag("early_bird_interest"),
        _flag("after_school_interest"),
        sa.Column("scheduling_notes", sa.Text, nullable=True),
        _flag("acknowledged_accuracy"),
        _flag("acknowledged_policies"),
        sa.Column("parent_signature", sa.String(200), nullable=True),
        sa.Column("signature_date", sa.Date, nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_by", sa.String(64), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.Text, nullable=True),
        sa.Column("cancellation_reason", sa.Text, nullable=True),
        sa.Column(
            "created_by_staff_id", sa.Integer, sa.ForeignKey("staff_users.id"), nullable=True,
        ),
        sa.Column("created_by", sa.String(64), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_pre_registrations_student_id", "pre_registrations", ["student_id"])
    op.create_index(
        "ix_pre_registrations_target_school_year", "pre_registrations", ["target_school_year"],
    )

    op.create_table(
        "re_enrollments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("re_enrollment_number", sa.String(20), nullable=False, unique=True),
        sa.Column("student_id", sa.Integer, sa.ForeignKey("students.id"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="DRAFT"),
        sa.Column("previous_enrollment_date", sa.Date, nullable=True),
        sa.Column("previous_withdrawal_date", sa.Date, nullable=True),
        sa.Column("previous_grade", sa.String(30), nullable=True),
        sa.Column("withdrawal_reason", sa.String(20), nullable=True),
        sa.Column("withdrawal_details", sa.Text, nullable=True),
        sa.Column("first_enrollment_date", sa.Date, nullable=True),
        sa.Column("total_previous_enrollments", sa.Integer, nullable=False, server_default="0"),
        sa.Column("requested_grade", sa.String(30), nullable=False),
        sa.Column("intended_enrollment_date", sa.Date, nullable=False),
        sa.Column("months_away", sa.Integer, nullable=True),
        sa.Column("counselor_id", sa.Integer, sa.ForeignKey("staff_users.id"), nullable=True),
        _flag("transcript_reviewed"),
        _flag("immunizations_reviewed"),
        _flag("health_records_reviewed"),
        _flag("discipline_records_reviewed"),
        _flag("special_education_reviewed"),
        sa.Column("records_review_date", sa.Date, nullable=True),
        sa.Column("records_reviewed_by", sa.String(64), nullable=True),
        _flag("has_outstanding_fees"),
        sa.Column("outstanding_fee_amount", sa.Numeric(10, 2), nullable=True),
        _flag("fees_paid"),
        sa.Column("counselor_decision", sa.String(20), nullable=True),
        sa.Column("counselor_notes", sa.Text, nullable=True),
        sa.Column("counselor_decision_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("principal_id", sa.Integer, sa.ForeignKey("staff_users.id"), nullable=True),
        sa.Column("principal_decision", sa.String(20), nullable=True),
        sa.Column("principal_notes", sa.Text, nullable=True),
        sa.Column("principal_decision_date", sa.DateTime(timezone=True), nullable=True),
        _flag("conditional_approval"),
        sa.Column("conditions", sa.Text, nullable=True),
        _flag("behavioral_contract_required"),
        _flag("academic_plan_required"),
        sa.Column("academic_plan_details", sa.Text, nullable=True),
        _flag("probation_required"),
        sa.Column("probation_days", sa.Integer, nullable=True),
        sa.Column("approval_date", sa.Date, nullable=True),
        sa.Column("rejection_reason", sa.Text, nullable=True),
        sa.Column("assigned_grade", sa.String(30), nullable=True),
        sa.Column("homeroom", sa.String(30), nullable=True),
        sa.Column("enrollment_completed_date", sa.Date, nullable=True),
        _flag("academic_interview_required"),
        sa.Column("special_circumstances", sa.Text, nullable=True),
        sa.Column("administrative_notes", sa.Text, nullable=True),
        sa.Column(
            "created_by_staff_id", sa.Integer, sa.ForeignKey("staff_users.id"), nullable=True,
        ),
        sa.Column("created_by", sa.String(64), nullable=True),
        sa.Column("updated_by", sa.String(64), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_re_enrollments_student_id", "re_enrollments", ["student_id"])
    op.create_index("ix_re_enrollments_status", "re_enrollments", ["status"])
    op.create_index("ix_re_enrollments_counselor_id", "re_enrollments", ["counselor_id"])

    # ─── Audit & report history ─────────────────────────────────

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("action", sa.String(20), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.String(64), nullable=True),
        sa.Column("actor", sa.String(64), nullable=False),
        sa.Column("details", sa.JSON, nullable=True),
        sa.Column("success", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("severity", sa.String(10), nullable=False, server_default="INFO"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_audit_logs_entity_type", "audit_logs", ["entity_type"])
    op.create_index("ix_audit_logs_entity_id", "audit_logs", ["entity_id"])
    op.create_index("ix_audit_logs_actor", "audit_logs", ["actor"])

    op.create_table(
        "report_history",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("report_type", sa.String(30), nullable=False),
        sa.Column("report_format", sa.String(10), nullable=False),
        sa.Column("parameters", sa.JSON, nullable=True),
        sa.Column("filename", sa.String(255), nullable=True),
        sa.Column("size_bytes", sa.Integer, nullable=False, server_default="0"),
        sa.Column("generated_by", sa.String(64), nullable=False),
        sa.Column("status", sa.String(10), nullable=False),
        sa.Column("error_message", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_report_history_report_type", "report_history", ["report_type"])


def downgrade() -> None:
    op.drop_table("report_history")
    op.drop_table("audit_logs")
    op.drop_table("re_enrollments")
    op.drop_table("pre_registrations")
    op.drop_table("attendance_records")
    op.drop_table("assignment_grades")
    op.drop_table("assignments")
    op.drop_table("courses")
    op.drop_table("staff_users")
    op.drop_table("students")
