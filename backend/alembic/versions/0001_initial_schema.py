"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=True),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "patients",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("gender", sa.String(20), nullable=True),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_patients_user_id", "patients", ["user_id"], unique=True)

    op.create_table(
        "doctors",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("specialty", sa.String(100), nullable=True),
        sa.Column("qualifications", sa.Text(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_doctors_user_id", "doctors", ["user_id"])

    op.create_table(
        "staff",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("role", sa.String(100), nullable=True),
        sa.Column("department", sa.String(100), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_staff_user_id", "staff", ["user_id"])

    op.create_table(
        "appointments",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("patient_id", sa.String(), sa.ForeignKey("patients.id"), nullable=True),
        sa.Column("doctor_id", sa.String(), sa.ForeignKey("doctors.id"), nullable=True),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_appointments_patient_id", "appointments", ["patient_id"])
    op.create_index("ix_appointments_doctor_id", "appointments", ["doctor_id"])

    op.create_table(
        "patient_history",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("patient_id", sa.String(), sa.ForeignKey("patients.id"), nullable=False),
        sa.Column("appointment_id", sa.String(), sa.ForeignKey("appointments.id"), nullable=True),
        sa.Column("recorded_by", sa.String(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("record_type", sa.String(50), nullable=False),
        sa.Column("title", sa.String(200), nullable=True),
        sa.Column("body", sa.Text(), nullable=True),
        sa.Column("tags", sa.String(500), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_patient_history_patient_id", "patient_history", ["patient_id"])

    # rooms.current_assignment_id <-> room_assignments.room_id is a cycle;
    # the rooms side of the FK is added once both tables exist.
    op.create_table(
        "rooms",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("room_number", sa.String(50), nullable=False),
        sa.Column("ward", sa.String(100), nullable=False, server_default="General"),
        sa.Column("bed_label", sa.String(50), nullable=True),
        sa.Column("room_type", sa.String(50), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("current_patient_id", sa.String(), sa.ForeignKey("patients.id"), nullable=True),
        sa.Column("current_assignment_id", sa.String(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("ward", "room_number", name="uq_rooms_ward_room_number"),
    )

    op.create_table(
        "room_assignments",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("room_id", sa.String(), sa.ForeignKey("rooms.id"), nullable=False),
        sa.Column("patient_id", sa.String(), sa.ForeignKey("patients.id"), nullable=False),
        sa.Column("admitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("vacated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("assigned_by", sa.String(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("vacated_by", sa.String(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_room_assignments_room_id", "room_assignments", ["room_id"])
    op.create_index("ix_room_assignments_patient_id", "room_assignments", ["patient_id"])

    # SQLite cannot ALTER in a constraint; dev databases go without it
    if op.get_bind().dialect.name != "sqlite":
        op.create_foreign_key(
            "fk_rooms_current_assignment_id",
            "rooms",
            "room_assignments",
            ["current_assignment_id"],
            ["id"],
        )

    op.create_table(
        "medicines",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("brand", sa.String(200), nullable=True),
        sa.Column("batch_no", sa.String(100), nullable=True),
        sa.Column("expiry_date", sa.Date(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit", sa.String(30), nullable=False),
        sa.Column("min_threshold", sa.Integer(), nullable=False),
        sa.Column("location", sa.String(100), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("quantity >= 0", name="ck_medicines_quantity_non_negative"),
    )
    op.create_index("ix_medicines_name", "medicines", ["name"])

    op.create_table(
        "medicine_issues",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("medicine_id", sa.String(), sa.ForeignKey("medicines.id"), nullable=False),
        sa.Column("patient_id", sa.String(), sa.ForeignKey("patients.id"), nullable=False),
        sa.Column("issued_by", sa.String(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("instructions", sa.Text(), nullable=True),
        sa.Column("source_batch", sa.String(100), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("quantity > 0", name="ck_medicine_issues_quantity_positive"),
    )
    op.create_index("ix_medicine_issues_medicine_id", "medicine_issues", ["medicine_id"])
    op.create_index("ix_medicine_issues_patient_id", "medicine_issues", ["patient_id"])

    op.create_table(
        "admissions",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("patient_id", sa.String(), sa.ForeignKey("patients.id"), nullable=False),
        sa.Column("doctor_id", sa.String(), sa.ForeignKey("doctors.id"), nullable=True),
        sa.Column("admitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("discharged_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("diagnosis", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_admissions_patient_id", "admissions", ["patient_id"])
    op.create_index("ix_admissions_doctor_id", "admissions", ["doctor_id"])

    op.create_table(
        "treatments",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("patient_id", sa.String(), sa.ForeignKey("patients.id"), nullable=False),
        sa.Column("doctor_id", sa.String(), sa.ForeignKey("doctors.id"), nullable=True),
        sa.Column("admission_id", sa.String(), sa.ForeignKey("admissions.id"), nullable=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_treatments_patient_id", "treatments", ["patient_id"])
    op.create_index("ix_treatments_doctor_id", "treatments", ["doctor_id"])
    op.create_index("ix_treatments_admission_id", "treatments", ["admission_id"])


def downgrade() -> None:
    op.drop_table("treatments")
    op.drop_table("admissions")
    op.drop_table("medicine_issues")
    op.drop_table("medicines")
    if op.get_bind().dialect.name != "sqlite":
        op.drop_constraint("fk_rooms_current_assignment_id", "rooms", type_="foreignkey")
    op.drop_table("room_assignments")
    op.drop_table("rooms")
    op.drop_table("patient_history")
    op.drop_table("appointments")
    op.drop_table("staff")
    op.drop_table("doctors")
    op.drop_table("patients")
    op.drop_table("users")
