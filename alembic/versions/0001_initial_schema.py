"""initial schema: users, classrooms, enrollments, games, assignments, attempts

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute("CREATE TYPE user_role AS ENUM ('TEACHER', 'STUDENT')")
    op.execute("CREATE TYPE game_difficulty AS ENUM ('EASY', 'MEDIUM', 'HARD')")
    op.execute("CREATE TYPE attempt_status AS ENUM ('IN_PROGRESS', 'COMPLETED')")

    op.create_table(
        "users",
        sa.Column("id", sa.String(128), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("role", postgresql.ENUM("TEACHER", "STUDENT", name="user_role", create_type=False), nullable=False),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        sa.Column("theme_preference", sa.String(20), nullable=False, server_default="LIGHT"),
        sa.Column("level", sa.Integer(), nullable=True),
        sa.Column("current_xp", sa.BigInteger(), nullable=True),
        sa.Column("xp_to_next_level", sa.BigInteger(), nullable=True),
        sa.Column("student_of_classrooms", sa.JSON(), nullable=False, server_default="[]"),
        sa.Column("teacher_of_classrooms", sa.JSON(), nullable=False, server_default="[]"),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_role"), "users", ["role"], unique=False)

    op.create_table(
        "classrooms",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("teacher_id", sa.String(128), nullable=False),
        sa.Column("teacher_name", sa.String(100), nullable=True),
        sa.Column("unique_code", sa.String(8), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("icon_url", sa.String(500), nullable=True),
        sa.Column("student_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("activity_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["teacher_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_classrooms_teacher_id"), "classrooms", ["teacher_id"], unique=False)
    op.create_index(op.f("ix_classrooms_unique_code"), "classrooms", ["unique_code"], unique=True)

    op.create_table(
        "classroom_enrollments",
        sa.Column("classroom_id", sa.String(36), nullable=False),
        sa.Column("student_id", sa.String(128), nullable=False),
        sa.Column("student_name", sa.String(100), nullable=True),
        sa.Column("student_email", sa.String(255), nullable=True),
        sa.Column("date_enrolled", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["classroom_id"], ["classrooms.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["student_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("classroom_id", "student_id"),
    )
    op.create_index(
        op.f("ix_classroom_enrollments_student_id"), "classroom_enrollments", ["student_id"], unique=False
    )

    op.create_table(
        "games",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("grade_level", sa.Integer(), nullable=True),
        sa.Column(
            "difficulty",
            postgresql.ENUM("EASY", "MEDIUM", "HARD", name="game_difficulty", create_type=False),
            nullable=True,
        ),
        sa.Column("game_url_or_identifier", sa.String(500), nullable=True),
        sa.Column("max_xp_awarded", sa.Integer(), nullable=True),
        sa.Column("total_points_possible", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "assigned_games",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("classroom_id", sa.String(36), nullable=False),
        sa.Column("library_game_id", sa.String(36), nullable=False),
        sa.Column("game_title", sa.String(255), nullable=False),
        sa.Column("game_description", sa.Text(), nullable=True),
        sa.Column("game_url_or_identifier", sa.String(500), nullable=True),
        sa.Column("max_xp_awarded", sa.Integer(), nullable=True),
        sa.Column("total_points_possible", sa.Integer(), nullable=True),
        sa.Column("due_date", sa.DateTime(), nullable=True),
        sa.Column("max_attempts_allowed", sa.Integer(), nullable=True),
        sa.Column("date_assigned", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["classroom_id"], ["classrooms.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_assigned_games_classroom_id"), "assigned_games", ["classroom_id"], unique=False)
    op.create_index(op.f("ix_assigned_games_library_game_id"), "assigned_games", ["library_game_id"], unique=False)

    op.create_table(
        "student_game_attempts",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("student_id", sa.String(128), nullable=False),
        sa.Column("classroom_id", sa.String(36), nullable=False),
        sa.Column("assigned_game_id", sa.String(36), nullable=False),
        sa.Column("library_game_id", sa.String(36), nullable=True),
        sa.Column("score", sa.Integer(), nullable=True),
        sa.Column("total_points_possible", sa.Integer(), nullable=True),
        sa.Column("xp_earned", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column(
            "status",
            postgresql.ENUM("IN_PROGRESS", "COMPLETED", name="attempt_status", create_type=False),
            nullable=False,
        ),
        sa.Column("started_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("completed_at", sa.DateTime(), nullable=True, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_student_game_attempts_student_id"), "student_game_attempts", ["student_id"], unique=False)
    op.create_index(
        op.f("ix_student_game_attempts_classroom_id"), "student_game_attempts", ["classroom_id"], unique=False
    )
    op.create_index(
        "ix_attempts_student_assigned_game", "student_game_attempts", ["student_id", "assigned_game_id"], unique=False
    )
    op.create_index(
        "ix_attempts_classroom_assigned_game", "student_game_attempts", ["classroom_id", "assigned_game_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_attempts_classroom_assigned_game", table_name="student_game_attempts")
    op.drop_index("ix_attempts_student_assigned_game", table_name="student_game_attempts")
    op.drop_index(op.f("ix_student_game_attempts_classroom_id"), table_name="student_game_attempts")
    op.drop_index(op.f("ix_student_game_attempts_student_id"), table_name="student_game_attempts")
    op.drop_table("student_game_attempts")

    op.drop_index(op.f("ix_assigned_games_library_game_id"), table_name="assigned_games")
    op.drop_index(op.f("ix_assigned_games_classroom_id"), table_name="assigned_games")
    op.drop_table("assigned_games")

    op.drop_table("games")

    op.drop_index(op.f("ix_classroom_enrollments_student_id"), table_name="classroom_enrollments")
    op.drop_table("classroom_enrollments")

    op.drop_index(op.f("ix_classrooms_unique_code"), table_name="classrooms")
    op.drop_index(op.f("ix_classrooms_teacher_id"), table_name="classrooms")
    op.drop_table("classrooms")

    op.drop_index(op.f("ix_users_role"), table_name="users")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")

    op.execute("DROP TYPE attempt_status")
    op.execute("DROP TYPE game_difficulty")
    op.execute("DROP TYPE user_role")
