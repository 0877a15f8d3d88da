"""Initial schema for users, contracts, tasks, notifications and audit logs."""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None

# Enum types shared with app.db.models (SQLAlchemy names them after the class)
user_role = sa.Enum("admin", "legal", "hr", "finance", "manager", "viewer", name="userrole")
contract_type = sa.Enum("supplier", "service", "employee", name="contracttype")
contract_status = sa.Enum(
    "draft", "active", "expiring_soon", "expired", "renewed", "terminated", name="contractstatus"
)
renewal_frequency = sa.Enum(
    "monthly", "quarterly", "biannual", "annual", "biennial", "custom", name="renewalfrequency"
)
task_type = sa.Enum(
    "approval", "signature", "review", "negotiation", "renewal", "termination", "custom", name="tasktype"
)
task_category = sa.Enum("general", "legal", "finance", "hr", name="taskcategory")
task_status = sa.Enum("pending", "in_progress", "completed", "overdue", "cancelled", name="taskstatus")
task_priority = sa.Enum("low", "medium", "high", "urgent", name="taskpriority")
notification_type = sa.Enum(
    "contract_expiring",
    "contract_expired",
    "contract_approval_required",
    "contract_approved",
    "contract_rejected",
    "contract_renewal_due",
    "contract_status_changed",
    "task_assigned",
    "task_due_soon",
    "task_overdue",
    "task_completed",
    "task_status_changed",
    "system_alert",
    "user_mentioned",
    name="notificationtype",
)
notification_priority = sa.Enum("low", "medium", "high", "urgent", name="notificationpriority")
notification_status = sa.Enum("unread", "read", "archived", name="notificationstatus")
audit_action = sa.Enum(
    "create", "update", "delete", "approve", "reject", "assign", "complete", "expire", name="auditaction"
)
audit_entity_type = sa.Enum("contract", "task", "comment", "user", "notification", name="auditentitytype")

ENUMS = (
    user_role,
    contract_type,
    contract_status,
    renewal_frequency,
    task_type,
    task_category,
    task_status,
    task_priority,
    notification_type,
    notification_priority,
    notification_status,
    audit_action,
    audit_entity_type,
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("role", user_role, nullable=False, server_default="viewer"),
        sa.Column("department", sa.String(length=120), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "contracts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", contract_type, nullable=False),
        sa.Column("status", contract_status, nullable=False, server_default="draft"),
        sa.Column("counterparty_name", sa.String(length=255), nullable=False),
        sa.Column("counterparty_email", sa.String(length=255), nullable=True),
        sa.Column("counterparty_phone", sa.String(length=50), nullable=True),
        sa.Column("effective_date", sa.Date(), nullable=False),
        sa.Column("expiry_date", sa.Date(), nullable=False),
        sa.Column("renewal_date", sa.Date(), nullable=True),
        sa.Column("auto_renew", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("renewal_frequency", renewal_frequency, nullable=True),
        sa.Column("renewal_notice_days", sa.Integer(), nullable=True),
        sa.Column("contract_value", sa.Numeric(15, 2), nullable=True),
        sa.Column("currency", sa.String(length=3), nullable=True),
        sa.Column("department", sa.String(length=120), nullable=True),
        sa.Column("project", sa.String(length=120), nullable=True),
        sa.Column("cost_center", sa.String(length=60), nullable=True),
        sa.Column("document_url", sa.String(length=512), nullable=True),
        sa.Column("document_type", sa.String(length=60), nullable=True),
        sa.Column("custom_fields", sa.JSON(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("owner_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("stakeholder_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_contracts_status_expiry", "contracts", ["status", "expiry_date"])
    op.create_index("idx_contracts_owner", "contracts", ["owner_id"])

    op.create_table(
        "contract_tasks",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", task_type, nullable=False),
        sa.Column("category", task_category, nullable=False, server_default="general"),
        sa.Column("status", task_status, nullable=False, server_default="pending"),
        sa.Column("priority", task_priority, nullable=False, server_default="medium"),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("completed_date", sa.Date(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column(
            "contract_id",
            sa.String(length=36),
            sa.ForeignKey("contracts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("assigned_to_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_by_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        *_timestamps(),
    )
    op.create_index("idx_tasks_status_due", "contract_tasks", ["status", "due_date"])
    op.create_index("idx_tasks_assignee", "contract_tasks", ["assigned_to_id"])

    op.create_table(
        "task_dependencies",
        sa.Column(
            "task_id",
            sa.String(length=36),
            sa.ForeignKey("contract_tasks.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "depends_on_id",
            sa.String(length=36),
            sa.ForeignKey("contract_tasks.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("type", notification_type, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("priority", notification_priority, nullable=False, server_default="medium"),
        sa.Column("status", notification_status, nullable=False, server_default="unread"),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("read_at", sa.DateTime(), nullable=True),
        sa.Column("scheduled_for", sa.DateTime(), nullable=True),
        sa.Column("email_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("email_sent_at", sa.DateTime(), nullable=True),
        sa.Column("recipient_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("sender_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column(
            "contract_id",
            sa.String(length=36),
            sa.ForeignKey("contracts.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "task_id",
            sa.String(length=36),
            sa.ForeignKey("contract_tasks.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
    )
    op.create_index("idx_notifications_recipient_created", "notifications", ["recipient_id", "created_at"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("action", audit_action, nullable=False),
        sa.Column("entity_type", audit_entity_type, nullable=False),
        sa.Column("entity_id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("old_values", sa.JSON(), nullable=True),
        sa.Column("new_values", sa.JSON(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        sa.Column("user_agent", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("idx_audit_entity", "audit_logs", ["entity_type", "entity_id"])


def downgrade() -> None:
    op.drop_index("idx_audit_entity", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("idx_notifications_recipient_created", table_name="notifications")
    op.drop_table("notifications")
    op.drop_table("task_dependencies")
    op.drop_index("idx_tasks_assignee", table_name="contract_tasks")
    op.drop_index("idx_tasks_status_due", table_name="contract_tasks")
    op.drop_table("contract_tasks")
    op.drop_index("idx_contracts_owner", table_name="contracts")
    op.drop_index("idx_contracts_status_expiry", table_name="contracts")
    op.drop_table("contracts")
    op.drop_table("users")

    # Only PostgreSQL keeps named enum types around after the tables are gone
    if op.get_bind().dialect.name == "postgresql":
        for enum_type in ENUMS:
            op.execute(f"DROP TYPE IF EXISTS {enum_type.name}")
