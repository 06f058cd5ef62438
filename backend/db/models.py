import sqlalchemy
from datetime import datetime

from core.database import metadata

# sqlite_autoincrement: ids of deleted rows are never handed out again

# Elderly profiles
elderly = sqlalchemy.Table(
    "elderly",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True, autoincrement=True),
    sqlalchemy.Column("name", sqlalchemy.String(100), nullable=False),
    sqlite_autoincrement=True,
)

# Family lookup codes, at most one per elderly profile
family_code = sqlalchemy.Table(
    "family_code",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True, autoincrement=True),
    sqlalchemy.Column("elderly_id", sqlalchemy.Integer, sqlalchemy.ForeignKey("elderly.id", ondelete="CASCADE"), unique=True, nullable=False),
    sqlalchemy.Column("code", sqlalchemy.String(32), unique=True, nullable=False),
    sqlite_autoincrement=True,
)

# Medication plans
medication_plan = sqlalchemy.Table(
    "medication_plan",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True, autoincrement=True),
    sqlalchemy.Column("elderly_id", sqlalchemy.Integer, sqlalchemy.ForeignKey("elderly.id", ondelete="CASCADE"), nullable=False, index=True),
    sqlalchemy.Column("med_name", sqlalchemy.String(255), nullable=False),
    sqlalchemy.Column("quantity", sqlalchemy.Float, nullable=False),
    sqlalchemy.Column("unit", sqlalchemy.String(50), nullable=True),
    sqlalchemy.Column("note", sqlalchemy.Text, nullable=True),
    sqlite_autoincrement=True,
)

# Times of day per plan, HH:MM
medication_time = sqlalchemy.Table(
    "medication_time",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True, autoincrement=True),
    sqlalchemy.Column("plan_id", sqlalchemy.Integer, sqlalchemy.ForeignKey("medication_plan.id", ondelete="CASCADE"), nullable=False, index=True),
    sqlalchemy.Column("time_hhmm", sqlalchemy.String(5), nullable=False),
    sqlite_autoincrement=True,
)

# Adherence check-ins
medication_record = sqlalchemy.Table(
    "medication_record",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True, autoincrement=True),
    sqlalchemy.Column("elderly_id", sqlalchemy.Integer, sqlalchemy.ForeignKey("elderly.id", ondelete="CASCADE"), nullable=False, index=True),
    sqlalchemy.Column("record_date", sqlalchemy.Date, nullable=False),
    sqlalchemy.Column("status", sqlalchemy.String(10), nullable=False),  # done, undone
    sqlalchemy.Column("created_at", sqlalchemy.DateTime, nullable=False, default=datetime.now),
    sqlalchemy.Column("record_time", sqlalchemy.String(5), nullable=True),
    sqlite_autoincrement=True,
)

# Anonymous caller -> default elderly profile
user_settings = sqlalchemy.Table(
    "user_settings",
    metadata,
    sqlalchemy.Column("user_id", sqlalchemy.String(64), primary_key=True),
    sqlalchemy.Column("default_elderly_id", sqlalchemy.Integer, sqlalchemy.ForeignKey("elderly.id", ondelete="SET NULL"), nullable=True),
    sqlalchemy.Column("updated_at", sqlalchemy.DateTime, nullable=True, default=datetime.now, onupdate=datetime.now),
)
