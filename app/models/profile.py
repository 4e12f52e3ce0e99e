from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy import Column, Integer, Numeric, DateTime, ForeignKey
from app.database import Base

class EmployeeScoreProfile(Base):
    __tablename__ = "employee_score_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    performance = Column(Numeric(5, 2), nullable=False, default=Decimal("100.00"))    # 0–100
    current_workload = Column(Numeric(5, 2), nullable=False, default=Decimal("0.00"))  # 0–100, derived
    accepted_streak = Column(Integer, nullable=False, default=0)                     # 0 or 1
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
