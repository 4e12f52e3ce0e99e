from pydantic import BaseModel

class ScoreSummaryResponse(BaseModel):
    employee_id: int
    performance: float       # 0–100
    current_workload: float  # 0–100
    accepted_streak: int
    active_count: int
    can_assign: bool
    is_eligible_for_assignment: bool
