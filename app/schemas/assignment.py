from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.models import AssignmentStatus, ChecklistType, ValidationStatus


class ChecklistOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    filename: str
    title: str
    type: ChecklistType
    order: int
    last_assigned_at: datetime | None = None


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    first_name: str
    last_name: str


class AssignmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    status: AssignmentStatus
    assigned_at: datetime
    completed_at: datetime | None = None
    validated_at: datetime | None = None
    validation_status: ValidationStatus | None = None
    submission_data_file_path: str | None = None
    cancelled_at: datetime | None = None
    checklist: ChecklistOut | None = None
    user: UserSummary | None = None
    assigned_by: UserSummary | None = None
    validator: UserSummary | None = None
    cancelled_by: UserSummary | None = None


class ManualAssignRequest(BaseModel):
    user_id: str | None = None
    checklist_id: str | None = None
    override_existing: bool = False


class ManualAssignResponse(BaseModel):
    success: bool = True
    message: str
    override_performed: bool
    assignment: AssignmentOut


class CompleteChecklistRequest(BaseModel):
    checklist_filename: str | None = None
