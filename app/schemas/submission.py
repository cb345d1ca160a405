from pydantic import BaseModel, ConfigDict, Field


class CheckboxCorrection(BaseModel):
    id: str
    checked: bool


class ValidationSubmit(BaseModel):
    """Supervisor corrections; accepts the camelCase keys the form posts."""
    model_config = ConfigDict(populate_by_name=True)

    supervisor_name: str = Field(default="", alias="supervisorName")
    validated_checkboxes: list[CheckboxCorrection] = Field(
        default_factory=list, alias="validatedCheckboxes"
    )
