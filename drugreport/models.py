from datetime import datetime, timezone
from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator


class DrugComponent(BaseModel):
    name: str

class RegistryRecord(BaseModel):
    product_name: str
    registration_number: str
    raw_ingredient_text: str = ""

class DrugAnalysisInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    drug_name: str = Field(alias="drugName")
    medical_conditions: Optional[str] = Field(default=None, alias="medicalConditions")

class Report(BaseModel):
    """Terminal artifact of one successful pipeline run."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    drug_name: str = Field(alias="drugName")  # as queried: name or NAFDAC number
    product_name: Optional[str] = Field(default=None, alias="productName")
    registration_number: Optional[str] = Field(default=None, alias="nafdacNo")
    components: List[DrugComponent]
    side_effects: List[str] = Field(default_factory=list, alias="sideEffects")
    ai_summary: str = Field(alias="aiSummary")
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @field_validator("components")
    @classmethod
    def components_not_empty(cls, value: List[DrugComponent]) -> List[DrugComponent]:
        if not value:
            raise ValueError("a report needs at least one component")
        return value

class ReportError(BaseModel):
    error: str

ReportResult = Union[Report, ReportError]

# Structured outputs for the generative templates

class SideEffectBullet(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    bullet_point: str = Field(alias="bulletPoint")

class ReportSummary(BaseModel):
    summary: str

class ExtractedDrugName(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    drug_name: str = Field(default="", alias="drugName")

class ExtractDrugInfoInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    photo_data_uri: str = Field(alias="photoDataUri")

class SynthesisResult(BaseModel):
    summary: str
    generated: bool
