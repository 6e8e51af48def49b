from pydantic import BaseModel, Field
from typing import Dict, List

from pharmaguard.services.vcf.parser import AnnotatedVariant


SECTION_KEYS = ("summary", "mechanism", "risk_rationale", "patient_friendly")


class ExplanationSections(BaseModel):
    """
    Four-part clinical explanation returned to the report-assembly layer.
    All four fields are always present; a section that could not be
    produced is an empty string, never None.
    """
    summary: str = Field(default="", description="Concise clinical summary and significance")
    mechanism: str = Field(default="", description="Molecular/enzymatic mechanism")
    risk_rationale: str = Field(default="", description="Why this phenotype creates the identified risk")
    patient_friendly: str = Field(default="", description="Jargon-free explanation for the patient")

    def as_dict(self) -> Dict[str, str]:
        return self.model_dump()

    def is_complete(self) -> bool:
        return all(getattr(self, key) for key in SECTION_KEYS)


class ExplanationRequest(BaseModel):
    """
    Context for one explanation. risk_label is produced by the external
    risk-assessment component and is passed through uninterpreted.
    """
    drug: str = Field(..., description="Drug name (e.g., WARFARIN)")
    phenotype: str = Field(..., description="Metabolizer phenotype code (PM, IM, NM, RM, Unknown)")
    risk_label: str = Field(default="", description="Opaque risk label from the risk assessment")
    gene: str = Field(..., description="Primary gene symbol (e.g., CYP2C9)")
    variants: List[AnnotatedVariant] = Field(
        default_factory=list,
        description="Annotated variants used as prompt context only"
    )
