from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, field_validator


class RiskAssessment(BaseModel):
    level: str
    confidence_score: float


class PharmacogenomicProfile(BaseModel):
    gene: Optional[str] = None
    phenotype: Optional[str] = None
    detected_variant: Optional[str] = None
    total_variants_found: int = 0
    signature_hash: str


class LLMExplanation(BaseModel):
    summary: str


class ExplainabilityTree(BaseModel):
    drug: str
    gene: Optional[str] = None
    variant: str = "None"
    phenotype: Optional[str] = None
    risk: str
    recommendation: str


class QualityMetrics(BaseModel):
    vcf_quality: str = "PASS"
    genotype_completeness: Literal["High", "Low"] = "Low"


class PharmaGuardResponse(BaseModel):
    patient_id: str
    drug: str
    timestamp: str
    mode: Literal["patient", "expert"]
    risk_assessment: RiskAssessment
    pharmacogenomic_profile: PharmacogenomicProfile
    clinical_recommendation: str
    llm_generated_explanation: LLMExplanation
    explainability_tree: ExplainabilityTree
    genomic_signature_id: str
    quality_metrics: QualityMetrics
    cache_status: Literal["HIT", "MISS"] = "MISS"

    @field_validator('timestamp')
    @classmethod
    def validate_timestamp(cls, v):
        try:
            datetime.fromisoformat(v.replace('Z', '+00:00'))
            return v
        except ValueError:
            raise ValueError("Timestamp must be a valid ISO 8601 string")


class SupportedDrugsResponse(BaseModel):
    supported_drugs: List[str]
    supported_genes: List[str]


class ErrorResponse(BaseModel):
    error: str
