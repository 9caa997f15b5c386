"""
Internal data models for pharmacogenomics service.
These models represent the lookup tables loaded at startup and the
rule engine's recommendation output.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PhenotypeRule(BaseModel):
    """Clinical guidance for one drug/phenotype pair."""
    model_config = ConfigDict(frozen=True)

    risk_label: str = Field(..., description="Risk classification label (e.g. HIGH)")
    severity: str = Field(..., description="Severity: none, low, moderate, high, critical")
    recommendation: str = Field(..., description="Recommendation text")


class LookupTables(BaseModel):
    """Static drug → gene → phenotype → rule tables."""
    model_config = ConfigDict(frozen=True)

    drug_gene: Dict[str, str] = Field(
        default_factory=dict,
        description="Drug (upper case) → target gene"
    )
    gene_variants: Dict[str, Dict[str, str]] = Field(
        default_factory=dict,
        description="Gene → {star allele or rsID → phenotype}"
    )
    phenotype_rules: Dict[str, Dict[str, PhenotypeRule]] = Field(
        default_factory=dict,
        description="Drug (upper case) → {phenotype → rule}"
    )

    @field_validator("drug_gene", "phenotype_rules", mode="before")
    @classmethod
    def _upper_drug_keys(cls, v):
        if isinstance(v, dict):
            return {str(k).upper(): val for k, val in v.items()}
        return v

    @property
    def supported_drugs(self) -> List[str]:
        return sorted(self.drug_gene)


class Recommendation(BaseModel):
    """Rule engine result for a drug against a parsed VCF."""
    model_config = ConfigDict(frozen=True)

    risk_label: str = Field(..., description="Risk classification label, 'Unknown' when nothing matched")
    severity: str = Field(..., description="Clinical severity level")
    recommendation: str = Field(..., description="Recommendation text or the reason nothing matched")
    phenotype: Optional[str] = Field(None, description="Matched metabolizer phenotype")
    gene: Optional[str] = Field(None, description="Target gene for the drug")
    detected_variant: Optional[str] = Field(None, description="Star allele or rsID that matched")
    confidence_score: float = Field(..., ge=0.0, le=1.0, description="Confidence score (0-1)")
