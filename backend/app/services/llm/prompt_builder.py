from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.services.pharmacogenomics.models import Recommendation

ExplanationMode = Literal["patient", "expert"]

EXPLANATION_MODES = ("patient", "expert")

EXPERT_SYSTEM_PROMPT = (
    "You are a clinical pharmacogenomics explanation assistant. "
    "You must only explain based on provided structured context. "
    "Do not invent dosing. Do not modify recommendations. Do not hallucinate additional variants. "
    "Explain biological mechanism, gene impact on metabolism, and why risk classification applies. "
    "Use precise clinical terminology. Be 4-6 sentences."
)

PATIENT_SYSTEM_PROMPT = (
    "You explain pharmacogenomic test results to patients in plain language. "
    "You must only explain based on provided structured context. "
    "Do not invent dosing. Do not modify recommendations. Do not hallucinate additional variants. "
    "Avoid jargon; when a technical term is needed, say what it means. "
    "Explain how the gene affects the way the body handles the medicine and what the result means for them. "
    "Remind them to talk to their doctor before changing any medication. Be 4-6 sentences."
)


class ClinicalContext(BaseModel):
    """Structured, verified facts handed to the LLM for one explanation."""
    model_config = ConfigDict(frozen=True)

    drug: str = Field(..., description="Drug name (upper case)")
    gene: str = Field(..., description="Target gene, 'Unknown' when unmapped")
    phenotype: str = Field(..., description="Metabolizer phenotype, 'Unknown' when nothing matched")
    variants: str = Field(..., description="Matched variant identifier")
    recommendation: str = Field(..., description="Clinical recommendation text")
    risk_level: str = Field(..., description="Risk label from the rule engine")
    mode: ExplanationMode = Field("patient", description="Explanation audience")


def build_clinical_context(drug: str, result: Recommendation, mode: ExplanationMode) -> ClinicalContext:
    """Transform a rule engine result into the context for the LLM."""
    return ClinicalContext(
        drug=drug.upper(),
        gene=result.gene or "Unknown",
        phenotype=result.phenotype or "Unknown",
        variants=result.detected_variant or "None detected",
        recommendation=result.recommendation or "Standard dosing",
        risk_level=result.risk_label or "Low",
        mode=mode,
    )


def build_system_prompt(mode: ExplanationMode) -> str:
    return EXPERT_SYSTEM_PROMPT if mode == "expert" else PATIENT_SYSTEM_PROMPT


def build_prompt(context: ClinicalContext) -> str:
    """
    Constructs the user prompt for the LLM from a clinical context.

    Args:
        context: Verified facts for this drug/gene result.

    Returns:
        A formatted prompt string.
    """
    if context.mode == "expert":
        ask = "Please provide a concise biological explanation for this result."
    else:
        ask = "Please explain this result to the patient in simple, reassuring language."

    return (
        f"Drug: {context.drug}\n"
        f"Gene: {context.gene}\n"
        f"Phenotype: {context.phenotype}\n"
        f"Variants: {context.variants}\n"
        f"Risk Level: {context.risk_level}\n"
        f"Clinical Recommendation: {context.recommendation}\n"
        f"\n"
        f"{ask}\n"
    )
