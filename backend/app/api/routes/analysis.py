import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import JSONResponse

from app.core.config import Settings
from app.schemas.pharma_schema import ErrorResponse, PharmaGuardResponse, SupportedDrugsResponse
from app.services.llm.prompt_builder import EXPLANATION_MODES
from app.services.pipeline.analysis_pipeline import AnalysisPipeline
from app.services.vcf.parser import TARGET_PHARMACOGENES

router = APIRouter()
logger = logging.getLogger(__name__)


def get_pipeline(request: Request) -> AnalysisPipeline:
    return request.app.state.pipeline


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post(
    "/analyze",
    response_model=PharmaGuardResponse,
    status_code=status.HTTP_200_OK,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Analyze Pharmacogenomic Risk",
    description="Upload a VCF file and specify a drug to receive a pharmacogenomic risk assessment with an explanation."
)
async def analyze_pharmacogenomics(
    file: Optional[UploadFile] = File(None, description="Patient's VCF file containing genetic variants"),
    drug: Optional[str] = Form(None, description="The name of the drug to analyze (e.g., Clopidogrel)"),
    mode: Optional[str] = Form(None, description="Explanation style: 'patient' (default) or 'expert'"),
    pipeline: AnalysisPipeline = Depends(get_pipeline),
    settings: Settings = Depends(get_app_settings),
):
    """
    Endpoint to trigger the pharmacogenomic analysis pipeline.

    - **file**: Genetic data file (VCF text)
    - **drug**: Target drug name
    - **mode**: patient | expert
    """
    if file is None:
        return _error(status.HTTP_400_BAD_REQUEST, "No VCF file provided.")

    if not drug:
        return _error(status.HTTP_400_BAD_REQUEST, "No Drug specified.")

    mode = mode or "patient"
    if mode not in EXPLANATION_MODES:
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid mode. Use 'patient' or 'expert'.")

    try:
        content = await file.read()

        if len(content) > settings.max_upload_bytes:
            return _error(
                status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                f"File too large. Maximum size is {settings.max_upload_mb} MB.",
            )

        vcf_text = content.decode("utf-8", errors="replace")
        return await pipeline.run(vcf_text, drug, mode)

    except Exception as e:
        logger.exception(f"Unexpected error in analysis pipeline: {str(e)}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")


@router.get("/drugs", response_model=SupportedDrugsResponse)
async def supported_drugs(pipeline: AnalysisPipeline = Depends(get_pipeline)):
    """Drugs with a gene mapping, and the genes the VCF parser keeps."""
    return SupportedDrugsResponse(
        supported_drugs=pipeline.risk_engine.tables.supported_drugs,
        supported_genes=sorted(TARGET_PHARMACOGENES),
    )
