import asyncio
import logging
import time
from typing import Optional, Protocol

from app.services.llm.prompt_builder import ClinicalContext, build_prompt, build_system_prompt

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 8.0

# Both contain the cache failure marker ("temporarily unavailable")
EMPTY_EXPLANATION_FALLBACK = "Explanation temporarily unavailable."
SERVICE_DISRUPTION_FALLBACK = "Explanation temporarily unavailable due to service disruption."


class TextGenerator(Protocol):
    async def generate_text(self, prompt: str, system_prompt: Optional[str] = None) -> Optional[str]:
        ...


class ExplanationService:
    """
    Produces the natural-language explanation for a clinical context.

    The generator call is raced against a timeout. A timeout, an error or an
    empty answer yields a fixed fallback string; nothing is raised.
    """

    def __init__(self, generator: TextGenerator, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS):
        self.generator = generator
        self.timeout_seconds = timeout_seconds

    async def generate_explanation(self, context: ClinicalContext) -> str:
        logger.info("Generating %s explanation for %s/%s", context.mode, context.drug, context.gene)
        llm_start_time = time.time()

        try:
            explanation = await asyncio.wait_for(
                self.generator.generate_text(
                    build_prompt(context),
                    system_prompt=build_system_prompt(context.mode),
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error("LLM generation timed out after %.1fs", self.timeout_seconds)
            return SERVICE_DISRUPTION_FALLBACK
        except Exception as e:
            # Safety net
            logger.error(f"LLM generation error: {str(e)}")
            return SERVICE_DISRUPTION_FALLBACK

        if not explanation or not explanation.strip():
            logger.warning("LLM fallback triggered: empty response")
            return EMPTY_EXPLANATION_FALLBACK

        logger.info("LLM generation time: %.2f seconds", time.time() - llm_start_time)
        return explanation.strip()
