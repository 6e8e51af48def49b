import logging
import time
from typing import Optional, Sequence

from pharmaguard.core.config import DEFAULT_FALLBACK_PATH
from pharmaguard.schemas.explanation import ExplanationRequest, ExplanationSections
from pharmaguard.services.llm.fallback_table import FallbackTable, get_fallback_table
from pharmaguard.services.llm.openai_client import OpenAIClient
from pharmaguard.services.llm.prompt_builder import SYSTEM_PROMPT, build_prompt, build_variant_context
from pharmaguard.services.llm.response_parser import parse_sections
from pharmaguard.services.vcf.parser import AnnotatedVariant

logger = logging.getLogger(__name__)


class ExplanationService:
    """
    Produces the four-section clinical explanation for a drug/phenotype.

    With a configured credential, one remote completion is attempted and
    its text parsed into sections. Without one, or on any remote failure,
    the canned FallbackTable entry is returned instead. generate() never
    raises and never mixes remote and fallback content.
    """

    def __init__(
        self,
        client: Optional[OpenAIClient] = None,
        fallback_table: Optional[FallbackTable] = None,
    ):
        self.client = client if client is not None else OpenAIClient()
        self.fallback_table = fallback_table if fallback_table is not None else get_fallback_table()

    async def generate(
        self,
        drug: str,
        phenotype: str,
        risk_label: str,
        variants: Sequence[AnnotatedVariant],
        gene: str,
    ) -> ExplanationSections:
        if not self.client.configured:
            logger.info("No completion credential configured, using fallback explanation for %s", drug)
            return self.fallback(drug, phenotype)

        llm_start_time = time.time()
        try:
            sections = await self._generate_remote(drug, phenotype, risk_label, variants, gene)
        except Exception as e:
            logger.warning("LLM generation failed for %s: %s - using fallback", drug, str(e))
            return self.fallback(drug, phenotype)

        if sections is None:
            logger.warning("LLM fallback triggered: no completion returned for %s", drug)
            return self.fallback(drug, phenotype)

        llm_total_time = time.time() - llm_start_time
        logger.debug(f"LLM generation time: {llm_total_time:.2f} seconds")
        if not sections.is_complete():
            logger.warning("Completion for %s/%s is missing one or more sections", drug, phenotype)
        return sections

    async def generate_for(self, request: ExplanationRequest) -> ExplanationSections:
        return await self.generate(
            request.drug,
            request.phenotype,
            request.risk_label,
            request.variants,
            request.gene,
        )

    def fallback(self, drug: str, phenotype: str) -> ExplanationSections:
        return self.fallback_table.lookup(drug, phenotype)

    async def _generate_remote(
        self,
        drug: str,
        phenotype: str,
        risk_label: str,
        variants: Sequence[AnnotatedVariant],
        gene: str,
    ) -> Optional[ExplanationSections]:
        logger.debug("Generating clinical explanation for %s (%s)", drug, gene)

        variant_context = build_variant_context(variants, gene)
        prompt = build_prompt(drug, phenotype, risk_label, gene, variant_context)

        content = await self.client.generate_text(prompt, system_prompt=SYSTEM_PROMPT)
        if content is None:
            return None
        return parse_sections(content)


async def generate_explanation(
    drug: str,
    phenotype: str,
    risk_label: str,
    variants: Sequence[AnnotatedVariant],
    gene: str,
) -> ExplanationSections:
    """Convenience wrapper using the default client and fallback table."""
    try:
        service = ExplanationService()
    except Exception as e:
        logger.warning("Explanation service unavailable: %s - using packaged fallback", str(e))
        return FallbackTable.from_file(DEFAULT_FALLBACK_PATH).lookup(drug, phenotype)
    return await service.generate(drug, phenotype, risk_label, variants, gene)
