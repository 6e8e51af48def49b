from typing import Sequence

from pharmaguard.services.vcf.parser import AnnotatedVariant

MAX_CONTEXT_VARIANTS = 3

SYSTEM_PROMPT = (
    "You are an expert clinical pharmacogenomics specialist providing "
    "evidence-based explanations for genetic drug metabolism profiles."
)


def build_variant_context(variants: Sequence[AnnotatedVariant], gene: str) -> str:
    """
    Renders up to three variants of the requested gene as
    "<star_allele> (<rsid>): <effect>", joined with "; ".
    """
    gene_variants = [v for v in variants if v.gene == gene]
    if not gene_variants:
        return f"No known variants detected in {gene}"
    return "; ".join(
        f"{v.star_allele or '?'} ({v.rsid or '?'}): {v.effect or 'Unknown effect'}"
        for v in gene_variants[:MAX_CONTEXT_VARIANTS]
    )


def build_prompt(drug: str, phenotype: str, risk_label: str, gene: str, variant_context: str) -> str:
    """
    Constructs the four-section explanation prompt.

    Args:
        drug: The drug name.
        phenotype: The metabolizer phenotype code.
        risk_label: Risk label from the risk assessment.
        gene: The primary gene symbol.
        variant_context: Output of build_variant_context.

    Returns:
        A formatted prompt string.
    """
    return f"""You are a clinical pharmacogenomics expert. Provide a comprehensive explanation for a patient's pharmacogenomic risk assessment.

PATIENT PROFILE:
- Drug: {drug}
- Metabolizer Phenotype: {phenotype}
- Risk Level: {risk_label}
- Primary Gene: {gene}
- Detected Variants: {variant_context}

Please provide exactly 4 sections:

1. SUMMARY: A concise 2-3 sentence clinical summary and significance.
2. MECHANISM: A 3-4 sentence explanation of the molecular/enzymatic mechanism.
3. RISK_RATIONALE: A 3-4 sentence explanation of why this phenotype creates the identified risk.
4. PATIENT_FRIENDLY: A 2-3 sentence explanation for non-scientific patients, avoiding jargon.

Format response as:
SUMMARY: [text]
MECHANISM: [text]
RISK_RATIONALE: [text]
PATIENT_FRIENDLY: [text]"""
