from .explanation_service import ExplanationService, generate_explanation
from .fallback_table import GENERIC_EXPLANATION, FallbackTable, get_fallback_table, reload_fallback_table
from .openai_client import OpenAIClient
from .prompt_builder import build_prompt, build_variant_context
from .response_parser import SectionParser, parse_sections

__all__ = [
    "ExplanationService",
    "generate_explanation",
    "FallbackTable",
    "GENERIC_EXPLANATION",
    "get_fallback_table",
    "reload_fallback_table",
    "OpenAIClient",
    "build_prompt",
    "build_variant_context",
    "SectionParser",
    "parse_sections",
]
