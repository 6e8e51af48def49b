from .explanation import SECTION_KEYS, ExplanationRequest, ExplanationSections

__all__ = ["SECTION_KEYS", "ExplanationRequest", "ExplanationSections"]
