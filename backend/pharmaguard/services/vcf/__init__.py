from .knowledge_base import KnowledgeBase, KnowledgeBaseEntry, PhenotypeClass, get_knowledge_base
from .parser import AnnotatedVariant, ParseResult, RawRecord, VcfAnnotator, parse_vcf

__all__ = [
    "KnowledgeBase",
    "KnowledgeBaseEntry",
    "PhenotypeClass",
    "get_knowledge_base",
    "AnnotatedVariant",
    "ParseResult",
    "RawRecord",
    "VcfAnnotator",
    "parse_vcf",
]
