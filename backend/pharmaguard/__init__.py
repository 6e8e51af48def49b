"""
PharmaGuard core

VCF annotation against an embedded pharmacogenomic knowledge base and
four-section clinical explanations with a deterministic offline fallback.
"""

__version__ = "1.0.0"
