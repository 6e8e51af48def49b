"""
Fallback Table - canned four-section explanations keyed by drug and phenotype.
Used whenever the remote generation path is unavailable or fails.
"""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Union

from pharmaguard.core.config import get_settings
from pharmaguard.schemas.explanation import SECTION_KEYS, ExplanationSections

logger = logging.getLogger(__name__)

GENERIC_EXPLANATION: Mapping[str, str] = MappingProxyType({
    "summary": "Pharmacogenomic analysis complete. Consult with your healthcare provider for personalized recommendations.",
    "mechanism": "Genetic variants affect drug-metabolizing enzyme activity, influencing drug response.",
    "risk_rationale": "Risk assessment based on CPIC guidelines and current clinical evidence.",
    "patient_friendly": "Your genetic test provides information to help your doctor choose the safest and most effective medication for you.",
})

DEFAULT_PHENOTYPE = "NM"


class FallbackTable:
    """
    Read-only {DRUG: {PHENOTYPE: sections}} table.

    Drug and phenotype keys are stored upper-cased. A drug without the
    requested phenotype resolves to its NM entry, then to the generic
    template; an unknown drug resolves to the generic template.
    """

    def __init__(self, table: Mapping[str, Mapping[str, Mapping[str, str]]]):
        normalized: Dict[str, Mapping[str, Mapping[str, str]]] = {}
        for drug, phenotypes in table.items():
            normalized[drug.strip().upper()] = MappingProxyType({
                pheno.strip().upper(): MappingProxyType(_coerce_sections(sections))
                for pheno, sections in phenotypes.items()
            })
        self._table = MappingProxyType(normalized)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "FallbackTable":
        """Load from JSON. An unreadable file yields an empty table."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("top-level JSON value must be an object")
            return cls(data)
        except (OSError, ValueError, AttributeError) as e:
            logger.warning("Failed to load fallback explanations from %s: %s", path, e)
            return cls({})

    def get(self, drug: str, phenotype: str) -> Optional[Mapping[str, str]]:
        """Exact drug/phenotype entry, or None."""
        phenotypes = self._table.get(drug.strip().upper())
        if phenotypes is None:
            return None
        return phenotypes.get(phenotype.strip().upper())

    def lookup(self, drug: str, phenotype: str) -> ExplanationSections:
        phenotypes = self._table.get(drug.strip().upper())
        if phenotypes is None:
            return ExplanationSections(**GENERIC_EXPLANATION)

        entry = phenotypes.get(phenotype.strip().upper()) or phenotypes.get(DEFAULT_PHENOTYPE)
        if entry is None:
            return ExplanationSections(**GENERIC_EXPLANATION)
        return ExplanationSections(**entry)

    def drugs(self):
        return sorted(self._table.keys())

    def __contains__(self, drug: object) -> bool:
        return isinstance(drug, str) and drug.strip().upper() in self._table

    def __len__(self) -> int:
        return len(self._table)


def _coerce_sections(sections: Mapping[str, str]) -> Dict[str, str]:
    # Every key present, values as strings
    return {key: str(sections.get(key) or "") for key in SECTION_KEYS}


# Global singleton instance
_fallback_table: Optional[FallbackTable] = None


def get_fallback_table() -> FallbackTable:
    """Get the global fallback table, loading it on first use."""
    global _fallback_table
    if _fallback_table is None:
        _fallback_table = FallbackTable.from_file(get_settings().fallback_explanations_path)
        logger.info("Fallback explanations loaded for %d drugs", len(_fallback_table))
    return _fallback_table


def reload_fallback_table() -> FallbackTable:
    """Reload the fallback table (useful for testing or after editing the file)."""
    global _fallback_table
    _fallback_table = None
    return get_fallback_table()
