"""
Embedded pharmacogenomic variant knowledge base.

Maps dbSNP identifiers to curated star-allele annotations for the six
target pharmacogenes. The table is read-only after construction and can be
shared freely between concurrent parsers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Set, Tuple


class PhenotypeClass(str, Enum):
    """Coarse metabolizer category."""
    PM = "PM"  # Poor
    IM = "IM"  # Intermediate
    NM = "NM"  # Normal
    RM = "RM"  # Rapid
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class KnowledgeBaseEntry:
    gene: str
    star: str
    effect: str
    zygosity: str
    significance: str
    phenotype_class: PhenotypeClass
    activity: Optional[float] = None  # None = not quantified


# ----------------------------------------------------------------------
# Reference table
# ----------------------------------------------------------------------

_HET = "heterozygous"

VARIANT_TABLE: Tuple[Tuple[str, KnowledgeBaseEntry], ...] = (
    # CYP2D6
    ("rs3892097", KnowledgeBaseEntry("CYP2D6", "*4", "Loss of function", _HET, "Poor metabolizer marker", PhenotypeClass.PM, 0.0)),
    ("rs1065852", KnowledgeBaseEntry("CYP2D6", "*10", "Reduced function", _HET, "Intermediate metabolizer marker", PhenotypeClass.IM, 0.5)),
    ("rs16947", KnowledgeBaseEntry("CYP2D6", "*2", "Normal/increased activity", _HET, "Normal metabolizer", PhenotypeClass.NM, 1.0)),
    ("rs5030655", KnowledgeBaseEntry("CYP2D6", "*6", "No function", _HET, "Poor metabolizer marker", PhenotypeClass.PM, 0.0)),
    # CYP2C19
    ("rs4244285", KnowledgeBaseEntry("CYP2C19", "*2", "Loss of function", _HET, "Poor metabolizer marker", PhenotypeClass.PM, 0.0)),
    ("rs4986893", KnowledgeBaseEntry("CYP2C19", "*3", "Loss of function", _HET, "Poor metabolizer marker", PhenotypeClass.PM, 0.0)),
    ("rs12248560", KnowledgeBaseEntry("CYP2C19", "*17", "Increased function", _HET, "Rapid metabolizer marker", PhenotypeClass.RM, 1.5)),
    # CYP2C9
    ("rs1799853", KnowledgeBaseEntry("CYP2C9", "*2", "Reduced function (30%)", _HET, "Intermediate metabolizer", PhenotypeClass.IM, 0.7)),
    ("rs1057910", KnowledgeBaseEntry("CYP2C9", "*3", "Significantly reduced (90%)", _HET, "Poor metabolizer marker", PhenotypeClass.PM, 0.1)),
    # SLCO1B1
    ("rs4149056", KnowledgeBaseEntry("SLCO1B1", "*5", "Reduced hepatic transport", _HET, "Myopathy risk marker", PhenotypeClass.PM, 0.0)),
    # TPMT
    ("rs1800462", KnowledgeBaseEntry("TPMT", "*2", "Reduced enzyme activity", _HET, "Intermediate/Poor metabolizer", PhenotypeClass.IM, 0.5)),
    ("rs1800460", KnowledgeBaseEntry("TPMT", "*3B", "Reduced enzyme activity", _HET, "Intermediate metabolizer", PhenotypeClass.IM, 0.5)),
    ("rs1142345", KnowledgeBaseEntry("TPMT", "*3C", "Reduced enzyme activity", _HET, "Intermediate metabolizer", PhenotypeClass.IM, 0.5)),
    # DPYD
    ("rs3918290", KnowledgeBaseEntry("DPYD", "*2A", "No enzyme function", _HET, "Critical toxicity risk", PhenotypeClass.PM, 0.0)),
    ("rs67376798", KnowledgeBaseEntry("DPYD", "*13", "No enzyme function", _HET, "Critical toxicity risk", PhenotypeClass.PM, 0.0)),
)


class KnowledgeBase:
    """
    Immutable rsid -> KnowledgeBaseEntry mapping.

    Lookup is exact-match on the lower-cased identifier; there is no partial
    or fuzzy matching.
    """

    def __init__(self, entries: Iterable[Tuple[str, KnowledgeBaseEntry]]):
        table: Dict[str, KnowledgeBaseEntry] = {}
        for rsid, entry in entries:
            table[rsid.strip().lower()] = entry
        self._entries: Mapping[str, KnowledgeBaseEntry] = MappingProxyType(table)

    def lookup(self, rsid: str) -> Optional[KnowledgeBaseEntry]:
        if not rsid:
            return None
        return self._entries.get(rsid.strip().lower())

    def genes(self) -> Set[str]:
        return {e.gene for e in self._entries.values()}

    def __contains__(self, rsid: object) -> bool:
        return isinstance(rsid, str) and self.lookup(rsid) is not None

    def __len__(self) -> int:
        return len(self._entries)


# Global singleton instance
_knowledge_base: Optional[KnowledgeBase] = None


def get_knowledge_base() -> KnowledgeBase:
    """Get the default knowledge base built from the embedded table."""
    global _knowledge_base
    if _knowledge_base is None:
        _knowledge_base = KnowledgeBase(VARIANT_TABLE)
    return _knowledge_base
