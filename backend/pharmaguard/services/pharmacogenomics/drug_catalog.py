"""
Supported drugs and the primary pharmacogene that governs each one.
"""

from typing import Dict, List, Optional

# ── Gene-to-drug mapping ──────────────────────────────────────────────────
GENE_DRUG_MAP: Dict[str, List[str]] = {
    "CYP2D6":  ["CODEINE"],
    "CYP2C19": ["CLOPIDOGREL"],
    "CYP2C9":  ["WARFARIN"],
    "SLCO1B1": ["SIMVASTATIN"],
    "TPMT":    ["AZATHIOPRINE"],
    "DPYD":    ["FLUOROURACIL"],
}

# Reverse: drug → gene
DRUG_GENE_MAP: Dict[str, str] = {}
for gene, drugs in GENE_DRUG_MAP.items():
    for d in drugs:
        DRUG_GENE_MAP[d] = gene

SUPPORTED_DRUGS: List[str] = list(DRUG_GENE_MAP.keys())


def primary_gene_for(drug: str) -> Optional[str]:
    """Primary gene for a drug name (case-insensitive), or None if unsupported."""
    return DRUG_GENE_MAP.get(drug.strip().upper())


def parse_drug_list(raw: str) -> List[str]:
    """Split a comma-separated drug selection into upper-cased, de-duplicated names."""
    seen: List[str] = []
    for part in raw.split(","):
        name = part.strip().upper()
        if name and name not in seen:
            seen.append(name)
    return seen
