"""
Pharmacogenomics Service

Supported drugs and the pharmacogene each one depends on.
"""

from .drug_catalog import DRUG_GENE_MAP, GENE_DRUG_MAP, SUPPORTED_DRUGS, parse_drug_list, primary_gene_for

__all__ = [
    'DRUG_GENE_MAP',
    'GENE_DRUG_MAP',
    'SUPPORTED_DRUGS',
    'parse_drug_list',
    'primary_gene_for',
]
