from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from pharmaguard.core.logging import setup_logging
from pharmaguard.services.pharmacogenomics.drug_catalog import parse_drug_list, primary_gene_for
from pharmaguard.services.vcf.parser import parse_vcf

from .explanation_service import ExplanationService


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m pharmaguard.services.llm",
        description="Generate four-section pharmacogenomic explanations.",
    )
    parser.add_argument("--drugs", required=True, help="Comma-separated drug names (e.g. CODEINE,WARFARIN)")
    parser.add_argument("--phenotype", required=True, help="Metabolizer phenotype code (PM, IM, NM, RM)")
    parser.add_argument("--risk-label", default="Unknown", help="Risk label from the risk assessment")
    parser.add_argument("--gene", default=None, help="Primary gene (defaults to the drug's primary gene)")
    parser.add_argument("--vcf", default=None, help="Optional VCF file used as variant context")
    return parser


async def _run(args: argparse.Namespace) -> dict:
    variants = []
    if args.vcf:
        variants = parse_vcf(Path(args.vcf).read_bytes()).variants

    service = ExplanationService()
    out = {}
    for drug in parse_drug_list(args.drugs):
        gene = args.gene or primary_gene_for(drug) or "Unknown"
        sections = await service.generate(drug, args.phenotype, args.risk_label, variants, gene)
        out[drug] = {"gene": gene, **sections.as_dict()}
    return out


def main(argv: list[str]) -> int:
    args = build_arg_parser().parse_args(argv[1:])
    if args.vcf and not Path(args.vcf).exists():
        print(f"File not found: {args.vcf}")
        return 2

    setup_logging()
    print(json.dumps(asyncio.run(_run(args)), indent=2))
    return 0


def cli() -> int:
    return main(sys.argv)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
