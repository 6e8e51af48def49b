from __future__ import annotations

import json
import sys
from pathlib import Path

from pharmaguard.core.logging import setup_logging

from .parser import parse_vcf


def main(argv: list[str]) -> int:
    if len(argv) < 2 or "--help" in argv:
        print("Usage: python -m pharmaguard.services.vcf <path-to.vcf> [--gene GENE]")
        return 0

    path = Path(argv[1])
    if not path.exists():
        print(f"File not found: {path}")
        return 2

    gene = None
    if "--gene" in argv:
        try:
            gene = argv[argv.index("--gene") + 1].upper()
        except IndexError:
            print("Error: --gene requires a gene symbol")
            return 2

    setup_logging()
    result = parse_vcf(path.read_bytes())

    payload = result.to_dict()
    if gene is not None:
        payload["variants"] = [v for v in payload["variants"] if v["gene"].upper() == gene]
    payload["variant_counts"] = {}
    for v in payload["variants"]:
        payload["variant_counts"][v["gene"]] = payload["variant_counts"].get(v["gene"], 0) + 1

    print(json.dumps(payload, indent=2))
    return 0 if result.success else 1


def cli() -> int:
    return main(sys.argv)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
