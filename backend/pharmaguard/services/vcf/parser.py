from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional, Union

from pharmaguard.core.config import get_settings

from .knowledge_base import KnowledgeBase, KnowledgeBaseEntry, PhenotypeClass, get_knowledge_base

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# Constants & Configuration
# ----------------------------------------------------------------------

MIN_FIELDS = 8

UNKNOWN = "Unknown"
UNKNOWN_ZYGOSITY = "unknown"
NOVEL_SIGNIFICANCE = "Novel or uncharacterized variant"
GENE_ONLY_SIGNIFICANCE = "Annotated by gene only"


@dataclass(frozen=True)
class RawRecord:
    chrom: str
    pos: str
    id: str
    ref: str
    alt: str
    info: str


@dataclass(frozen=True)
class AnnotatedVariant:
    rsid: str
    chrom: str
    pos: str
    ref: str
    alt: str
    gene: str
    star_allele: str
    effect: str
    zygosity: str
    clinical_significance: str
    phenotype_class: str
    activity: Optional[float] = None

    def to_dict(self) -> Dict[str, Union[str, float, None]]:
        return asdict(self)


@dataclass
class ParseResult:
    variants: List[AnnotatedVariant] = field(default_factory=list)
    success: bool = True
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "variants": [v.to_dict() for v in self.variants],
            "success": self.success,
            "errors": list(self.errors),
        }


class VcfAnnotator:
    """
    Line-oriented VCF reader that annotates each record against a
    KnowledgeBase.

    Malformed lines never abort the parse: they are skipped and reported in
    ParseResult.errors as "Line <n>: <message>" (1-based line numbers).
    """

    def __init__(
        self,
        knowledge_base: Optional[KnowledgeBase] = None,
        *,
        min_lines_for_failure: Optional[int] = None,
    ):
        self.knowledge_base = knowledge_base if knowledge_base is not None else get_knowledge_base()
        if min_lines_for_failure is None:
            min_lines_for_failure = get_settings().min_lines_for_failure
        self.min_lines_for_failure = min_lines_for_failure

    def parse(self, content: Union[str, bytes]) -> ParseResult:
        text = _decode(content)
        lines = text.split("\n")

        variants: List[AnnotatedVariant] = []
        errors: List[str] = []

        for line_num, raw in enumerate(lines, start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                # "##" meta-lines, the "#CHROM" header and stray comments
                continue

            try:
                fields = line.split("\t")
                if len(fields) < MIN_FIELDS:
                    errors.append(f"Line {line_num}: insufficient fields")
                    continue

                record = _to_raw_record(fields)
                variant = self._annotate(record)
            except Exception as e:
                errors.append(f"Line {line_num}: {e}")
                continue

            if variant is not None:
                variants.append(variant)

        success = len(variants) > 0 or len(lines) < self.min_lines_for_failure
        if not success:
            logger.warning("No variants recognised in %d-line input", len(lines))
        logger.debug("Parsed %d variants with %d diagnostics", len(variants), len(errors))

        return ParseResult(variants=variants, success=success, errors=errors)

    def _annotate(self, record: RawRecord) -> Optional[AnnotatedVariant]:
        info = parse_info_field(record.info)

        rsid = (info.get("RS") or record.id or "").lower()
        gene = info.get("GENE", "")
        star = info.get("STAR", "")

        if rsid and rsid.startswith("rs"):
            entry = self.knowledge_base.lookup(rsid)
            if entry is not None:
                return _from_entry(record, rsid, entry, gene=gene, star=star)
            return _unannotated(record, rsid, gene=gene, star=star, significance=NOVEL_SIGNIFICANCE)

        if gene:
            return _unannotated(record, "unknown", gene=gene, star=star, significance=GENE_ONLY_SIGNIFICANCE)

        # Neither a usable rsid nor a gene: nothing to report
        return None


def parse_vcf(
    content: Union[str, bytes],
    *,
    knowledge_base: Optional[KnowledgeBase] = None,
) -> ParseResult:
    """Parse VCF text with the default (or a supplied) knowledge base."""
    return VcfAnnotator(knowledge_base).parse(content)


def parse_info_field(info: str) -> Dict[str, str]:
    """
    Parse a semicolon-separated KEY=value block.

    Keys are normalised to upper case so lookups are case-insensitive;
    values are trimmed. Flag tokens without "=" are ignored.
    """
    out: Dict[str, str] = {}
    if not info or info == ".":
        return out
    for item in info.split(";"):
        if "=" not in item:
            continue
        k, v = item.split("=", 1)
        out[k.strip().upper()] = v.strip()
    return out


def _decode(content: Union[str, bytes]) -> str:
    if isinstance(content, bytes):
        return content.decode("utf-8", errors="replace")
    return content


def _to_raw_record(fields: List[str]) -> RawRecord:
    chrom, pos, vid, ref, alt = fields[:5]
    return RawRecord(chrom=chrom, pos=pos, id=vid, ref=ref, alt=alt, info=fields[7])


def _from_entry(
    record: RawRecord,
    rsid: str,
    entry: KnowledgeBaseEntry,
    *,
    gene: str,
    star: str,
) -> AnnotatedVariant:
    # The record's own GENE/STAR annotation wins over the knowledge base
    return AnnotatedVariant(
        rsid=rsid,
        chrom=record.chrom,
        pos=record.pos,
        ref=record.ref,
        alt=record.alt,
        gene=gene or entry.gene,
        star_allele=star or entry.star,
        effect=entry.effect,
        zygosity=entry.zygosity,
        clinical_significance=entry.significance,
        phenotype_class=entry.phenotype_class.value,
        activity=entry.activity,
    )


def _unannotated(
    record: RawRecord,
    rsid: str,
    *,
    gene: str,
    star: str,
    significance: str,
) -> AnnotatedVariant:
    return AnnotatedVariant(
        rsid=rsid,
        chrom=record.chrom,
        pos=record.pos,
        ref=record.ref,
        alt=record.alt,
        gene=gene or UNKNOWN,
        star_allele=star or UNKNOWN,
        effect=UNKNOWN,
        zygosity=UNKNOWN_ZYGOSITY,
        clinical_significance=significance,
        phenotype_class=PhenotypeClass.UNKNOWN.value,
        activity=None,
    )
