from __future__ import annotations

import json
import sys
from pathlib import Path

from app.services.pharmacogenomics.signature import generate_signature
from .parser import parse_vcf


def main(argv: list[str]) -> int:
    if len(argv) < 2 or "--help" in argv:
        print("Usage: python -m app.services.vcf <path-to.vcf>")
        return 0

    path = Path(argv[1])
    if not path.exists():
        print(f"File not found: {path}")
        return 2

    variants = parse_vcf(path.read_text(encoding="utf-8", errors="replace"))

    payload = {
        "total_variants_found": len(variants),
        "signature_hash": generate_signature(v.rs_id for v in variants),
        "variants": [
            {
                "gene": v.gene,
                "rsid": v.rs_id,
                "star": v.star_allele,
                "chrom": v.chromosome,
                "pos": v.position,
                "ref": v.ref,
                "alt": v.alt,
                "info": dict(v.info),
            }
            for v in variants
        ],
    }
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
