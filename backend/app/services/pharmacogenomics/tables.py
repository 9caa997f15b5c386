"""
Lookup table loader - reads the drug/gene/phenotype JSON tables once at startup.
The rule engine only sees the resulting in-memory LookupTables.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Union

from pydantic import ValidationError

from .models import LookupTables

logger = logging.getLogger(__name__)

DRUG_GENE_FILE = "drug_gene_map.json"
GENE_VARIANT_FILE = "gene_variant_map.json"
PHENOTYPE_RULES_FILE = "phenotype_rules.json"


def _load_json(path: Path) -> Dict:
    if not path.exists():
        raise FileNotFoundError(f"Lookup table not found at {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Lookup table {path.name} must be a JSON object")
    return data


def load_lookup_tables(data_dir: Union[str, Path]) -> LookupTables:
    """
    Load drug_gene_map.json, gene_variant_map.json and phenotype_rules.json
    from data_dir.

    Raises:
        FileNotFoundError: a table file is missing
        ValueError: a table does not have the expected shape
    """
    data_dir = Path(data_dir)

    try:
        tables = LookupTables(
            drug_gene=_load_json(data_dir / DRUG_GENE_FILE),
            gene_variants=_load_json(data_dir / GENE_VARIANT_FILE),
            phenotype_rules=_load_json(data_dir / PHENOTYPE_RULES_FILE),
        )
    except ValidationError as e:
        raise ValueError(f"Invalid lookup tables in {data_dir}: {e}") from e

    logger.info(
        "Lookup tables loaded: %d drugs, %d genes, %d rule tables",
        len(tables.drug_gene), len(tables.gene_variants), len(tables.phenotype_rules),
    )
    return tables
