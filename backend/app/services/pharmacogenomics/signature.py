"""
Genomic signature - content-addressed fingerprint of a variant set.
Used as the variant component of the explanation cache key.
"""

import hashlib
from typing import Iterable

# Not expected inside an rsID; keeps ["rs1", "rs23"] distinct from ["rs12", "rs3"]
SIGNATURE_DELIMITER = "|"


def generate_signature(identifiers: Iterable[str]) -> str:
    """
    SHA-256 (lowercase hex) over the sorted, '|'-joined non-empty identifiers.

    The identifiers are treated as a set: order and repeats do not change the
    result. An empty input hashes the empty string.
    """
    ids = sorted({i for i in identifiers if i})
    data = SIGNATURE_DELIMITER.join(ids)
    return hashlib.sha256(data.encode("utf-8")).hexdigest()
