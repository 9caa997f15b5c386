import json

from app.services.pharmacogenomics.signature import generate_signature
from app.services.vcf.__main__ import main
from conftest import CYP2C19_STAR2_LINE, vcf


def test_prints_variants_and_signature(tmp_path, capsys):
    path = tmp_path / "patient.vcf"
    path.write_text(vcf(CYP2C19_STAR2_LINE, "chr1\t1\trs1\tA\tG\t.\t.\tGENE=BRCA1"))

    assert main(["vcf", str(path)]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["total_variants_found"] == 1
    assert payload["signature_hash"] == generate_signature(["rs4244285"])
    assert payload["variants"][0]["gene"] == "CYP2C19"
    assert payload["variants"][0]["star"] == "*2"


def test_missing_file(tmp_path, capsys):
    assert main(["vcf", str(tmp_path / "missing.vcf")]) == 2
    assert "File not found" in capsys.readouterr().out


def test_usage():
    assert main(["vcf"]) == 0
