"""Tests for the dump_linearization command-line tool."""

import json

from circuits.feature_flags import FeatureFlags
from dump_linearization import main, summarize


def test_summarize_universal() -> None:
    summary = summarize(None, generic=True)
    assert summary["featureFlags"] is None
    assert [a["argument"] for a in summary["alphas"]] == ["Gate(Zero)", "Permutation", "Lookup"]
    assert summary["alphas"][2] == {"argument": "Lookup", "start": 24, "count": 8}
    assert "Index(Xor16)" in summary["indexTerms"]
    assert summary["constantTerm"]


def test_main_prints_ranges(capsys) -> None:
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "Alphas:" in out
    assert "Gate(Zero)" in out
    assert "Constant term:" in out


def test_main_writes_summary(tmp_path) -> None:
    flags_path = tmp_path / "flags.json"
    flags_path.write_text(json.dumps(FeatureFlags(xor=True).to_dict()))
    output = tmp_path / "out" / "summary.json"

    assert main(["--flags", str(flags_path), "--no-generic", "--output", str(output)]) == 0
    summary = json.loads(output.read_text())
    assert summary["generic"] is False
    assert summary["featureFlags"]["xor"] is True
    assert [a["argument"] for a in summary["alphas"]] == ["Gate(Zero)", "Permutation"]
    assert list(summary["indexTerms"]) == [
        "Index(CompleteAdd)",
        "Index(VarBaseMul)",
        "Index(EndoMul)",
        "Index(EndoMulScalar)",
        "Index(Xor16)",
    ]


def test_main_missing_flags_file(tmp_path, capsys) -> None:
    assert main(["--flags", str(tmp_path / "nope.json")]) == 1
    assert "not found" in capsys.readouterr().err


def test_main_invalid_flags_file(tmp_path, capsys) -> None:
    path = tmp_path / "flags.json"
    path.write_text(json.dumps({"sha256": True}))
    assert main(["--flags", str(path)]) == 1
    assert "invalid flags" in capsys.readouterr().err
