import json

from qdatastream.cli import main


def test_info(bsp_path, capsys):
    assert main(["info", str(bsp_path)]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["version"] == 29
    assert len(out["lumps"]) == 15


def test_summary(bsp_path, capsys):
    assert main(["summary", str(bsp_path)]) == 0
    assert "vertices=2" in capsys.readouterr().out.splitlines()


def test_lump_with_limit(bsp_path, capsys):
    assert main(["lump", str(bsp_path), "vertices", "--limit", "1"]) == 0
    assert json.loads(capsys.readouterr().out) == [{"point": [1.0, 2.0, 3.0]}]


def test_entities_and_textures(bsp_path, capsys):
    assert main(["entities", str(bsp_path)]) == 0
    assert '"classname" "worldspawn"' in capsys.readouterr().out
    assert main(["textures", str(bsp_path)]) == 0
    assert json.loads(capsys.readouterr().out)[0]["name"] == "wall1"


def test_errors_exit_nonzero(tmp_path, capsys):
    bad = tmp_path / "bad.bsp"
    bad.write_bytes(b"\x1d\x00")
    assert main(["info", str(bad)]) == 1
    assert "error:" in capsys.readouterr().err
    assert main(["info", str(tmp_path / "missing.bsp")]) == 1
