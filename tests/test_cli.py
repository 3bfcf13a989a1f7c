"""Tests for the command line."""

import json

from rhai_autodocs.cli import app
from typer.testing import CliRunner

runner = CliRunner()


def test_generate_mdbook(metadata_path, tmp_path):
    out = tmp_path / "docs"
    result = runner.invoke(app, ["generate", str(metadata_path), "--out", str(out)])

    assert result.exit_code == 0, result.output
    assert "✓ global.my_module: 3/4 functions" in result.output
    assert sorted(p.name for p in out.iterdir()) == [
        "global-my_module.md",
        "global.md",
    ]
    page = (out / "global-my_module.md").read_text()
    assert "<code>fn</code> add </h2>" in page


def test_generate_docusaurus(metadata_path, tmp_path):
    out = tmp_path / "docs"
    result = runner.invoke(
        app,
        [
            "generate",
            str(metadata_path),
            "--out",
            str(out),
            "--flavor",
            "docusaurus",
            "--slug-prefix",
            "/api",
        ],
    )

    assert result.exit_code == 0, result.output
    page = (out / "global-my_module.mdx").read_text()
    assert "slug: /api/global-my_module" in page


def test_generate_unknown_flavor(metadata_path, tmp_path):
    result = runner.invoke(
        app,
        ["generate", str(metadata_path), "--out", str(tmp_path), "--flavor", "sphinx"],
    )
    assert result.exit_code == 1
    assert "sphinx" in result.output


def test_generate_strict_docs(metadata_path, tmp_path):
    result = runner.invoke(
        app,
        ["generate", str(metadata_path), "--out", str(tmp_path), "--strict-docs"],
    )
    assert result.exit_code == 1
    assert "dont_care" in result.output


def test_generate_conflict(tmp_path):
    metadata = {
        "functions": [
            {"name": "f", "docComments": ["/// # rhai-autodocs:index:1"]},
            {
                "name": "f",
                "numParams": 1,
                "params": [{"name": "x", "type": "i64"}],
                "docComments": ["/// # rhai-autodocs:index:2"],
            },
        ]
    }
    path = tmp_path / "metadata.json"
    path.write_text(json.dumps(metadata))

    result = runner.invoke(app, ["generate", str(path), "--out", str(tmp_path / "o")])
    assert result.exit_code == 1
    assert "'f'" in result.output


def test_dump(metadata_path, tmp_path):
    out = tmp_path / "model.json"
    result = runner.invoke(app, ["dump", str(metadata_path), "--out", str(out)])

    assert result.exit_code == 0, result.output
    data = json.loads(out.read_text())
    assert [f["name"] for f in data["global.my_module"]["functions"]] == [
        "hello_world",
        "add",
        "get$size",
    ]
