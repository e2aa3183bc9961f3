import importlib.util
import json
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[3]
MODULE_PATH = PROJECT_ROOT / "scripts" / "seed_templates.py"
SPEC = importlib.util.spec_from_file_location("seed_templates_module", MODULE_PATH)
seed_templates = importlib.util.module_from_spec(SPEC)
assert SPEC and SPEC.loader
sys.modules["seed_templates_module"] = seed_templates
SPEC.loader.exec_module(seed_templates)

RECORDS = [
    {"id": "retro-portrait", "name": "Retro", "prompt": "make it retro"},
    {"id": "no-prompt", "name": "Broken", "prompt": ""},
    {"id": "Bad Slug", "name": "Bad", "prompt": "x"},
]


def test_seed_templates_imports_valid_records(template_repo, capsys):
    summary = seed_templates.seed_templates(
        template_repo,
        RECORDS,
        publish=True,
        visibility="public",
        provider="gemini",
        model="gemini-test",
    )

    assert (summary.imported, summary.skipped) == (1, 2)
    template = template_repo.get("retro-portrait")
    assert template.status == "published"
    version = template_repo.get_current_version("retro-portrait")
    assert version.prompt_template == "make it retro"
    assert version.model_name == "gemini-test"
    assert "skip invalid record" in capsys.readouterr().err


def test_seed_templates_as_draft(template_repo):
    seed_templates.seed_templates(
        template_repo,
        RECORDS[:1],
        publish=False,
        visibility="private",
        provider="gemini",
        model="gemini-test",
    )

    template = template_repo.get("retro-portrait")
    assert template.status == "draft"
    assert template.visibility == "private"
    assert template.published_at is None


def test_parse_args_defaults():
    args = seed_templates.parse_args([])

    assert args.file == "templates.json"
    assert args.publish is True
    assert args.visibility == "public"
    assert args.provider == "gemini"
    assert args.model is None
    assert seed_templates.parse_args(["--draft"]).publish is False


def test_load_records_requires_array(tmp_path):
    path = tmp_path / "templates.json"
    path.write_text(json.dumps({"id": "x"}), encoding="utf-8")

    exit_code = seed_templates.main(["--file", str(path)])

    assert exit_code == 2


def test_main_reports_missing_file(tmp_path, capsys):
    exit_code = seed_templates.main(["--file", str(tmp_path / "missing.json")])

    assert exit_code == 2
    assert "seed failed" in capsys.readouterr().err
