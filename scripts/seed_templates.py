"""Import templates from a JSON file of ``{"id", "name", "prompt"}`` records."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from imageai.config import load_config
from imageai.templates.templates_models import TemplateStatus, Visibility
from imageai.templates.templates_repository import TemplateRepository
from imageai.templates.templates_validation import MAX_NAME_LENGTH, is_valid_slug


@dataclass(slots=True)
class SeedSummary:
    imported: int
    skipped: int


def load_records(path: Path) -> list[dict[str, Any]]:
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array")
    return data


def seed_templates(
    repo: TemplateRepository,
    records: list[dict[str, Any]],
    *,
    publish: bool,
    visibility: str,
    provider: str,
    model: str,
) -> SeedSummary:
    """Upsert every valid record and its first version."""
    status = TemplateStatus.PUBLISHED if publish else TemplateStatus.DRAFT
    imported = skipped = 0
    for record in records:
        slug = str(record.get("id") or "").strip()
        name = str(record.get("name") or "").strip()
        prompt = str(record.get("prompt") or "").strip()
        if not name or len(name) > MAX_NAME_LENGTH or not prompt or not is_valid_slug(slug):
            print(f"skip invalid record: id={slug!r}", file=sys.stderr)
            skipped += 1
            continue
        repo.upsert_seed(
            slug=slug,
            name=name,
            prompt=prompt,
            status=status.value,
            visibility=visibility,
            model_provider=provider,
            model_name=model,
        )
        imported += 1
    return SeedSummary(imported=imported, skipped=skipped)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed templates from a JSON file.")
    parser.add_argument("--file", default="templates.json", help="Path to the templates JSON array.")
    publish = parser.add_mutually_exclusive_group()
    publish.add_argument("--publish", dest="publish", action="store_true", default=True)
    publish.add_argument("--draft", dest="publish", action="store_false")
    parser.add_argument(
        "--visibility",
        default=Visibility.PUBLIC.value,
        choices=[item.value for item in Visibility],
    )
    parser.add_argument("--provider", default="gemini")
    parser.add_argument("--model", default=None, help="Model name; defaults to the configured Gemini model.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or [])
    try:
        records = load_records(Path(args.file))
    except (OSError, ValueError) as exc:
        print(f"seed failed: {exc}", file=sys.stderr)
        return 2

    config = load_config()
    summary = seed_templates(
        TemplateRepository(config.session_factory),
        records,
        publish=args.publish,
        visibility=args.visibility,
        provider=args.provider,
        model=args.model or config.gemini.default_model,
    )
    print(f"seed done, imported={summary.imported}, skipped={summary.skipped}")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
