from __future__ import annotations

from dataclasses import replace
from pathlib import Path
import argparse
import logging
import sys

import yaml

from sprite_packer.config import SpriteConfig
from sprite_packer.errors import SpriteError
from sprite_packer.session import GenerationSession


MANIFEST_KEYS = {"file", "x", "y", "margin_top", "margin_bottom"}


class ManifestError(ValueError):
    pass


def load_manifest(path: Path) -> list[dict]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ManifestError(f"Unable to read manifest: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ManifestError(f"Manifest is not valid YAML: {exc}") from exc
    if data is None:
        return []
    if not isinstance(data, list):
        raise ManifestError("Manifest must be a list of image references")

    entries: list[dict] = []
    for index, item in enumerate(data):
        if isinstance(item, str):
            item = {"file": item}
        if not isinstance(item, dict) or not isinstance(item.get("file"), str):
            raise ManifestError(f"Entry {index} needs a 'file'")
        unknown = set(item) - MANIFEST_KEYS
        if unknown:
            raise ManifestError(f"Entry {index} has unknown keys: {', '.join(sorted(unknown))}")
        entries.append(item)
    return entries


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Stack images into sprite sheets and print their CSS positions."
    )
    parser.add_argument("manifest", type=Path, help="YAML list of image references")
    parser.add_argument("--images-path", type=Path, help="Folder holding source images")
    parser.add_argument("--url-prefix", help="Prefix for sheet URLs (default: /)")
    parser.add_argument(
        "--strip-folder",
        help="Drop a trailing folder with this name from sheet names",
    )
    parser.add_argument(
        "--track-content",
        action="store_true",
        help="Also compare image contents, not only timestamps",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only print positions, do not write sheets",
    )
    args = parser.parse_args(argv)
    try:
        args.entries = load_manifest(args.manifest)
    except ManifestError as exc:
        parser.error(str(exc))
    return args


def build_config(args: argparse.Namespace) -> SpriteConfig:
    config = SpriteConfig.from_env()
    overrides = {}
    if args.images_path is not None:
        overrides["images_path"] = args.images_path
    if args.url_prefix is not None:
        overrides["url_prefix"] = args.url_prefix
    if args.strip_folder is not None:
        overrides["strip_folder"] = args.strip_folder or None
    if args.track_content:
        overrides["track_content"] = True
    return replace(config, **overrides)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    config = build_config(args)
    logging.basicConfig(
        level=config.log_level, format="%(asctime)s %(levelname)s %(message)s"
    )

    session = GenerationSession(config)
    try:
        for entry in args.entries:
            css = session.sprite_image(
                entry["file"],
                entry.get("x"),
                entry.get("y"),
                entry.get("margin_top"),
                entry.get("margin_bottom"),
            )
            print(f"{entry['file']}: {css}")
        if args.dry_run:
            return 0
        for group_key, regenerated in session.finalize_all().items():
            status = "generated" if regenerated else "unchanged"
            print(f"{session.sheet_url(group_key)}: {status}")
    except SpriteError as exc:
        logging.error("Sprite generation failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
