# Render the changelog to static files without running the web server

import argparse
import json
import sys
from pathlib import Path

from changelog_browser.configs.app_configs import BUILD_TIMESTAMP
from changelog_browser.releases.exceptions import ChangelogError
from changelog_browser.releases.source import fetch_releases
from changelog_browser.releases.source import latest_version
from changelog_browser.rendering.page import render_view
from changelog_browser.utils.logger import setup_logger

logger = setup_logger()


def build(out_dir: Path, build_timestamp: int = BUILD_TIMESTAMP) -> Path:
    """Write index.html, version.json and latest.json into out_dir."""
    releases = fetch_releases()

    out_dir.mkdir(parents=True, exist_ok=True)
    index_path = out_dir / "index.html"
    index_path.write_text(
        render_view(releases, build_timestamp=build_timestamp), encoding="utf-8"
    )

    version = latest_version(releases)
    marker = {"version": version, "buildTimestamp": build_timestamp}
    with open(out_dir / "version.json", "w") as f:
        json.dump(marker, f)
    with open(out_dir / "latest.json", "w") as f:
        json.dump({"version": version}, f)

    logger.info(f"Wrote {len(releases)} releases to {index_path} (latest {version})")
    return index_path


def main() -> int:
    parser = argparse.ArgumentParser(description="Build the static changelog site.")
    parser.add_argument(
        "--out-dir", type=Path, default=Path("dist"), help="Output directory"
    )
    parser.add_argument(
        "--build-timestamp",
        type=int,
        default=BUILD_TIMESTAMP,
        help="Epoch milliseconds written to version.json",
    )
    args = parser.parse_args()

    try:
        build(args.out_dir, args.build_timestamp)
    except ChangelogError as e:
        logger.error(f"Could not fetch releases: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
