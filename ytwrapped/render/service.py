"""Rendering pipeline for the shareable year-in-review page."""

from __future__ import annotations

import hashlib
import shutil
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import orjson
import pendulum
from jinja2 import Environment, FileSystemLoader, select_autoescape

from ytwrapped.aggregate.models import StatisticsReport

PACKAGE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_TEMPLATE_DIR = PACKAGE_DIR / "templates"
DEFAULT_STATIC_DIR = PACKAGE_DIR / "render" / "static"
MAX_PROJECT_CHIPS = 10
MIN_BAR_HEIGHT = 3


class RenderService:
    """Render an aggregated report into static HTML and publish with diff awareness."""

    def __init__(
        self,
        *,
        report_path: Path,
        build_dir: Path,
        public_dir: Path,
        template_dir: Path = DEFAULT_TEMPLATE_DIR,
        static_dir: Path = DEFAULT_STATIC_DIR,
        base_url: str | None = None,
    ) -> None:
        """Point the renderer at the report, template, and output directories.

        ``base_url`` is used to resolve relative avatar URLs.
        """
        self._report_path = Path(report_path)
        self._template_dir = Path(template_dir)
        self._static_dir = Path(static_dir)
        self._build_dir = Path(build_dir)
        self._public_dir = Path(public_dir)
        self._base_url = base_url.rstrip("/") if base_url else None
        self._env = Environment(
            loader=FileSystemLoader(self._template_dir),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def run(self) -> dict[str, str]:
        """Render the report and publish updated artifacts."""
        report = self._load_report()
        self._prepare_build_dir()
        self._render_index(report)
        (self._build_dir / "share.txt").write_text(share_text(report), encoding="utf-8")
        self._copy_static_assets()
        return self._publish()

    def _load_report(self) -> StatisticsReport:
        if not self._report_path.exists():
            msg = f"Aggregated report not found at {self._report_path}"
            raise FileNotFoundError(msg)
        payload = orjson.loads(self._report_path.read_bytes())
        return StatisticsReport.model_validate(payload)

    def _prepare_build_dir(self) -> None:
        if self._build_dir.exists():
            shutil.rmtree(self._build_dir)
        self._build_dir.mkdir(parents=True, exist_ok=True)

    def _render_index(self, report: StatisticsReport) -> None:
        template = self._env.get_template("index.html.j2")
        target = self._build_dir / "index.html"
        target.write_text(template.render(**self._context(report)), encoding="utf-8")

    def _context(self, report: StatisticsReport) -> dict[str, Any]:
        time_stats = report.time_stats
        streak = time_stats.longest_streak
        return {
            "report": report,
            "avatar_url": self._avatar_url(report),
            "initials": initials(report.user.display_name),
            "projects": report.project_stats.projects[:MAX_PROJECT_CHIPS],
            "monthly_bars": monthly_bars(time_stats.monthly_activity),
            "busiest_hour": f"{time_stats.busiest_hour.hour:02d}:00",
            "streak_start": _short_date(streak.start_date),
            "streak_end": _short_date(streak.end_date),
            "next_year": report.year + 1,
            "report_data": report.model_dump(mode="json", by_alias=True),
        }

    def _avatar_url(self, report: StatisticsReport) -> str | None:
        avatar = report.user.avatar_url
        if avatar and avatar.startswith("/") and self._base_url:
            return f"{self._base_url}{avatar}"
        return avatar

    def _copy_static_assets(self) -> None:
        if not self._static_dir.exists():
            return
        target_dir = self._build_dir / "static"
        for source in self._static_dir.rglob("*"):
            if not source.is_file():
                continue
            destination = target_dir / source.relative_to(self._static_dir)
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, destination)

    def _publish(self) -> dict[str, str]:
        build_hashes = self._compute_hashes(self._build_dir)
        self._public_dir.mkdir(parents=True, exist_ok=True)
        for relative, checksum in build_hashes.items():
            source = self._build_dir / relative
            destination = self._public_dir / relative
            destination.parent.mkdir(parents=True, exist_ok=True)
            if not destination.exists() or self._hash_file(destination) != checksum:
                shutil.copy2(source, destination)
        manifest_path = self._public_dir / "manifest.json"
        manifest_path.write_bytes(orjson.dumps(build_hashes, option=orjson.OPT_INDENT_2))
        return build_hashes

    def _compute_hashes(self, root: Path) -> dict[str, str]:
        return {
            file_path.relative_to(root).as_posix(): self._hash_file(file_path)
            for file_path in sorted(p for p in root.rglob("*") if p.is_file())
        }

    def _hash_file(self, path: Path) -> str:
        digest = hashlib.sha256()
        with path.open("rb") as handle:
            for chunk in iter(lambda: handle.read(8192), b""):
                digest.update(chunk)
        return digest.hexdigest()


def share_text(report: StatisticsReport) -> str:
    """Return the plain-text summary users paste into chats."""
    summary = report.summary
    return (
        f"My YouTrack {report.year} Wrapped:\n"
        f"- {summary.total_issues_created} issues created\n"
        f"- {summary.total_issues_resolved} issues resolved\n"
        f"- {summary.total_comments} comments left\n"
        f"- {summary.total_articles} articles written\n"
        "\n"
        f"{summary.total_contributions} total contributions!\n"
    )


def initials(name: str) -> str:
    """Up to two upper-case initials for the avatar placeholder."""
    return "".join(part[0] for part in name.split() if part)[:2].upper()


def monthly_bars(monthly_activity: Mapping[int, int]) -> list[dict[str, int]]:
    """Bar heights as a percentage of the busiest month, never below MIN_BAR_HEIGHT."""
    peak = max(monthly_activity.values(), default=0)
    bars = []
    for month in sorted(monthly_activity):
        count = monthly_activity[month]
        height = count / peak * 100 if peak > 0 else 0
        bars.append({"month": month, "count": count, "height": max(round(height), MIN_BAR_HEIGHT)})
    return bars


def _short_date(value: str | None) -> str:
    if not value:
        return ""
    return pendulum.parse(value).format("MMM D")
