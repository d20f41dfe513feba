"""
SVG card and JSON rendering.

Pure functions with no state: the stats card has a fixed 465x195 layout,
the languages card shows at most ``MAX_LANGUAGES`` rows and grows 40px per row.
"""

from __future__ import annotations

import json
from typing import Any
from xml.sax.saxutils import escape

from github_stats.models import LanguageStats, UserStats

MAX_LANGUAGES = 8

_FONT = "'Segoe UI', Ubuntu, Sans-Serif"

# ── Octicons (16x16) ────────────────────────────────────────────
_ICON_STAR = (
    "M8 .25a.75.75 0 01.673.418l1.882 3.815 4.21.612a.75.75 0 01.416 1.279l-3.046 2.97"
    ".719 4.192a.75.75 0 01-1.088.791L8 12.347l-3.766 1.98a.75.75 0 01-1.088-.79l.72-4.194"
    "L.818 6.374a.75.75 0 01.416-1.28l4.21-.611L7.327.668A.75.75 0 018 .25z"
)
_ICON_FORK = (
    "M5 3.25a.75.75 0 11-1.5 0 .75.75 0 011.5 0zm0 2.122a2.25 2.25 0 10-1.5 0v.878"
    "A2.25 2.25 0 005.75 8.5h1.5v2.128a2.251 2.251 0 101.5 0V8.5h1.5a2.25 2.25 0 002.25-2.25"
    "v-.878a2.25 2.25 0 10-1.5 0v.878a.75.75 0 01-.75.75h-4.5A.75.75 0 015 6.25v-.878z"
)
_ICON_REPO = (
    "M2 2.5A2.5 2.5 0 014.5 0h8.75a.75.75 0 01.75.75v12.5a.75.75 0 01-.75.75h-2.5"
    "a.75.75 0 110-1.5h1.75v-2h-8a1 1 0 00-.714 1.7.75.75 0 01-1.072 1.05A2.495 2.495 0 012 11.5"
    "v-9zm10.5-1V9h-8c-.356 0-.694.074-1 .208V2.5a1 1 0 011-1h8z"
)
_ICON_MARK_GITHUB = (
    "M8 0C3.58 0 0 3.58 0 8c0 3.54 2.29 6.53 5.47 7.59.4.07.55-.17.55-.38 0-.19-.01-.82"
    "-.01-1.49-2.01.37-2.53-.49-2.69-.94-.09-.23-.48-.94-.82-1.13-.28-.15-.68-.52-.01-.53"
    ".63-.01 1.08.58 1.23.82.72 1.21 1.87.87 2.33.66.07-.52.28-.87.51-1.07-1.78-.2-3.64-.89"
    "-3.64-3.95 0-.87.31-1.59.82-2.15-.08-.2-.36-1.02.08-2.12 0 0 .67-.21 2.2.82.64-.18"
    " 1.32-.27 2-.27.68 0 1.36.09 2 .27 1.53-1.04 2.2-.82 2.2-.82.44 1.1.16 1.92.08 2.12"
    ".51.56.82 1.27.82 2.15 0 3.07-1.87 3.75-3.65 3.95.29.25.54.73.54 1.48 0 1.07-.01 1.93"
    "-.01 2.2 0 .21.15.46.55.38A8.013 8.013 0 0016 8c0-4.42-3.58-8-8-8z"
)
_ICON_ISSUE = (
    "M8 9.5a1.5 1.5 0 100-3 1.5 1.5 0 000 3z",
    "M8 0a8 8 0 100 16A8 8 0 008 0zM1.5 8a6.5 6.5 0 1113 0 6.5 6.5 0 01-13 0z",
)
_ICON_PEOPLE = (
    "M5.5 3.5a2 2 0 100 4 2 2 0 000-4zM2 5.5a3.5 3.5 0 115.898 2.549 5.507 5.507 0 013.034"
    " 4.084.75.75 0 11-1.482.235 4.001 4.001 0 00-7.9 0 .75.75 0 01-1.482-.236A5.507 5.507 0"
    " 013.102 8.05 3.49 3.49 0 012 5.5zM11 4a.75.75 0 100 1.5 1.5 1.5 0 01.666 2.844.75.75"
    " 0 00-.416.672v.352a.75.75 0 00.574.73c1.2.289 2.162 1.2 2.522 2.372a.75.75 0 101.434"
    "-.44 5.01 5.01 0 00-2.56-3.012A3 3 0 0011 4z"
)

LANGUAGE_COLORS: dict[str, str] = {
    "JavaScript": "#f1e05a",
    "TypeScript": "#3178c6",
    "Python": "#3572A5",
    "Java": "#b07219",
    "C": "#555555",
    "C++": "#f34b7d",
    "C#": "#178600",
    "Go": "#00ADD8",
    "Rust": "#dea584",
    "Ruby": "#701516",
    "PHP": "#4F5D95",
    "Swift": "#ffac45",
    "Kotlin": "#A97BFF",
    "Dart": "#00B4AB",
    "HTML": "#e34c26",
    "CSS": "#563d7c",
    "Shell": "#89e051",
}
DEFAULT_LANGUAGE_COLOR = "#858585"


def _stat_row(x: int, y: int, icon: str | tuple[str, ...], label: str, value: int) -> str:
    paths = (icon,) if isinstance(icon, str) else icon
    path_markup = "".join(f'<path d="{d}"/>' for d in paths)
    return (
        f'<g transform="translate({x}, {y})">'
        f'<svg class="icon" y="0" width="16" height="16" viewBox="0 0 16 16">{path_markup}</svg>'
        f'<text x="25" y="12" class="stat">{label}: <tspan class="stat-value">{value}</tspan></text>'
        "</g>"
    )


def render_stats_svg(stats: UserStats) -> str:
    width, height = 465, 195
    left = [
        (_ICON_STAR, "Total Stars", stats.total_stars),
        (_ICON_FORK, "Total Forks", stats.total_forks),
        (_ICON_REPO, "Total Repos", stats.total_repos),
        (_ICON_MARK_GITHUB, "Total Commits", stats.total_commits),
    ]
    right = [
        (_ICON_MARK_GITHUB, "Total PRs", stats.total_prs),
        (_ICON_ISSUE, "Total Issues", stats.total_issues),
        (_ICON_PEOPLE, "Followers", stats.followers),
        (_ICON_PEOPLE, "Following", stats.following),
    ]
    rows = [
        _stat_row(x, i * 30, icon, label, value)
        for x, column in ((25, left), (260, right))
        for i, (icon, label, value) in enumerate(column)
    ]
    return (
        f'<svg width="{width}" height="{height}" xmlns="http://www.w3.org/2000/svg">\n'
        "  <defs>\n"
        "    <style>\n"
        f"      .header {{ font: 600 18px {_FONT}; fill: #fff; }}\n"
        f"      .stat {{ font: 400 14px {_FONT}; fill: #9f9f9f; }}\n"
        f"      .stat-value {{ font: 600 14px {_FONT}; fill: #fff; }}\n"
        "      .icon { fill: #79ff97; }\n"
        "    </style>\n"
        "  </defs>\n"
        f'  <rect width="{width}" height="{height}" fill="#151515" rx="4.5"/>\n'
        f'  <text x="25" y="35" class="header">{escape(stats.name)}\'s GitHub Stats</text>\n'
        '  <g transform="translate(0, 55)">\n'
        + "".join(f"    {row}\n" for row in rows)
        + "  </g>\n"
        "</svg>"
    )


def render_languages_svg(languages: LanguageStats) -> str:
    width = 300
    entries = list(languages.items())[:MAX_LANGUAGES]
    height = 45 + len(entries) * 40

    rows = "".join(
        f'    <g transform="translate(25, {i * 40})">'
        f'<circle cx="6" cy="8" r="6" fill="{LANGUAGE_COLORS.get(lang, DEFAULT_LANGUAGE_COLOR)}"/>'
        f'<text x="20" y="12" class="lang-name">{escape(lang)}</text>'
        f'<text x="{width - 80}" y="12" class="percentage">{percent:g}%</text>'
        "</g>\n"
        for i, (lang, percent) in enumerate(entries)
    )
    return (
        f'<svg width="{width}" height="{height}" xmlns="http://www.w3.org/2000/svg">\n'
        "  <defs>\n"
        "    <style>\n"
        f"      .header {{ font: 600 18px {_FONT}; fill: #fff; }}\n"
        f"      .lang-name {{ font: 400 14px {_FONT}; fill: #9f9f9f; }}\n"
        f"      .percentage {{ font: 400 12px {_FONT}; fill: #9f9f9f; }}\n"
        "    </style>\n"
        "  </defs>\n"
        f'  <rect width="{width}" height="{height}" fill="#151515" rx="4.5"/>\n'
        '  <text x="25" y="35" class="header">Most Used Languages</text>\n'
        '  <g transform="translate(0, 50)">\n'
        f"{rows}"
        "  </g>\n"
        "</svg>"
    )


def render_json(payload: Any) -> str:
    """Indented JSON, keys kept in insertion order."""
    return json.dumps(payload, indent=2)
