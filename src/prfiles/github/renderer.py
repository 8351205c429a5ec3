"""Report renderers for a file index.

Text layout, one block per touched file:

    src/app.py (2)
        - octocat:fix-login : https://github.com/o/r/pull/12
        - hubot:refactor : https://github.com/o/r/pull/15
"""

from __future__ import annotations

import json

from prfiles.index import FileEntry, FileIndex


def render_entry(entry: FileEntry) -> str:
    """Render one file block."""
    lines = [f"{entry.path} ({entry.count})"]
    for pr in entry.pull_requests:
        lines.append(f"    - {pr.branch_label} : {pr.html_url}")
    return "\n".join(lines)


def render_report(index: FileIndex) -> str:
    """Render the whole index as plain text, in index order."""
    return "\n".join(render_entry(entry) for entry in index.entries())


def render_json(index: FileIndex) -> str:
    """Render the whole index as a JSON object keyed by path."""
    payload = {
        path: [{"branch": branch, "url": url} for branch, url in pulls]
        for path, pulls in index.to_dict().items()
    }
    return json.dumps(payload, indent=2)
