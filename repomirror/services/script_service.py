"""
Offline mirror script generation for repomirror.

The API-based mirror keeps only file contents. When full history,
tags and authorship matter, the operator can run a plain git mirror
instead; this module only produces the text of that shell script.
"""

from datetime import datetime
from typing import Optional

from ..domain.locator import RepositoryLocator

SCRIPT_TEMPLATE = """#!/usr/bin/env bash
# Full-history mirror of {source_full} into {dest_full}
# Generated by repomirror on {generated}
#
# Requires git. Tokens are read from the environment:
#   SOURCE_TOKEN  token with read access to {source_full}
#   DEST_TOKEN    token with push access to {dest_full}
#
# WARNING: every branch and tag of {dest_full} is replaced.

set -euo pipefail

: "${{SOURCE_TOKEN:?set SOURCE_TOKEN}}"
: "${{DEST_TOKEN:?set DEST_TOKEN}}"

SOURCE_URL="https://x-access-token:${{SOURCE_TOKEN}}@{source_host}/{source_path}.git"
DEST_URL="https://x-access-token:${{DEST_TOKEN}}@{dest_host}/{dest_path}.git"

WORKDIR="$(mktemp -d)"
trap 'rm -rf "$WORKDIR"' EXIT

echo "Cloning {source_full} with full history..."
git clone --mirror "$SOURCE_URL" "$WORKDIR/{mirror_dir}"

cd "$WORKDIR/{mirror_dir}"

# Large repositories
git config http.postBuffer 524288000

# Pull request refs cannot be pushed
git for-each-ref --format='delete %(refname)' refs/pull | git update-ref --stdin

echo "Pushing to {dest_full}..."
git push --mirror "$DEST_URL"

echo "Mirror of {source_full} into {dest_full} complete."
"""


def generate_mirror_script(
    source: RepositoryLocator,
    dest: RepositoryLocator,
    generated: Optional[datetime] = None,
) -> str:
    """
    Build a self-contained bash script mirroring ``source`` into ``dest``.

    The script uses ``git clone --mirror`` / ``git push --mirror`` and
    never embeds tokens.

    Args:
        source: Repository to copy from
        dest: Repository to overwrite
        generated: Timestamp written in the header (now if None)

    Returns:
        Script text
    """
    generated = generated or datetime.now()
    return SCRIPT_TEMPLATE.format(
        source_full=source.full_name,
        dest_full=dest.full_name,
        source_host=source.host,
        dest_host=dest.host,
        source_path=source.full_name,
        dest_path=dest.full_name,
        mirror_dir=f"{source.name}.git",
        generated=generated.strftime('%Y-%m-%d %H:%M:%S'),
    )

