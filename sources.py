"""Collect source files for a review run: filtering, language detection, diffs."""

import fnmatch
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from unidiff import PatchSet

logger = logging.getLogger(__name__)


@dataclass
class SourceFile:
    """One file submitted for review."""

    path: str
    content: str
    language: str


# File extensions to skip during review
SKIP_EXTENSIONS = {
    '.md', '.txt', '.rst', '.adoc',           # Docs
    '.lock',                                   # Lock files
    '.png', '.jpg', '.jpeg', '.gif', '.svg', '.ico', '.webp',  # Images
    '.woff', '.woff2', '.ttf', '.eot',        # Fonts
    '.csv', '.json', '.xml', '.yaml', '.yml', '.toml',  # Data
    '.min.js', '.min.css', '.map',            # Build artifacts
    '.exe', '.dll', '.so', '.dylib', '.pyc',  # Binary
    '.zip', '.tar', '.gz', '.pdf',            # Archives/docs
}

SKIP_FILENAMES = {
    'package-lock.json', 'yarn.lock', 'pnpm-lock.yaml',
    'Pipfile.lock', 'poetry.lock', 'uv.lock',
    '.gitignore', '.gitattributes', '.editorconfig',
    'LICENSE', 'LICENSE.md', 'LICENSE.txt',
}

SKIP_DIRECTORIES = {'node_modules/', 'vendor/', 'dist/', 'build/', '.git/', '__pycache__/', '.venv/'}

EXTENSION_LANGUAGES = {
    '.py': 'python',
    '.scala': 'scala',
    '.sc': 'scala',
    '.sql': 'sql',
    '.tf': 'terraform',
    '.hcl': 'terraform',
}

PYSPARK_INDICATORS = (
    'from pyspark',
    'import pyspark',
    'SparkSession',
    'SparkContext',
    '.read.',
    '.write.',
    'DataFrame',
    'spark.sql',
    '.createDataFrame',
)


def detect_language(path: str) -> str:
    """Language tag from the file extension; "text" when unknown."""
    return EXTENSION_LANGUAGES.get(Path(path).suffix.lower(), 'text')


def resolve_language(content: str, language: str) -> str:
    """Promote plain Python to "pyspark" when the file uses Spark."""
    if language != 'python':
        return language
    if any(indicator in content for indicator in PYSPARK_INDICATORS):
        return 'pyspark'
    return language


def should_review_file(filename: str, skip_patterns: Iterable[str] = ()) -> bool:
    """Check if file should be reviewed based on name/extension and glob patterns."""
    normalized = filename.replace('\\', '/')

    # Check directory
    for skip_dir in SKIP_DIRECTORIES:
        if normalized.startswith(skip_dir) or f'/{skip_dir}' in normalized:
            return False

    # Check exact filename
    basename = normalized.split('/')[-1]
    if basename in SKIP_FILENAMES:
        return False

    # Check extension
    for ext in SKIP_EXTENSIONS:
        if normalized.lower().endswith(ext):
            return False

    return not any(fnmatch.fnmatch(normalized, pattern) for pattern in skip_patterns)


def changed_paths(diff_text: str) -> list[str]:
    """
    Paths touched by a unified diff, excluding deleted files.

    Args:
        diff_text: Raw unified diff string (e.g. `git diff origin/main`)

    Returns:
        Target paths in diff order
    """
    patch_set = PatchSet(diff_text)
    return [
        patched_file.path
        for patched_file in patch_set
        if not patched_file.is_removed_file
    ]


def _expand(paths: Iterable[str]) -> list[Path]:
    files: list[Path] = []
    seen: set[Path] = set()
    for raw in paths:
        path = Path(raw)
        candidates = sorted(p for p in path.rglob('*') if p.is_file()) if path.is_dir() else [path]
        for candidate in candidates:
            if candidate not in seen:
                seen.add(candidate)
                files.append(candidate)
    return files


def load_sources(
    paths: Iterable[str],
    skip_patterns: Iterable[str] = (),
) -> list[SourceFile]:
    """
    Read files for review.

    Directories are walked recursively. Files that are filtered out, have an
    unsupported language, or cannot be read are skipped with a log message.
    """
    skip_patterns = tuple(skip_patterns)
    sources: list[SourceFile] = []

    for path in _expand(paths):
        name = path.as_posix()
        if not should_review_file(name, skip_patterns):
            logger.debug("Skipping %s - filtered", name)
            continue

        language = detect_language(name)
        if language == 'text':
            logger.debug("Skipping %s - unsupported language", name)
            continue

        try:
            content = path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s: %s", name, e)
            continue

        sources.append(SourceFile(name, content, resolve_language(content, language)))

    logger.info("Loaded %d file(s) for review", len(sources))
    return sources
