import logging
from pathlib import Path, PurePosixPath
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import mdformat

from prettyplease.errors import FormattingError, WorkspaceError
from prettyplease.metric import formatted_files_counter

logger = logging.getLogger("prettyplease")


DEFAULT_MODES: Mapping[str, str] = {
    ".md": "markdown",
    ".markdown": "markdown",
}


class Formatter:
    """Pure text formatter, dispatching on a language mode.

    Only the ``markdown`` mode exists, backed by mdformat. Output is
    deterministic and formatting already formatted text returns it
    unchanged.
    """

    def __init__(
        self,
        markdown_extensions: Sequence[str] = (),
        modes: Optional[Mapping[str, str]] = None,
    ):
        self.markdown_extensions = tuple(markdown_extensions)
        self.modes = dict(DEFAULT_MODES if modes is None else modes)

    def detect_mode(self, filename: str) -> str:
        suffix = PurePosixPath(filename).suffix.lower()
        try:
            return self.modes[suffix]
        except KeyError:
            raise FormattingError(
                f"No formatting mode for {filename}", path=filename
            ) from None

    def format(self, text: str, mode: str) -> str:
        if mode != "markdown":
            raise ValueError(f"Unknown formatting mode {mode}")
        return mdformat.text(text, extensions=self.markdown_extensions)


def resolve_path(root: Path, filename: str) -> Path:
    root = root.resolve()
    path = (root / filename).resolve()
    if root != path and root not in path.parents:
        raise WorkspaceError(f"{filename} is outside of the workspace {root}")
    return path


def format_files(
    root: Path, filenames: Iterable[str], formatter: Formatter
) -> Dict[str, str]:
    """
    Format ``filenames`` (relative to ``root``) in memory and return the new
    contents of the files that would change, in input order.
    """
    results: Dict[str, str] = {}

    for filename in filenames:
        path = resolve_path(root, filename)
        if not path.is_file():
            raise WorkspaceError(f"{filename} does not exist in the workspace")

        mode = formatter.detect_mode(filename)
        try:
            original = path.read_bytes().decode("utf-8")
        except UnicodeDecodeError as e:
            raise FormattingError(
                f"Unable to decode {filename} as UTF-8: {e}", path=filename
            ) from e

        logger.debug("Formatting %s as %s", filename, mode)
        try:
            formatted = formatter.format(original, mode)
        except Exception as e:
            raise FormattingError(
                f"Formatting {filename} failed: {e}", path=filename
            ) from e

        if formatted != original:
            results[filename] = formatted
        formatted_files_counter.labels(changed=str(formatted != original)).inc()

    return results


def apply_formatting(
    root: Path, filenames: Iterable[str], formatter: Formatter
) -> List[str]:
    """
    Format ``filenames`` in place and return the ones whose contents changed.
    Every file is formatted before anything is written, so a failure leaves
    the working copy untouched.
    """
    results = format_files(root, filenames, formatter)
    for filename, formatted in results.items():
        logger.info("Rewriting %s", filename)
        resolve_path(root, filename).write_bytes(formatted.encode("utf-8"))
    return list(results)
