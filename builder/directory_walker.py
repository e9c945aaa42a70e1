"""Enumerates regular files under an input directory."""

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

from builder.exceptions import ScanError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _raise_scan_error(error: OSError) -> None:
    raise ScanError(f"failed to walk {error.filename}: {error.strerror or error}") from error


def iter_files(root_path: PathLike, exclude: Optional[Iterable[PathLike]] = None) -> Iterator[Path]:
    """
    Yield every regular file under root_path.

    Directories are visited in sorted order so that two walks over an
    unchanged tree yield the same sequence. Symbolic links to directories
    are not followed; broken links and special files are skipped.

    Args:
        root_path: Directory to walk
        exclude: Directories whose contents are skipped, subdirectories included

    Yields:
        Path of each regular file

    Raises:
        ScanError: If root_path is not a directory or a directory cannot be listed
    """
    root = Path(root_path)
    if not root.is_dir():
        raise ScanError(f"not a directory: {root}")
    excluded = {Path(p).resolve() for p in exclude or ()}

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_scan_error):
        if excluded and Path(dirpath).resolve() in excluded:
            logger.debug(f"Skipping excluded directory {dirpath}")
            dirnames.clear()
            continue
        dirnames.sort()
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if path.is_file():
                yield path
            else:
                logger.debug(f"Skipping non-regular file {path}")


def count_files(root_path: PathLike, exclude: Optional[Iterable[PathLike]] = None) -> int:
    """
    Count regular files under root_path.

    Args:
        root_path: Directory to walk
        exclude: Directories to skip, as for iter_files

    Returns:
        Number of regular files

    Raises:
        ScanError: If the tree cannot be walked
    """
    return sum(1 for _ in iter_files(root_path, exclude))
