"""Serializes manifests to (and reads them from) UTF-8 JSON files."""

import logging
import os
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from common.types import Manifest
from builder.exceptions import DirectoryCreationError, SerializationError

logger = logging.getLogger(__name__)

MANIFEST_INDENT = 2


def serialize_manifest(manifest: Manifest) -> str:
    """
    Encode a manifest as indented JSON with fields Name, Chunks, Size.

    Raises:
        SerializationError: If the manifest cannot be encoded
    """
    try:
        return manifest.model_dump_json(by_alias=True, indent=MANIFEST_INDENT) + "\n"
    except ValueError as e:
        raise SerializationError(f"failed to encode manifest '{manifest.name}': {e}") from e


def write_manifest(manifest: Manifest, path: Union[str, Path]) -> Path:
    """
    Write manifest to path.

    The document is written to a temporary sibling file and moved into
    place, so a failed write never leaves a manifest behind.

    Args:
        manifest: Assembled manifest
        path: Destination file

    Returns:
        Path of the written manifest

    Raises:
        DirectoryCreationError: If the parent directory cannot be created
        SerializationError: If encoding or writing fails
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryCreationError(f"failed to create directory {path.parent}: {e}") from e

    document = serialize_manifest(manifest)
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        with open(tmp_path, 'w', encoding='utf-8') as f:
            f.write(document)
        os.replace(tmp_path, path)
    except OSError as e:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError as cleanup_error:
            logger.warning(f"Failed to remove temporary manifest {tmp_path}: {cleanup_error}")
        raise SerializationError(f"failed to write manifest {path}: {e}") from e

    logger.info(f"Wrote manifest with {len(manifest.chunks)} entries to {path}")
    return path


def read_manifest(path: Union[str, Path]) -> Manifest:
    """
    Load a manifest written by write_manifest.

    Raises:
        SerializationError: If the file cannot be read or is not a valid manifest
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return Manifest.model_validate_json(f.read())
    except OSError as e:
        raise SerializationError(f"failed to read manifest {path}: {e}") from e
    except ValidationError as e:
        raise SerializationError(f"invalid manifest {path}: {e}") from e
