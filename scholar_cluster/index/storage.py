"""
Persisting and reloading a built text index with the standard library
`pickle` module. Failing to read an index surfaces as
IndexUnavailableError, the same error a query gets when the index is not
open.
"""

from __future__ import annotations

import pickle
from pathlib import Path
from typing import Union

from scholar_cluster.errors import IndexUnavailableError
from scholar_cluster.index.text_index import TextIndex

PathLike = Union[str, Path]

INDEX_SUFFIX = ".pkl"


def save_index(index: TextIndex, path: PathLike, overwrite: bool = True) -> Path:
    """
    Serialize a built index to disk.

    - If `path` has no suffix, `.pkl` is appended.
    - Creates parent directories if needed.
    - If `overwrite` is False and the file already exists, raises FileExistsError.
    """
    if not index.is_open:
        raise IndexUnavailableError("Only a built, open index can be saved")

    output_path = Path(path)
    if output_path.suffix == "":
        output_path = output_path.with_suffix(INDEX_SUFFIX)

    output_path.parent.mkdir(parents=True, exist_ok=True)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Index file already exists and overwrite=False: {output_path}")

    with output_path.open("wb") as f:
        pickle.dump(index, f, protocol=pickle.HIGHEST_PROTOCOL)

    return output_path


def load_index(path: PathLike) -> TextIndex:
    """
    Load a text index saved with `save_index`.
    """
    p = Path(path)
    if not p.is_file():
        raise IndexUnavailableError(f"Index file not found: {p}")

    try:
        with p.open("rb") as f:
            index = pickle.load(f)
    except (OSError, EOFError, ValueError, pickle.UnpicklingError, AttributeError, ImportError) as exc:
        raise IndexUnavailableError(f"Could not read index file {p}: {exc}") from exc

    if not isinstance(index, TextIndex):
        raise IndexUnavailableError(f"{p} does not contain a text index")
    return index
