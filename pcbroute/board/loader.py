"""
Board File Loader

Reads ``.kicad_pcb`` files from disk and turns them into trees and board
models, mapping file-system and parse failures onto ``BoardError``.
"""

import logging
from pathlib import Path
from typing import Union

from ..sexpr import Tree, parse
from .errors import BoardError, ErrorKind
from .model import BoardModel

logger = logging.getLogger(__name__)

BOARD_SUFFIX = ".kicad_pcb"


def load_tree(path: Union[str, Path]) -> Tree:
    """
    Read and parse a board file, without building the model.

    The returned tree has trivial outer nesting removed, so its name is
    ``kicad_pcb`` for a well-formed board.

    Raises:
        BoardError: WRONG_FILE_EXTENSION, IO_FAILURE or TREE_PARSE_FAILURE
    """
    path = Path(path)
    if path.suffix != BOARD_SUFFIX:
        raise BoardError(ErrorKind.WRONG_FILE_EXTENSION,
                         f"expected {BOARD_SUFFIX}, got {path.name}")

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise BoardError(ErrorKind.IO_FAILURE, f"{path}: {e}") from e
    except UnicodeDecodeError as e:
        raise BoardError(ErrorKind.IO_FAILURE, f"{path} is not UTF-8 text") from e

    logger.debug(f"Read {len(text)} characters from {path}")

    tree = parse(text)
    if tree is None:
        raise BoardError(ErrorKind.TREE_PARSE_FAILURE, str(path))
    return tree.remove_trivial()


def load_board(path: Union[str, Path]) -> BoardModel:
    """
    Load a KiCad board file into a ``BoardModel``.

    Args:
        path: Path to a ``.kicad_pcb`` file

    Returns:
        The loaded board

    Raises:
        BoardError: If the file cannot be read, parsed or interpreted
    """
    tree = load_tree(path)
    logger.info(f"Loading board from {path}")
    return BoardModel.load(tree)
