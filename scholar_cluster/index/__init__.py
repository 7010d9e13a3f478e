from .storage import load_index, save_index
from .text_index import IndexDocument, TextIndex

__all__ = ["IndexDocument", "TextIndex", "load_index", "save_index"]
