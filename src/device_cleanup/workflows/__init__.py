from .deletion import DeletionProcessor, select_directory_match, summarize

__all__ = ["DeletionProcessor", "select_directory_match", "summarize"]
