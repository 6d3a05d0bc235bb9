from raptar.tui.renderers import ArchiveConsoleUI

__all__ = ["ArchiveConsoleUI"]
