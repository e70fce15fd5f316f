from .session import ActionCancelled, StatusMessage, TerminalSession
from .shell import SnippetShell, edit_in_editor

__all__ = ["ActionCancelled", "SnippetShell", "StatusMessage", "TerminalSession", "edit_in_editor"]
