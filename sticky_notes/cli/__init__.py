from .interactive_shell import InteractiveShell

__all__ = [
    'InteractiveShell',
]
