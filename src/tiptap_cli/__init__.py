"""tiptap-cli - add Tiptap UI components and templates to your project."""

__version__ = "0.1.0"
