"""Qt widgets. Importing this package requires PyQt6."""
