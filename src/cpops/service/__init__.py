"""cPOP services."""
