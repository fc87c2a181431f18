"""Per-language declaration adapters.

Each adapter turns source text into `doclink.code.Declaration` records:
name, line, ordered parameters with optional type tokens, and the
comment block directly above the declaration.
"""
