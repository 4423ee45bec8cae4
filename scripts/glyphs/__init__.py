"""Icon catalog tooling.

Extracts icon category metadata from a source declaration, classifies an
icon directory tree and writes the JSON indexes the gallery reads:

- Literal extraction (extractor, literal)
- Classification (classifier, patterns, text)
- Catalog assembly (builder)
- Gallery queries (query)
- Legacy folder migration (reorganizer)
"""

__version__ = "0.1.0"
