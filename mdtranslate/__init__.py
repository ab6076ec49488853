"""Top-level package for mdtranslate.

This package translates a Markdown documentation tree, driven by a
table-of-contents manifest, through an LLM provider with a persistent
content-addressed cache. The main orchestration entry point is
`TranslationPipeline`.
"""

from .pipeline import TranslationPipeline

__all__ = ["TranslationPipeline", "__version__"]

__version__ = "0.1.0"
