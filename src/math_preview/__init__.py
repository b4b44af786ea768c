"""Math preview: typeset TeX math into themed SVG hover content."""

__version__ = "0.1.0"
