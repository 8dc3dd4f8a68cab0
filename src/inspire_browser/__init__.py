"""INSPIRE Browser: search INSPIRE-HEP from the terminal and open arXiv preprints."""

__version__ = "1.0.0"
