"""A package whose sub-package fails while being imported."""
