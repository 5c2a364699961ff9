"""A package with a module that fails while being imported."""
