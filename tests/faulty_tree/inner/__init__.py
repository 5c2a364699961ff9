raise RuntimeError("sub-package cannot be set up")
