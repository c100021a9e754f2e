"""Settings package.

`base.py` contains the configuration shared across environments. The
`dev.py`, `test.py` and `prod.py` modules extend it with environment
specific overrides.
"""
