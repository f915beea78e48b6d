"""
Dataset validation module.

Final integrity checks run on the completed packet set before export.
"""
