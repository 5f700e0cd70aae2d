"""Export layer: turns rows plus column definitions into downloadable payloads.

Export never filters, sorts or mutates; callers pick the row set (raw,
filtered or filtered-and-sorted) and this package only serializes it.
"""
