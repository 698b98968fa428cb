"""Document model: keys, data values, graphs, nodes and edges.

The public names are re-exported from the top-level ``graphml`` package.
"""
