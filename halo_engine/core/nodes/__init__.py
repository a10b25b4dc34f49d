"""
Node system: the node contract, the registry and template references.
"""
