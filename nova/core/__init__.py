"""Core runtime primitives of the framework.

Modules in this package own the per-request application context and the
small collaborators it is built from: configuration, paths, the request
value, the namespace loader and the error taxonomy.
"""
