"""Concrete adapters.

Driver packages are optional, so adapters are imported from their own
subpackages (or loaded through :func:`sqladapter.factory.create_adapter`).
"""
