"""Domain layer: the document parsing engine.

This layer depends only on stdlib, pydantic, ruamel.yaml and markdown-it-py.
It must never import from services, infrastructure, commands, or config.
"""
