"""Infrastructure layer: vault filesystem access.

This layer depends on stdlib only.
It must never import from services, commands, or output.
The service layer bridges between domain models and infrastructure.
"""
