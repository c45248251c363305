"""Infrastructure layer — process execution, evaluation, and the Workspace.

Modules here build on the domain layer and the config loader.
They must never import from services, commands, or output.
"""
