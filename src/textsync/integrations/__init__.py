"""
textsync.integrations - External Service Integration Layer
============================================================

Adapters for the external services TextSync depends on. Each integration
is abstracted behind an interface so implementations can be swapped
(real GitHub → in-memory mock).

Sub-packages:
    github/ - Remote repository adapters (GitHub REST, Mock)
"""

__all__: list[str] = []
