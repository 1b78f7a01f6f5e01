"""
Outbound Adapters
=================

Concrete implementations of the driven ports: Wikimedia knowledge
sources, the Ollama generation backend and the lookup caches.
"""
