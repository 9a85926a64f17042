"""
Service Organization
====================

**ai/**
  Provider backends and the two generative-AI calls (image analysis, advice).
  Stateless apart from the configured backend.

**application/**
  Singleton services managed by ServiceContainer. One instance per application.
  Example: PlantSessionService
"""
