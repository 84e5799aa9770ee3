# Services package init
"""
Notes API - Services Layer
============================

What:  Persistence logic sitting between routes (HTTP) and the filesystem.

Service Inventory:
    - NoteStore: maps note names to <cache>/<name>.txt and performs CRUD
"""
