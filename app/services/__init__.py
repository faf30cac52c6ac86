# app/services/__init__.py
"""
Service layer root package.

The portal keeps no database of its own. Services work on records fetched
through ``app.services.integrations.hostel_api`` and on the local key-value storage:

- status / records: vocabulary and ingestion of upstream records
- filtering / aggregation / export: pure functions over record lists
- presets / drafts / storage: locally persisted UI state
- dashboard: per-view record lists with last-request-wins refresh
"""
