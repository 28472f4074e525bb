"""Application layer - Use cases and orchestration.

Services coordinate the domain through protocols (store, gateway, Sync Log,
logger) and contain the integration's business flows:

- access_resolution: may a member use a zone right now
- credential_sync: push members and cards to the vendor
- event_reconciliation: door events to attendance sessions
- event_ingestion: webhook deliveries to the event queue
- event_poller: periodic reconciliation of all branches
"""
