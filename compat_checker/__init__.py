"""
Add-on Compatibility Checker

Keeps a locally cached picture of which installed add-ons are compatible with
the host application's release and ESR channels, reconciled against a remote
compatibility report and against local add-on lifecycle events.

Components:
    - RefreshScheduler: Serialized FIFO job queue (single-flight)
    - ReconciliationEngine: Refresh/rebuild/patch state machine
    - CompatibilityStore: Persisted cache (memory or MongoDB)
    - reduce_status / build_detail_view: Badge summary and ranked detail view

Usage:
    from compat_checker.worker import CompatService

    service = CompatService.from_settings(settings, addon_source=inventory)
    await service.start()
"""

__version__ = "0.1.0"
