from gymaccess.infrastructure.sync_log.sync_log import SyncLog

__all__ = ["SyncLog"]
