
class BanalytiqSyncError(RuntimeError):
    pass


class BaseStoreMissing(BanalytiqSyncError):

    def __init__(self, path):
        super().__init__(f"Base database file not found: {path}")
        self.path = path


class ConfigurationError(BanalytiqSyncError):
    pass


class ConfigurationMissing(ConfigurationError):
    pass


class SourceUnavailable(BanalytiqSyncError):
    pass


class InvalidSnapshot(BanalytiqSyncError):
    pass
