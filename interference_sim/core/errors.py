class LoadError(Exception):
    """The interference table could not be built; the plugin is unusable."""


class DirectoryUnreadableError(LoadError):
    def __init__(self, path: str, cause: Exception = None):
        self.path = path
        self.cause = cause
        msg = f"reading directory {path}"
        if cause is not None:
            msg += f": {cause}"
        super().__init__(msg)


class MalformedRecordError(LoadError):
    def __init__(self, file_name: str, cause: Exception = None):
        self.file_name = file_name
        self.cause = cause
        msg = f"reading {file_name}"
        if cause is not None:
            msg += f": {cause}"
        super().__init__(msg)


class UnsupportedResourceKindError(LoadError):
    def __init__(self, kind):
        self.kind = kind
        super().__init__(f"unsupported resource {kind}")


class EmptyTableError(LoadError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"no interference records found in {path}")


class ScoreError(Exception):
    """Scoring failed for a single node in a single cycle."""


class NodeNotFoundError(ScoreError):
    def __init__(self, node_name: str):
        self.node_name = node_name
        super().__init__(f"getting node {node_name!r} from snapshot: not found")
