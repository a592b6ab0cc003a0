"""Exception hierarchy for reconciliation conditions.

Every condition a reconciler can hit while converging one resource item
derives from ReconcileError, so callers can isolate failures per item and
keep the sweep going.
"""


class ReconcileError(Exception):
    """Base exception for reconciliation errors."""


class ConfigurationError(ReconcileError):
    """Raised when a rule cannot be turned into desired state."""


class DeviceNotExistsError(ReconcileError):
    """Raised when a configured device is absent on this node."""

    def __init__(self, device: str) -> None:
        self.device = device
        super().__init__(f"Device [{device}] does not exist on this node")


class ExistsFormatError(ReconcileError):
    """Raised when a device already carries a different filesystem.

    Distinct from a generic mount failure: the device is left untouched and
    the condition is surfaced as an event.
    """

    def __init__(self, fstype: str, existing_format: str, mount_error: str) -> None:
        self.fstype = fstype
        self.existing_format = existing_format
        self.mount_error = mount_error
        super().__init__(
            f"Failed to mount the volume as {fstype}, volume already contains "
            f"{existing_format}, mount error: {mount_error}"
        )


class DestructiveChangeError(ReconcileError):
    """Raised when a diff would remove members from an existing resource."""


class RegionInUseError(ReconcileError):
    """Raised when a pmem device is already used by another consumer."""


class NamespaceResolutionError(ReconcileError):
    """Base exception for failures resolving a region to a namespace device."""

    def __init__(self, region: str, message: str) -> None:
        self.region = region
        super().__init__(message)


class RegionNotFoundError(NamespaceResolutionError):
    """Raised when the region is not present in the region listing."""

    def __init__(self, region: str) -> None:
        super().__init__(region, f"Region {region} not found")


class NamespaceCountError(NamespaceResolutionError):
    """Raised when a region does not hold exactly one namespace."""

    def __init__(self, region: str, count: int) -> None:
        self.count = count
        super().__init__(region, f"Region {region} has {count} namespaces, expected exactly 1")


class NamespaceModeError(NamespaceResolutionError):
    """Raised when the region's namespace is in another mode than requested."""

    def __init__(self, region: str, mode: str, expected: str) -> None:
        self.mode = mode
        self.expected = expected
        super().__init__(region, f"Region {region} namespace is in mode {mode}, expected {expected}")


class CommandError(ReconcileError):
    """Raised when a host command exits with a non-zero status."""

    def __init__(self, args: list[str], returncode: int, output: str) -> None:
        self.args_list = list(args)
        self.returncode = returncode
        self.output = output
        super().__init__(
            f"Command '{' '.join(args)}' failed with exit code {returncode}: {output.strip()}"
        )


class NodeIdentityError(ReconcileError):
    """Raised when the node and its labels cannot be resolved."""
