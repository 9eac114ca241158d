"""
Error taxonomy for the Proxmox VM client.

Transport failures are translated into ``ApiError`` subclasses by the gateway;
the poller and lifecycle layer add their own errors on top.
"""


class ProxmoxError(Exception):
    pass


class ApiError(ProxmoxError):
    default_message = "API request failed"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class ApiConnectionError(ApiError):
    default_message = "Connection to the Proxmox API failed"


class InvalidCredentials(ApiError):
    default_message = "Invalid username or password"


class ServerError(ApiError):
    default_message = "Proxmox API reported an internal server error"


class UnauthorizedError(ApiError):
    default_message = "Not authorized to perform this request"


class ApiNotImplemented(ApiError):
    default_message = "Requested API call is not implemented by the server"


class TaskTimeout(ProxmoxError):
    def __init__(self, message_key):
        self.message_key = message_key
        super().__init__(message_key)


class NoVmIdAvailable(ProxmoxError):
    def __init__(self, message="No free VM id left in the configured range"):
        super().__init__(message)


class MalformedTaskHandle(ProxmoxError, ValueError):
    def __init__(self, value):
        self.value = value
        super().__init__(f"Malformed task handle: {value!r}")


class VmNotFound(ProxmoxError):
    def __init__(self, vm_id):
        self.vm_id = vm_id
        super().__init__(f"VM {vm_id} not found in cluster resources")
