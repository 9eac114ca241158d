from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class VmState(str, Enum):
    RUNNING = 'running'
    STOPPED = 'stopped'
    NOT_CREATED = 'not_created'


# Remote status strings that map onto VmState
REMOTE_STATES = {
    'running': VmState.RUNNING,
    'stopped': VmState.STOPPED,
}


class Ticket(BaseModel):
    """Payload of POST /access/ticket."""
    ticket: str
    csrf_token: str = Field(alias='CSRFPreventionToken')


class NodeEntry(BaseModel):
    node: str


class ClusterResource(BaseModel):
    """One entry of GET /cluster/resources?type=vm."""
    id: str
    vmid: int
    node: str
    type: Optional[str] = None
    status: Optional[str] = None
    name: Optional[str] = None


class VmInfo(BaseModel):
    id: int
    type: str
    node: str


class TaskStatus(BaseModel):
    status: Optional[str] = None
    exitstatus: Optional[str] = None

    @property
    def finished(self) -> bool:
        return self.exitstatus is not None


class StorageEntry(BaseModel):
    volid: str
    format: Optional[str] = None
    size: Optional[int] = None
