"""
Parsing of Proxmox task handles (UPIDs).

A UPID looks like::

    UPID:pve1:0000A1B2:0012C3D4:5F6E7A8B:qmstart:100:root@pam:

i.e. the 'UPID' prefix, node, pid, pstart, starttime, task type, task id and
user, each terminated by a colon.
"""
from dataclasses import dataclass

from .errors import MalformedTaskHandle

UPID_PREFIX = 'UPID'
IMGCOPY = 'imgcopy'


@dataclass(frozen=True)
class TaskHandle:
    raw: str
    node: str
    pid: str
    pstart: str
    starttime: str
    task_type: str
    task_id: str
    user: str

    @property
    def is_imgcopy(self) -> bool:
        return self.task_type == IMGCOPY


def parse_upid(value) -> TaskHandle:
    if not isinstance(value, str):
        raise MalformedTaskHandle(value)
    parts = value.split(':')
    # prefix + 7 fields + empty string after the trailing colon
    if len(parts) < 9 or parts[0] != UPID_PREFIX or parts[-1] != '':
        raise MalformedTaskHandle(value)
    node, pid, pstart, starttime = parts[1:5]
    # extra colons belong to the task type
    task_type = ':'.join(parts[5:-3])
    task_id, user = parts[-3], parts[-2]
    if not node or not task_type:
        raise MalformedTaskHandle(value)
    return TaskHandle(
        raw=value,
        node=node,
        pid=pid,
        pstart=pstart,
        starttime=starttime,
        task_type=task_type,
        task_id=task_id,
        user=user,
    )
