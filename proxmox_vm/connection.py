import logging
import os
import re
from typing import List, Optional

from .config import ConnectionConfig
from .errors import ApiConnectionError, NoVmIdAvailable, ServerError, VmNotFound
from .gateway import ApiGateway
from .models import REMOTE_STATES, ClusterResource, NodeEntry, StorageEntry, VmInfo, VmState
from .poller import TaskPoller
from .session import SessionManager

logger = logging.getLogger(__name__)

CREATE_VM_TIMEOUT = 'create_vm_timeout'
START_VM_TIMEOUT = 'start_vm_timeout'
STOP_VM_TIMEOUT = 'stop_vm_timeout'
SHUTDOWN_VM_TIMEOUT = 'shutdown_vm_timeout'
DESTROY_VM_TIMEOUT = 'destroy_vm_timeout'
UPLOAD_TIMEOUT = 'upload_timeout'

VM_RESOURCE_ID = re.compile(r'^([a-z]*)/(\d+)$')


class Connection:
    """
    VM lifecycle operations on a Proxmox cluster.

    Every mutating call returns a UPID which is handed to the TaskPoller;
    the task's exit status is returned once it finishes.
    """

    def __init__(self, config: ConnectionConfig):
        self.config = config
        self.session_manager = SessionManager()
        self.gateway = ApiGateway(config, self.session_manager)
        self.poller = TaskPoller.from_config(self.gateway, config)

    @property
    def api_url(self):
        return self.gateway.api_url

    @property
    def ticket(self):
        session = self.session_manager.session
        return session.ticket if session else None

    @property
    def csrf_token(self):
        session = self.session_manager.session
        return session.csrf_token if session else None

    def login(self, username, password):
        return self.session_manager.login(self.gateway, username, password)

    def wait_for_completion(self, task_response, timeout_message):
        return self.poller.wait_for_completion(task_response['data'], timeout_message)

    def get_node_list(self) -> List[str]:
        response = self.gateway.get('/nodes')
        return [NodeEntry(**n).node for n in response['data']]

    def _cluster_vms(self) -> List[ClusterResource]:
        response = self.gateway.get('/cluster/resources', params={'type': 'vm'})
        return [ClusterResource(**r) for r in response['data']]

    def get_vm_info(self, vm_id) -> Optional[VmInfo]:
        """
        Locate a VM in the cluster resource listing.

        The listing is fetched on every call; ids are unique cluster-wide.

        :param vm_id: VM ID
        :return: VmInfo with type and node, or None if the VM does not exist
        """
        for resource in self._cluster_vms():
            match = VM_RESOURCE_ID.match(resource.id)
            if match and int(match.group(2)) == int(vm_id):
                return VmInfo(id=int(vm_id), type=match.group(1), node=resource.node)
        return None

    def _require_vm_info(self, vm_id) -> VmInfo:
        vm_info = self.get_vm_info(vm_id)
        if vm_info is None:
            logger.error(f"VM {vm_id} not found in cluster resources")
            raise VmNotFound(vm_id)
        return vm_info

    def get_vm_state(self, vm_id) -> Optional[VmState]:
        """
        Get the state of a VM.

        :param vm_id: VM ID
        :return: VmState; NOT_CREATED when the VM is unknown or the status
                 query fails with a server error, None for any other remote status
        """
        vm_info = self.get_vm_info(vm_id)
        if vm_info is None:
            return VmState.NOT_CREATED
        try:
            response = self.gateway.get(f'/nodes/{vm_info.node}/{vm_info.type}/{vm_id}/status/current')
        except ServerError:
            logger.info(f"Status query for VM {vm_id} failed with server error, assuming not created")
            return VmState.NOT_CREATED
        data = response.get('data') if isinstance(response, dict) else None
        if not isinstance(data, dict):
            logger.error(f"Malformed status response for VM {vm_id}: {response!r}")
            raise ApiConnectionError(f"Malformed status response for VM {vm_id}")
        status = data.get('status')
        state = REMOTE_STATES.get(status)
        if state is None:
            logger.warning(f"VM {vm_id} in unknown status: {status}")
        return state

    def create_vm(self, node, vm_type, params):
        """
        Create a VM or container.

        :param node: Node name
        :param vm_type: 'qemu' or 'lxc'
        :param params: Creation parameters, including 'vmid'
        :return: Task exit status
        """
        response = self.gateway.post(f'/nodes/{node}/{vm_type}', params)
        logger.info(f"{vm_type.upper()} creation initiated on node {node}, UPID: {response['data']}")
        return self.wait_for_completion(response, CREATE_VM_TIMEOUT)

    def _vm_action(self, vm_id, action, timeout_message):
        vm_info = self._require_vm_info(vm_id)
        response = self.gateway.post(f'/nodes/{vm_info.node}/{vm_info.type}/{vm_id}/status/{action}')
        logger.info(f"{vm_info.type.upper()} {vm_id} action '{action}' initiated, UPID: {response['data']}")
        return self.wait_for_completion(response, timeout_message)

    def start_vm(self, vm_id):
        return self._vm_action(vm_id, 'start', START_VM_TIMEOUT)

    def stop_vm(self, vm_id):
        return self._vm_action(vm_id, 'stop', STOP_VM_TIMEOUT)

    def shutdown_vm(self, vm_id):
        return self._vm_action(vm_id, 'shutdown', SHUTDOWN_VM_TIMEOUT)

    def delete_vm(self, vm_id):
        vm_info = self._require_vm_info(vm_id)
        response = self.gateway.delete(f'/nodes/{vm_info.node}/{vm_info.type}/{vm_id}')
        logger.info(f"{vm_info.type.upper()} {vm_id} deletion initiated, UPID: {response['data']}")
        return self.wait_for_completion(response, DESTROY_VM_TIMEOUT)

    def get_free_vm_id(self) -> int:
        """
        Return the lowest id of the configured range not used in the cluster.

        :raises NoVmIdAvailable: If every id in the range is taken
        """
        used_vm_ids = {vm.vmid for vm in self._cluster_vms()}
        free_vm_ids = sorted(set(self.config.vm_id_range) - used_vm_ids)
        if not free_vm_ids:
            raise NoVmIdAvailable()
        return free_vm_ids[0]

    def list_storage_files(self, node, storage) -> List[str]:
        response = self.gateway.get(f'/nodes/{node}/storage/{storage}/content')
        return [StorageEntry(**e).volid for e in response['data']]

    def is_file_in_storage(self, filename, node, storage) -> bool:
        basename = os.path.basename(filename)
        return any(basename in volid for volid in self.list_storage_files(node, storage))

    def upload_file(self, file, content_type, node, storage):
        """
        Upload a file (ISO, container template, ...) to a storage.

        Skipped when a volume containing the file's base name already exists.

        :param file: Local path of the file
        :param content_type: Storage content type (e.g. 'iso', 'vztmpl')
        :param node: Node name
        :param storage: Storage ID
        :return: Task exit status, or None if the upload was skipped
        """
        if self.is_file_in_storage(file, node, storage):
            logger.info(f"{os.path.basename(file)} already present on {storage}, skipping upload")
            return None
        data = {'content': content_type, 'node': node, 'storage': storage}
        with open(file, 'rb') as f:
            response = self.gateway.post(f'/nodes/{node}/storage/{storage}/upload', data, files={'filename': f})
        logger.info(f"Upload of {file} to {storage} initiated, UPID: {response['data']}")
        return self.wait_for_completion(response, UPLOAD_TIMEOUT)
