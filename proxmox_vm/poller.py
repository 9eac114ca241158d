import logging
import time

from pydantic import ValidationError

from .errors import ApiConnectionError, TaskTimeout
from .models import TaskStatus
from .upid import parse_upid

logger = logging.getLogger(__name__)


class TaskPoller:
    def __init__(self, gateway, task_timeout=60, poll_interval=2, imgcopy_timeout=120):
        """
        Poll asynchronous Proxmox tasks until they finish.

        :param gateway: ApiGateway used for status queries
        :param task_timeout: Budget in seconds for ordinary tasks
        :param poll_interval: Fixed delay in seconds between status queries
        :param imgcopy_timeout: Budget in seconds for 'imgcopy' tasks
        """
        if poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")
        self.gateway = gateway
        self.task_timeout = task_timeout
        self.poll_interval = poll_interval
        self.imgcopy_timeout = imgcopy_timeout

    @classmethod
    def from_config(cls, gateway, config):
        return cls(
            gateway,
            task_timeout=config.task_timeout,
            poll_interval=config.task_status_check_interval,
            imgcopy_timeout=config.imgcopy_timeout,
        )

    def timeout_for(self, handle):
        return self.imgcopy_timeout if handle.is_imgcopy else self.task_timeout

    def max_attempts(self, timeout):
        return int(timeout // self.poll_interval) + 1

    def get_task_status(self, handle) -> TaskStatus:
        response = self.gateway.get(f'/nodes/{handle.node}/tasks/{handle.raw}/status')
        try:
            return TaskStatus(**response['data'])
        except (KeyError, TypeError, ValidationError) as e:
            logger.error(f"Malformed status for task {handle.raw}: {e}")
            raise ApiConnectionError(f"Malformed task status response: {e}")

    def wait_for_completion(self, task_handle, timeout_message):
        """
        Block until the task reports an exit status.

        :param task_handle: UPID string returned by a mutating call
        :param timeout_message: Message key carried by TaskTimeout on expiry
        :return: The task's exit status (e.g. 'OK')
        :raises MalformedTaskHandle: If the UPID cannot be parsed
        :raises TaskTimeout: If no exit status shows up within the budget
        """
        handle = parse_upid(task_handle)
        timeout = self.timeout_for(handle)
        attempts = self.max_attempts(timeout)
        for attempt in range(1, attempts + 1):
            status = self.get_task_status(handle)
            if status.finished:
                logger.info(f"Task {handle.raw} finished with exitstatus: {status.exitstatus}")
                return status.exitstatus
            logger.debug(f"Task {handle.raw} still running ({attempt}/{attempts})")
            if attempt < attempts:
                time.sleep(self.poll_interval)
        logger.error(f"Task {handle.raw} timed out after {timeout} seconds")
        raise TaskTimeout(timeout_message)
