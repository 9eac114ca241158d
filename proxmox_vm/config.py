import logging
import os
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

logger = logging.getLogger(__name__)

CONFIG_ENV = 'PROXMOX_VM_CONFIG'
PASSWORD_ENV = 'PROXMOX_PASSWORD'
DEFAULT_CONFIG_FILE = 'config.proxmox.yaml'


class ConnectionConfig(BaseModel):
    api_url: str
    verify_ssl: bool = True
    timeout: int = Field(30, gt=0)
    vm_id_range_start: int = Field(900, gt=0)
    vm_id_range_end: int = Field(999, gt=0)
    task_timeout: int = Field(60, ge=0)
    task_status_check_interval: int = Field(2, gt=0)
    imgcopy_timeout: int = Field(120, ge=0)

    @model_validator(mode='after')
    def check_vm_id_range(self):
        if self.vm_id_range_end < self.vm_id_range_start:
            raise ValueError("vm_id_range_end must not be lower than vm_id_range_start")
        return self

    @property
    def vm_id_range(self):
        return range(self.vm_id_range_start, self.vm_id_range_end + 1)


def _read_yaml(path):
    with open(path, 'r') as f:
        raw = yaml.safe_load(f) or {}
    if 'proxmox' not in raw:
        raise ValueError(f"Invalid config: missing 'proxmox' section in {path}")
    return raw['proxmox']


def resolve_config_path(path=None):
    if path:
        return path
    return os.getenv(CONFIG_ENV, os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE))


def load_config(path=None) -> ConnectionConfig:
    """
    Load and validate the connection settings.

    :param path: YAML file with a top-level 'proxmox' mapping. Defaults to
                 $PROXMOX_VM_CONFIG or ./config.proxmox.yaml
    :return: ConnectionConfig
    """
    path = resolve_config_path(path)
    return _build_config(_read_yaml(path), path)


def _build_config(section, path):
    settings = {k: v for k, v in section.items() if k not in ('username', 'password')}
    try:
        config = ConnectionConfig(**settings)
    except ValidationError as e:
        raise ValueError(f"Invalid config: {e}")
    logger.debug(f"Loaded config for {config.api_url} from {path}")
    return config


def load_connection(path=None, username: Optional[str] = None, password: Optional[str] = None):
    """
    Build a Connection from a config file, logging in when a username is known.

    The password is taken from the argument, then the config file, then
    $PROXMOX_PASSWORD.
    """
    from .connection import Connection

    path = resolve_config_path(path)
    section = _read_yaml(path)
    config = _build_config(section, path)
    username = username or section.get('username')
    password = password or section.get('password') or os.getenv(PASSWORD_ENV)

    connection = Connection(config)
    if username:
        connection.login(username=username, password=password)
    return connection
