from unittest.mock import Mock, patch

import pytest
import requests

from proxmox_vm.config import ConnectionConfig

API_URL = 'https://pve.example.com:8006/api2/json'
UPID = 'UPID:node1:0000A1B2:0012C3D4:5F6E7A8B:qmstart:101:root@pam:'
IMGCOPY_UPID = 'UPID:node1:0000A1B3:0012C3D5:5F6E7A8C:imgcopy::root@pam:'


def make_response(payload=None, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} Error", response=response)
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.fixture
def config():
    return ConnectionConfig(api_url=API_URL)


@pytest.fixture
def mock_http():
    with patch('proxmox_vm.gateway.requests.Session') as mock_session_class:
        mock_session = Mock()
        mock_session_class.return_value = mock_session
        yield mock_session
