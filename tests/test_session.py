from unittest.mock import Mock

import pytest

from proxmox_vm.errors import (
    ApiConnectionError,
    ApiNotImplemented,
    InvalidCredentials,
    ServerError,
    UnauthorizedError,
)
from proxmox_vm.session import Session, SessionManager

TICKET_RESPONSE = {'data': {
    'ticket': 'PVE:root@pam:4EEC61E2::rsKoApxDTLYPn6H3NNT6iP2mv',
    'CSRFPreventionToken': '4EEC61E2:lwk7od06fa1+DcPUwBTXCcndyAY',
    'username': 'root@pam',
}}


class TestSessionManager:

    def test_login_stores_session(self):
        gateway = Mock()
        gateway.post.return_value = TICKET_RESPONSE
        sessions = SessionManager()

        session = sessions.login(gateway, 'root@pam', 'secret')

        gateway.post.assert_called_once_with('/access/ticket', {'username': 'root@pam', 'password': 'secret'})
        assert session == Session(
            ticket='PVE:root@pam:4EEC61E2::rsKoApxDTLYPn6H3NNT6iP2mv',
            csrf_token='4EEC61E2:lwk7od06fa1+DcPUwBTXCcndyAY')
        assert sessions.session is session
        assert sessions.authenticated
        assert sessions.cookies() == {'PVEAuthCookie': session.ticket}
        assert sessions.headers() == {'CSRFPreventionToken': session.csrf_token}

    def test_no_session_is_anonymous(self):
        sessions = SessionManager()

        assert not sessions.authenticated
        assert sessions.cookies() == {}
        assert sessions.headers() == {}

    def test_relogin_replaces_session(self):
        gateway = Mock()
        gateway.post.side_effect = [
            TICKET_RESPONSE,
            {'data': {'ticket': 'second', 'CSRFPreventionToken': 'csrf2'}},
        ]
        sessions = SessionManager()

        sessions.login(gateway, 'root@pam', 'secret')
        sessions.login(gateway, 'admin@pve', 'other')

        assert sessions.session == Session(ticket='second', csrf_token='csrf2')

    def test_server_error_is_invalid_credentials(self):
        gateway = Mock()
        gateway.post.side_effect = ServerError()

        with pytest.raises(InvalidCredentials):
            SessionManager().login(gateway, 'root@pam', 'wrong')

    def test_server_error_is_not_reported_as_server_error(self):
        gateway = Mock()
        gateway.post.side_effect = ServerError()

        with pytest.raises(InvalidCredentials) as excinfo:
            SessionManager().login(gateway, 'root@pam', 'wrong')
        assert not isinstance(excinfo.value, ServerError)

    def test_connection_error_passes_through(self):
        gateway = Mock()
        gateway.post.side_effect = ApiConnectionError('Connection refused')

        with pytest.raises(ApiConnectionError, match='Connection refused'):
            SessionManager().login(gateway, 'root@pam', 'secret')

    @pytest.mark.parametrize('error', [UnauthorizedError(), ApiNotImplemented()])
    def test_other_api_errors_become_connection_errors(self, error):
        gateway = Mock()
        gateway.post.side_effect = error

        with pytest.raises(ApiConnectionError, match=str(error)):
            SessionManager().login(gateway, 'root@pam', 'secret')

    def test_malformed_ticket_response(self):
        gateway = Mock()
        gateway.post.return_value = {'data': None}
        sessions = SessionManager()

        with pytest.raises(ApiConnectionError):
            sessions.login(gateway, 'root@pam', 'secret')
        assert sessions.session is None

    def test_failed_login_keeps_previous_session(self):
        gateway = Mock()
        gateway.post.side_effect = [TICKET_RESPONSE, ServerError()]
        sessions = SessionManager()
        sessions.login(gateway, 'root@pam', 'secret')

        with pytest.raises(InvalidCredentials):
            sessions.login(gateway, 'root@pam', 'wrong')
        assert sessions.session.csrf_token == '4EEC61E2:lwk7od06fa1+DcPUwBTXCcndyAY'
