import logging
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from .errors import ApiConnectionError, ApiError, InvalidCredentials, ServerError
from .models import Ticket

logger = logging.getLogger(__name__)

AUTH_COOKIE = 'PVEAuthCookie'
CSRF_HEADER = 'CSRFPreventionToken'


@dataclass(frozen=True)
class Session:
    ticket: str
    csrf_token: str


class SessionManager:
    """
    Holds the ticket and CSRF token obtained at login.

    The session lives as long as the process; a new login replaces it.
    """

    def __init__(self):
        self._session: Optional[Session] = None

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def authenticated(self) -> bool:
        return self._session is not None

    def login(self, gateway, username, password) -> Session:
        """
        Request a ticket and store it for subsequent calls.

        :param gateway: ApiGateway used to post the credentials
        :param username: User name including realm (e.g. 'root@pam')
        :param password: Password
        :return: The new Session
        """
        try:
            response = gateway.post('/access/ticket', {'username': username, 'password': password})
            ticket = Ticket(**response['data'])
        except ServerError:
            # Proxmox answers a bad login with a 500
            logger.error(f"Login for {username} rejected by server")
            raise InvalidCredentials()
        except ApiConnectionError:
            raise
        except (ApiError, KeyError, TypeError, ValidationError) as e:
            logger.error(f"Login for {username} failed: {e}")
            raise ApiConnectionError(str(e))
        self._session = Session(ticket=ticket.ticket, csrf_token=ticket.csrf_token)
        logger.info(f"Logged in as {username}")
        return self._session

    def cookies(self):
        if self._session is None:
            return {}
        return {AUTH_COOKIE: self._session.ticket}

    def headers(self):
        if self._session is None:
            return {}
        return {CSRF_HEADER: self._session.csrf_token}
