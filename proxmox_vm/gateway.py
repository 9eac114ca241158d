import logging

import requests

from .errors import ApiConnectionError, ApiNotImplemented, ServerError, UnauthorizedError

logger = logging.getLogger(__name__)

# HTTP status -> domain error; anything else is a connection error
STATUS_ERRORS = {
    501: ApiNotImplemented,
    500: ServerError,
    401: UnauthorizedError,
}


class ApiGateway:
    def __init__(self, config, session_manager):
        """
        Thin wrapper around the Proxmox REST API.

        :param config: ConnectionConfig with api_url, verify_ssl and timeout
        :param session_manager: SessionManager providing the auth cookie and CSRF header
        """
        self.api_url = config.api_url.rstrip('/')
        self.verify_ssl = config.verify_ssl
        self.timeout = config.timeout
        self.session_manager = session_manager
        self.http = requests.Session()

    def _url(self, path):
        return f"{self.api_url}{path}"

    def _send(self, method, path, **kwargs):
        url = self._url(path)
        try:
            resp = self.http.request(
                method,
                url,
                cookies=self.session_manager.cookies(),
                headers=self.session_manager.headers(),
                verify=self.verify_ssl,
                timeout=self.timeout,
                **kwargs
            )
            resp.raise_for_status()
            return resp.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            error_class = STATUS_ERRORS.get(status)
            logger.error(f"{method} {path} failed with HTTP {status}")
            if error_class is not None:
                raise error_class()
            raise ApiConnectionError(str(e))
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ApiConnectionError(str(e))

    def get(self, path, params=None):
        """
        Perform a GET request.

        :param path: API path (e.g., '/cluster/resources')
        :param params: Optional query parameters
        :return: Decoded JSON document
        """
        return self._send('GET', path, params=params)

    def post(self, path, data=None, files=None):
        """
        Perform a POST request with form-encoded (or multipart) parameters.

        :param path: API path
        :param data: Form fields
        :param files: Optional file parts; switches the body to multipart
        :return: Decoded JSON document
        """
        return self._send('POST', path, data=data, files=files)

    def delete(self, path):
        """
        Perform a DELETE request.

        :param path: API path
        :return: Decoded JSON document
        """
        return self._send('DELETE', path)
