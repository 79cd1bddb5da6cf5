# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
import logging

import requests

from bakeryclient.utils import relative_url
from bakeryclient.httpbakery.error import (
    InteractionError,
    JSON_CONTENT_TYPE,
    error_message,
    get_error,
)
from bakeryclient.httpbakery.transport import is_closed_connection

log = logging.getLogger(__name__)

# MAX_WAIT_RETRIES holds how many times a wait request is reissued when the
# server closes the connection without answering.
MAX_WAIT_RETRIES = 5


class Interactor:
    ''' Interactor drives the visit/wait handshake used to acquire
    macaroons from an identity provider when an interaction-required
    error is returned.

    @param transport the function used to send HTTP requests.
    @param visit_page the function called with the interaction-required
    Error so that the user can visit error.info.visit_url.
    @param max_retries the maximum number of times the wait request is
    reissued after a timeout.
    '''
    def __init__(self, transport, visit_page, max_retries=MAX_WAIT_RETRIES):
        self._transport = transport
        self._visit_page = visit_page
        self._max_retries = max_retries

    def interact(self, error, location=None):
        ''' Let the user visit the identity provider, then wait for the
        authentication to complete.

        @param error the interaction-required Error.
        @param location the URL which returned the error, used to resolve
        a relative wait URL.
        @return the wait requests.Response, holding the macaroon and
        possibly a discharge token.
        @raises InteractionError if the interaction fails.
        '''
        if error.info is None or not error.info.wait_url:
            raise InteractionError(
                'cannot interact: no wait URL in interaction-required error')
        wait_url = error.info.wait_url
        if location is not None:
            wait_url = relative_url(location, wait_url)
        self._visit_page(error)
        resp = self._wait(wait_url)
        wait_error = get_error(resp)
        if wait_error is not None:
            raise InteractionError(
                'cannot interact: ' + error_message(wait_error))
        return resp

    def _wait(self, wait_url):
        # The user may take longer to log in than the server wait timeout,
        # in which case the server just closes the connection.
        retries = 0
        while True:
            try:
                resp = self._transport(
                    wait_url, 'get', {'Content-Type': JSON_CONTENT_TYPE},
                    None, False)
            except (requests.ConnectionError, requests.Timeout):
                if retries >= self._max_retries:
                    raise
            else:
                if not is_closed_connection(resp) or \
                        retries >= self._max_retries:
                    return resp
            retries += 1
            log.info('wait request to %s timed out, retrying (%d/%d)',
                     wait_url, retries, self._max_retries)
