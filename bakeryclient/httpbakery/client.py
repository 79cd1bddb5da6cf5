# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
from collections import namedtuple
import json
import logging

from bakeryclient import utils
from bakeryclient.store import BakeryStorage, IDENTITY_KEY
from bakeryclient.httpbakery.browser import WebBrowserVisitor
from bakeryclient.httpbakery.discharge import Discharger
from bakeryclient.httpbakery.error import (
    BAKERY_PROTOCOL_HEADER,
    BakeryException,
    DISCHARGE_REQUIRED_KIND,
    DischargeDisabledError,
    INTERACTION_REQUIRED_KIND,
    InteractionError,
    error_message,
    get_error,
)
from bakeryclient.httpbakery.interactor import Interactor
from bakeryclient.httpbakery.transport import RequestsTransport

log = logging.getLogger(__name__)

DEFAULT_PROTOCOL_VERSION = 2
MAX_DISCHARGE_RETRIES = 3

# Credentials are only sent when setting the authentication cookie.
SET_AUTH_COOKIE_PATH = '/set-auth-cookie'


class PendingRequest(namedtuple('PendingRequest', 'url, method, headers, body')):
    ''' Holds an HTTP request that may have to be sent again once the
    macaroons it requires have been acquired.
    '''
    __slots__ = ()


class Client:
    '''Client holds the context for making HTTP requests with macaroons.

    Requests are sent with any macaroons stored for their URL. When the
    server responds that a macaroon must be discharged, the client acquires
    the discharges, stores the resulting macaroons and sends the request
    again. When the server requires the user to interact with an identity
    provider, the client lets the user visit the provider, waits for the
    resulting macaroons and stores them.
    For example:
        from bakeryclient import httpbakery
        client = httpbakery.Client()
        resp = client.get('some protected url')

    Failures are raised as BakeryException instances, or as requests
    exceptions when the transport itself fails.

    @param transport the function used to send HTTP requests, called with
    (url, method, headers, body, with_credentials) and returning a
    requests.Response. It defaults to a RequestsTransport.
    @param storage the BakeryStorage used to persist macaroons. It defaults
    to a storage keeping macaroons in memory.
    @param visit_page the function called with the interaction-required
    Error when the user must authenticate. It defaults to opening the visit
    URL in a web browser.
    @param on_success a function called without arguments every time a
    request completes successfully.
    @param protocol_version the bakery protocol version to use.
    @param discharge_disabled whether discharge required errors must be
    returned to the caller rather than handled.
    @param max_discharge_retries how many discharge rounds are allowed for
    a single request.
    '''
    def __init__(self, transport=None, storage=None, visit_page=None,
                 on_success=None, protocol_version=DEFAULT_PROTOCOL_VERSION,
                 discharge_disabled=False,
                 max_discharge_retries=MAX_DISCHARGE_RETRIES):
        if transport is None:
            transport = RequestsTransport()
        if storage is None:
            storage = BakeryStorage()
        if visit_page is None:
            visit_page = WebBrowserVisitor()
        self._transport = transport
        self.storage = storage
        self._visit_page = visit_page
        self._on_success = on_success
        self._protocol_version = protocol_version
        self._discharge_disabled = discharge_disabled
        self._max_discharge_retries = max_discharge_retries
        self._interactor = Interactor(transport, visit_page)
        self._discharger = Discharger(self)

    def without_discharge(self):
        ''' Return a client sharing this client's transport and storage
        but which does not handle discharge required errors.
        '''
        return Client(
            transport=self._transport,
            storage=self.storage,
            visit_page=self._visit_page,
            on_success=self._on_success,
            protocol_version=self._protocol_version,
            discharge_disabled=True,
            max_discharge_retries=self._max_discharge_retries,
        )

    def send_request(self, url, method, headers=None, body=None):
        '''Send an HTTP request to the given URL with the given HTTP method,
        headers and body.

        Bakery specific headers are automatically added to the request.

        @param url the URL to which to send the request.
        @param method the HTTP method, like "get" or "POST".
        @param headers a dict of headers to include in the request.
        @param body the request body, or None.
        @return the requests.Response.
        '''
        req = PendingRequest(url=url, method=method.lower(),
                             headers=dict(headers or {}), body=body)
        return self._send(req, 0)

    def get(self, url, headers=None):
        return self.send_request(url, 'get', headers)

    def delete(self, url, headers=None, body=None):
        return self.send_request(url, 'delete', headers, body)

    def post(self, url, headers=None, body=None):
        return self.send_request(url, 'post', headers, body)

    def put(self, url, headers=None, body=None):
        return self.send_request(url, 'put', headers, body)

    def patch(self, url, headers=None, body=None):
        return self.send_request(url, 'patch', headers, body)

    def discharge(self, macaroon):
        ''' Discharge the given macaroon (in its JSON form), acquiring any
        third party discharges.

        @return the JSON forms of the macaroon and its discharges.
        '''
        return self._discharger.discharge(macaroon)

    def _send(self, req, discharges):
        all_headers = {
            BAKERY_PROTOCOL_HEADER: str(self._protocol_version),
        }
        macaroons = self.storage.get(req.url)
        if macaroons:
            all_headers['Macaroons'] = macaroons
        all_headers.update(req.headers)
        with_credentials = (req.method == 'put' and
                            SET_AUTH_COOKIE_PATH in req.url)
        resp = self._transport(req.url, req.method, all_headers, req.body,
                               with_credentials)
        return self._handle_response(req, resp, discharges)

    def _handle_response(self, req, response, discharges):
        ''' Handle the discharge required and interaction required errors
        found in the response to the given request.

        @param req the PendingRequest the response is for.
        @param response the requests.Response.
        @param discharges the number of discharge rounds already performed
        for the request.
        @return the final requests.Response.
        '''
        error = get_error(response)
        if error is None:
            return self._exit_successfully(response)
        if error.bare:
            raise BakeryException(error.message)
        if error.kind == INTERACTION_REQUIRED_KIND:
            log.info('interaction required for %s', req.url)
            resp = self._interactor.interact(error, req.url)
            self._store_interaction_result(req.url, resp)
            return self._exit_successfully(resp)
        if error.kind == DISCHARGE_REQUIRED_KIND:
            if self._discharge_disabled:
                raise DischargeDisabledError(
                    'discharge required but disabled', response=response)
            if discharges >= self._max_discharge_retries:
                raise BakeryException(
                    'too many ({}) discharge requests'.format(discharges))
            log.info('discharge required for %s', req.url)
            macaroon = error.info.macaroon if error.info is not None else None
            ms = self.discharge(macaroon)
            self.storage.set(req.url, utils.serialize(ms))
            # Send the request again, now including the macaroons.
            return self._send(req, discharges + 1)
        raise BakeryException(error_message(error))

    def _store_interaction_result(self, url, resp):
        try:
            json_resp = json.loads(resp.text)
        except ValueError:
            raise InteractionError(
                'cannot parse wait response from {}'.format(resp.url))
        if not isinstance(json_resp, dict) or not json_resp.get('Macaroon'):
            raise InteractionError(
                'no macaroon in wait response from {}'.format(resp.url))
        self.storage.set(url, utils.serialize(json_resp['Macaroon']))
        token = json_resp.get('DischargeToken')
        if token:
            token = utils.serialize(token)
            self.storage.set(url, token)
            # Also store the token under a well known key, so that the
            # identity can be shared with external systems.
            self.storage.set(IDENTITY_KEY, token)

    def _exit_successfully(self, response):
        if self._on_success is not None:
            self._on_success()
        return response

