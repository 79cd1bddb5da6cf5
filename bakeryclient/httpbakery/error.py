# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
from collections import namedtuple
import json

import requests

ERR_INTERACTION_REQUIRED = 'interaction required'
ERR_DISCHARGE_REQUIRED = 'macaroon discharge required'

# Kinds of protocol errors, as classified by Error.kind.
DISCHARGE_REQUIRED_KIND = 'discharge-required'
INTERACTION_REQUIRED_KIND = 'interaction-required'
UNRECOGNIZED_KIND = 'unrecognized'

# BAKERY_PROTOCOL_HEADER is the header that HTTP clients should set
# to determine the bakery protocol version. If it is 0 or missing,
# a discharge-required error response will be returned with HTTP status 407;
# if it is greater than 0, the response will have status 401 with the
# WWW-Authenticate header set to "Macaroon".
BAKERY_PROTOCOL_HEADER = 'Bakery-Protocol-Version'

JSON_CONTENT_TYPE = 'application/json'
WWW_FORM_CONTENT_TYPE = 'application/x-www-form-urlencoded'

STATUS_UNAUTHORIZED = 401
STATUS_PROXY_AUTH_REQUIRED = 407

CANNOT_PARSE_ERROR_RESPONSE = 'cannot parse error response'


class BakeryException(requests.RequestException):
    '''Raised when some errors happen using the httpbakery
    client. When the failure is tied to an HTTP response, it is available
    as the response attribute.
    '''


class DischargeError(BakeryException):
    '''Raised when a macaroon cannot be discharged.
    '''


class DischargeDisabledError(DischargeError):
    '''Raised when a discharge is required but discharging has been
    disabled on the client. Unlike other failures, the response which
    required the discharge is available as the response attribute.
    '''


class InteractionError(BakeryException):
    '''Raised when the interaction with an identity provider fails.
    '''


class Error(namedtuple('Error', 'code, message, info, raw')):
    ''' Holds a bakery protocol error as found in an error response.

    @param code holds the error code, for instance ERR_DISCHARGE_REQUIRED.
    @param message holds the error message.
    @param info holds additional information on the error (ErrorInfo),
    or None.
    @param raw holds the decoded JSON payload the error was built from.
    It is None only when the error response could not be parsed.
    '''
    __slots__ = ()

    @classmethod
    def from_dict(cls, serialized):
        '''Create an error from a JSON-deserialized object.
        @param serialized the object holding the serialized error {dict}
        '''
        if isinstance(serialized, str):
            return Error(code=None, message=serialized, info=None,
                         raw=serialized)
        if not isinstance(serialized, dict):
            return Error(code=None, message=None, info=None, raw=serialized)
        # Some servers return lower case field names.
        code = serialized.get('Code') or serialized.get('code')
        message = serialized.get('Message') or serialized.get('message')
        info = ErrorInfo.from_dict(serialized.get('Info'))
        return Error(code=code, message=message, info=info, raw=serialized)

    @classmethod
    def unparseable(cls):
        ''' Return the error used when an error response cannot be parsed.
        '''
        return Error(code=None, message=CANNOT_PARSE_ERROR_RESPONSE,
                     info=None, raw=None)

    @property
    def bare(self):
        ''' Report whether the error is a bare message, with no
        structured payload to inspect.
        '''
        return self.raw is None or isinstance(self.raw, str)

    @property
    def kind(self):
        if self.code == ERR_DISCHARGE_REQUIRED:
            return DISCHARGE_REQUIRED_KIND
        if self.code == ERR_INTERACTION_REQUIRED:
            return INTERACTION_REQUIRED_KIND
        return UNRECOGNIZED_KIND


class ErrorInfo(
    namedtuple('ErrorInfo', 'macaroon, macaroon_path, visit_url, wait_url, '
                            'discharge_token')):
    '''  Holds additional information provided
    by an error.

    @param macaroon may hold a macaroon, in its JSON form, that when
    discharged may allow access to a service.
    This field is associated with the ERR_DISCHARGE_REQUIRED
    error code.

    @param macaroon_path holds the URL path to be associated
    with the macaroon. The macaroon is potentially
    valid for all URLs under the given path.

    @param visit_url holds a URL that the client should visit
    in a web browser to authenticate themselves.

    @param wait_url holds a URL that the client should visit
    to acquire the discharge macaroon. A GET on
    this URL will block until the client has authenticated,
    and then it will return the discharge macaroon.

    @param discharge_token holds a token, in its JSON form, proving the
    identity of the user.
    '''

    __slots__ = ()

    @classmethod
    def from_dict(cls, serialized):
        '''Create a new ErrorInfo object from a JSON deserialized
        dictionary
        @param serialized The JSON object {dict}
        @return ErrorInfo object
        '''
        if not isinstance(serialized, dict):
            return None
        return ErrorInfo(
            macaroon=serialized.get('Macaroon'),
            macaroon_path=serialized.get('MacaroonPath'),
            visit_url=serialized.get('VisitURL'),
            wait_url=serialized.get('WaitURL'),
            discharge_token=serialized.get('DischargeToken'),
        )

    def __new__(cls, macaroon=None, macaroon_path=None, visit_url=None,
                wait_url=None, discharge_token=None):
        return super(ErrorInfo, cls).__new__(
            cls, macaroon, macaroon_path, visit_url, wait_url,
            discharge_token)


def get_error(response):
    ''' Return the bakery protocol error found in the given response.

    Bakery errors always have a 401 or 407 status and a JSON payload:
    None is returned for any other response.

    @param response the requests.Response to inspect.
    @return an Error, or None.
    '''
    status = response.status_code
    if status != STATUS_UNAUTHORIZED and status != STATUS_PROXY_AUTH_REQUIRED:
        return None
    if response.headers.get('Content-Type') != JSON_CONTENT_TYPE:
        return None
    try:
        serialized = json.loads(response.text)
    except ValueError:
        return Error.unparseable()
    # Falsy scalar payloads mean no error. Empty objects and arrays do not.
    if serialized in (None, False, 0, ''):
        return None
    return Error.from_dict(serialized)


def error_message(error):
    ''' Return a human friendly message for the given error.

    @param error an Error, or a bare string for errors that have no payload.
    @return the message, or an empty string for bare errors.
    '''
    if isinstance(error, str) or error.bare:
        return ''
    raw = error.raw
    if isinstance(raw, dict):
        for field in ('Message', 'message', 'Error', 'error'):
            if raw.get(field):
                return raw[field]
    return 'unexpected error: ' + json.dumps(raw, separators=(',', ':'))
