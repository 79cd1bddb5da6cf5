# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
from bakeryclient.httpbakery.client import (
    Client,
    DEFAULT_PROTOCOL_VERSION,
    MAX_DISCHARGE_RETRIES,
    PendingRequest,
)
from bakeryclient.httpbakery.error import (
    BAKERY_PROTOCOL_HEADER,
    BakeryException,
    DischargeDisabledError,
    DischargeError,
    ERR_DISCHARGE_REQUIRED,
    ERR_INTERACTION_REQUIRED,
    Error,
    ErrorInfo,
    InteractionError,
    error_message,
    get_error,
)
from bakeryclient.httpbakery.browser import WebBrowserVisitor
from bakeryclient.httpbakery.discharge import Discharger
from bakeryclient.httpbakery.interactor import (
    Interactor,
    MAX_WAIT_RETRIES,
)
from bakeryclient.httpbakery.transport import (
    RequestsTransport,
    closed_connection_response,
    is_closed_connection,
)

__all__ = [
    'BAKERY_PROTOCOL_HEADER',
    'BakeryException',
    'Client',
    'DEFAULT_PROTOCOL_VERSION',
    'DischargeDisabledError',
    'DischargeError',
    'Discharger',
    'ERR_DISCHARGE_REQUIRED',
    'ERR_INTERACTION_REQUIRED',
    'Error',
    'ErrorInfo',
    'InteractionError',
    'Interactor',
    'MAX_DISCHARGE_RETRIES',
    'MAX_WAIT_RETRIES',
    'PendingRequest',
    'RequestsTransport',
    'WebBrowserVisitor',
    'closed_connection_response',
    'error_message',
    'get_error',
    'is_closed_connection',
]
