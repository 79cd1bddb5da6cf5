# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.

import base64
import binascii
from datetime import datetime
import json
from urllib.parse import urljoin, urlparse
import webbrowser

import pymacaroons
from pymacaroons.serializers import json_serializer
import requests.cookies


def serialize(value):
    '''Serialize the given macaroons (or any JSON value) for storage.

    @param value a JSON compatible value, usually a list of macaroons in
    their JSON form.
    @return the base64 encoded JSON as a string.
    '''
    data = json.dumps(value, separators=(',', ':'))
    return base64.b64encode(data.encode('utf-8')).decode('ascii')


def deserialize(serialized):
    '''De-serialize a value previously produced by serialize.

    @param serialized the base64 encoded JSON string.
    @return the decoded JSON value.
    '''
    return json.loads(b64decode(serialized).decode('utf-8'))


def b64decode(s):
    '''Base64 decodes a base64-encoded string in URL-safe
    or normal format, with or without padding.
    The argument may be string or bytes.

    @param s bytes decode
    @return bytes decoded
    @raises ValueError on failure
    '''
    if isinstance(s, str):
        s = s.encode('ascii')
    if b'-' in s or b'_' in s:
        s = s.replace(b'-', b'+').replace(b'_', b'/')
    try:
        return base64.b64decode(add_base64_padding(s), validate=True)
    except binascii.Error as exc:
        raise ValueError(str(exc))


def add_base64_padding(b):
    '''Add padding to base64 encoded bytes.

    Padding can be removed when sending the messages.

    @param b bytes to be padded.
    @return a padded bytes.
    '''
    return b + b'=' * (-len(b) % 4)


def macaroon_from_dict(json_macaroon):
    '''Return a pymacaroons.Macaroon object from the given
    JSON-deserialized dict.

    Both the v1 and v2 JSON formats are accepted, as well as the bakery
    wrapped form {"m": macaroon, "v": version}.

    @param JSON-encoded macaroon as dict
    @return the deserialized macaroon object.
    @raises ValueError if the value does not hold a macaroon.
    '''
    if isinstance(json_macaroon, dict) and 'm' in json_macaroon:
        json_macaroon = json_macaroon['m']
    if not isinstance(json_macaroon, dict):
        raise ValueError(
            'cannot decode macaroon from {!r}'.format(json_macaroon))
    try:
        return pymacaroons.Macaroon.deserialize(
            json.dumps(json_macaroon), json_serializer.JsonSerializer())
    except (KeyError, TypeError) as exc:
        raise ValueError('invalid macaroon: {}'.format(exc))


def macaroon_to_dict(macaroon):
    '''Turn a pymacaroons.Macaroon into its JSON form.

    @param macaroon the macaroon to export.
    @return a dict suitable for json.dumps.
    '''
    return json.loads(macaroon.serialize(json_serializer.JsonSerializer()))


def relative_url(base, new):
    ''' Returns new path relative to an original URL.
    '''
    if not new:
        return base
    if urlparse(new).scheme:
        return new
    if not base.endswith('/'):
        base += '/'
    return urljoin(base, new)


def cookie(
    url,
    name,
    value,
    expires=None,
):
    '''Return a new Cookie using a slightly more
    friendly API than that provided by requests.cookies.

    @param url The URL specifying the cookie's host and path.
    @param name The name of the cookie.
    @param value The value of the cookie.
    @param expires The time the cookie expires (a naive UTC datetime), or
    None.
    '''
    u = urlparse(url)
    domain = u.hostname or ''
    if '.' not in domain and not _is_ip_addr(domain):
        domain += '.local'
    port = str(u.port) if u.port is not None else None
    secure = u.scheme == 'https'
    if expires is not None:
        if expires.tzinfo is not None:
            raise ValueError('Cookie expiration must be a naive datetime')
        expires = int((expires - datetime(1970, 1, 1)).total_seconds())
    return requests.cookies.create_cookie(
        name,
        value,
        domain=domain,
        port=port,
        path=u.path or '/',
        secure=secure,
        expires=expires,
        rest={'HttpOnly': None},
    )


def _is_ip_addr(h):
    parts = h.split('.')
    return len(parts) == 4 and all(p.isdigit() for p in parts)


def visit_page_with_browser(visit_url):
    '''Open a browser so the user can validate its identity.

    @param visit_url: where to prove your identity.
    '''
    webbrowser.open(visit_url, new=1)
