# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
from collections import namedtuple
from http.cookies import SimpleCookie

from httmock import response
import pymacaroons

from bakeryclient import utils

ROOT_KEY = 'root key'
CAVEAT_KEY = 'caveat key'
SERVICE_LOC = 'https://service.example.com'
IDP_LOC = 'https://idp.example.com'

JSON_HEADERS = {'Content-Type': 'application/json'}


def new_macaroon(third_party_location=IDP_LOC, caveat_id='caveat-id'):
    ''' Return a macaroon with a single third party caveat.
    '''
    m = pymacaroons.Macaroon(location=SERVICE_LOC, identifier='id0',
                             key=ROOT_KEY)
    m.add_first_party_caveat('allow read')
    m.add_third_party_caveat(third_party_location, CAVEAT_KEY, caveat_id)
    return m


def new_discharge(caveat_id='caveat-id', location=IDP_LOC, key=CAVEAT_KEY):
    m = pymacaroons.Macaroon(location=location, identifier=caveat_id,
                             key=key)
    m.add_first_party_caveat('declared username someone')
    return m


def discharge_required(m, status=401):
    return response(
        status_code=status,
        content={
            'Code': 'macaroon discharge required',
            'Message': 'verification failed: no macaroons',
            'Info': {'Macaroon': utils.macaroon_to_dict(m)},
        },
        headers=JSON_HEADERS,
    )


def interaction_required(visit_url, wait_url):
    return response(
        status_code=401,
        content={
            'Code': 'interaction required',
            'Message': 'interaction required',
            'Info': {'VisitURL': visit_url, 'WaitURL': wait_url},
        },
        headers=JSON_HEADERS,
    )


def ok(content=None):
    if content is None:
        content = {'Value': 'some value'}
    return response(status_code=200, content=content, headers=JSON_HEADERS)


Call = namedtuple('Call', 'url, method, headers, body, with_credentials')


class FakeTransport:
    ''' A transport recording the requests it is asked to send, and
    answering them with the given handler.

    The handler is called with the Call and must return a
    requests.Response or raise an exception.
    '''
    def __init__(self, handler):
        self._handler = handler
        self.calls = []

    def __call__(self, url, method, headers, body, with_credentials):
        call = Call(url=url, method=method, headers=dict(headers), body=body,
                    with_credentials=with_credentials)
        self.calls.append(call)
        return self._handler(call)

    def urls(self):
        return [(c.method, c.url) for c in self.calls]


class RecordingStore:
    ''' A MemoryStore-like store recording every write.
    '''
    def __init__(self):
        self.items = {}
        self.writes = []

    def get_item(self, key):
        return self.items.get(key)

    def set_item(self, key, value):
        self.writes.append((key, value))
        self.items[key] = value

    def clear(self):
        self.items = {}


def extract_macaroons(headers):
    ''' Returns an array of any macaroons found in the given request
    headers, either in macaroon-* cookies or in Macaroons headers.
    @param headers: dict of headers
    @return: An array of array of pymacaroons.Macaroon
    '''
    mss = []

    def add_macaroon(data):
        data = utils.deserialize(data)
        if isinstance(data, dict):
            data = [data]
        mss.append([utils.macaroon_from_dict(x) for x in data])

    cookie_header = headers.get('Cookie')
    if cookie_header is not None:
        cs = SimpleCookie()
        cs.load(str(cookie_header))
        for c in cs:
            if c.startswith('macaroon-'):
                add_macaroon(cs[c].value)
    macaroon_header = headers.get('Macaroons')
    if macaroon_header is not None:
        for h in macaroon_header.split(','):
            add_macaroon(h)
    return mss
