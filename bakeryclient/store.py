# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
import logging

from bakeryclient import utils

log = logging.getLogger(__name__)

# CHARMSTORE_KEY is the storage key whose values are also handed to the
# charm store cookie setter, if one is configured.
CHARMSTORE_KEY = 'charmstore'

# IDENTITY_KEY is the well known key under which the discharge token
# acquired by an interaction is stored, so that external systems can
# read or inject it.
IDENTITY_KEY = 'identity'

DISCHARGE_SUFFIX = '/discharge'


class MemoryStore:
    ''' A key/value store that keeps the items in memory.
    '''
    def __init__(self):
        self._items = {}

    def get_item(self, key):
        ''' Return the value for the given key, or None if not found.
        '''
        return self._items.get(key)

    def set_item(self, key, value):
        self._items[key] = value

    def clear(self):
        self._items = {}


def storage_key(key, services=None):
    '''Turn the given key (usually a URL) into a more friendly service name,
    when possible.

    Different endpoints of the same service are reduced to the same service
    name key, as all the endpoints of a service share the same macaroon
    root id. Keys that are not URLs are returned untouched, so that
    arbitrary keys (like a service name) can still be used.

    @param key the original key.
    @param services a dict mapping service names to their base URL.
    @return a possibly reduced key.
    '''
    for service, base_url in (services or {}).items():
        if key.startswith(base_url):
            return service
    # The "/discharge" suffix is added back by convention when
    # discharging, so drop it.
    if key.endswith(DISCHARGE_SUFFIX):
        return key[:-len(DISCHARGE_SUFFIX)]
    return key


class BakeryStorage:
    '''BakeryStorage persists serialized macaroons by key.

    @param store the underlying store, implementing get_item(key),
    set_item(key, value) and clear(). It defaults to a MemoryStore.
    @param services a dict mapping service names (like "charmstore" or
    "terms") to the base URL of their API endpoints. This is used to
    reduce the URLs passed as keys to the storage.
    @param charmstore_cookie_setter a function called with the deserialized
    macaroons every time a value is stored under the "charmstore" key.
    @param initial a dict of key/value pairs to be initially stored.
    '''
    def __init__(self, store=None, services=None,
                 charmstore_cookie_setter=None, initial=None):
        if store is None:
            store = MemoryStore()
        self._store = store
        self._services = dict(services or {})
        self._charmstore_cookie_setter = charmstore_cookie_setter
        for key, value in (initial or {}).items():
            if value:
                self.set(key, value)

    def get(self, key):
        ''' Return the value stored for the given key (usually a URL), or
        None if there is none.
        '''
        return self._store.get_item(self._get_key(key))

    def set(self, key, value):
        ''' Store the given value (usually serialized macaroons) under the
        given key (usually a URL).
        '''
        key = self._get_key(key)
        self._store.set_item(key, value)
        if key == CHARMSTORE_KEY and self._charmstore_cookie_setter:
            # Set the cookie so that resources can be retrieved from the
            # charm store without going through the bakery.
            try:
                self._charmstore_cookie_setter(utils.deserialize(value))
            except Exception as exc:
                log.error('cannot set charm store cookie: %s', exc)

    def clear(self):
        ''' Remove all key/value pairs from the storage.
        '''
        self._store.clear()

    def _get_key(self, key):
        return storage_key(key, self._services)


def cookie_jar_setter(jar, url, name='macaroon-' + CHARMSTORE_KEY):
    ''' Return a charm store cookie setter that adds the macaroons as a
    cookie for the given URL to the given requests cookie jar.
    '''
    def setter(macaroons):
        jar.set_cookie(utils.cookie(
            url=url,
            name=name,
            value=utils.serialize(macaroons),
        ))
    return setter
