# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.

from bakeryclient.discharge import discharge_all
from bakeryclient.store import (
    BakeryStorage,
    CHARMSTORE_KEY,
    IDENTITY_KEY,
    MemoryStore,
    cookie_jar_setter,
    storage_key,
)
from bakeryclient.utils import (
    b64decode,
    deserialize,
    macaroon_from_dict,
    macaroon_to_dict,
    serialize,
)

__all__ = [
    'BakeryStorage',
    'CHARMSTORE_KEY',
    'IDENTITY_KEY',
    'MemoryStore',
    'b64decode',
    'cookie_jar_setter',
    'deserialize',
    'discharge_all',
    'macaroon_from_dict',
    'macaroon_to_dict',
    'serialize',
    'storage_key',
]
