# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
from collections import namedtuple
import logging

log = logging.getLogger(__name__)

# _NeedCaveat holds a third party caveat that still needs a discharge,
# together with the location of the macaroon it was found in.
_NeedCaveat = namedtuple('_NeedCaveat', 'cav, location')


def discharge_all(m, get_discharge):
    '''Gathers discharge macaroons for all the third party caveats in m
    (and any subsequent caveats required by those) using get_discharge to
    acquire each discharge macaroon.

    The caveats are discharged one at a time, in the order they are
    found. get_discharge is called with the location of the primary
    macaroon, the location of the third party and the caveat id (bytes),
    and must return the discharge as a pymacaroons.Macaroon.

    It returns a list of macaroons with m as the first element, followed by
    all the discharge macaroons. All the discharge macaroons are bound to
    the primary macaroon.

    @param m the primary pymacaroons.Macaroon.
    @param get_discharge the function used to acquire a discharge.
    @return a list of pymacaroons.Macaroon.
    '''
    primary = m
    discharges = [primary]
    need = []

    def add_caveats(m):
        for cav in m.third_party_caveats():
            if cav.location is None or cav.location == '':
                continue
            need.append(_NeedCaveat(cav=cav, location=primary.location))

    add_caveats(m)
    while len(need) > 0:
        cav = need[0]
        need = need[1:]
        log.debug('acquiring discharge from %s', cav.cav.location)
        dm = get_discharge(cav.location, cav.cav.location,
                           cav.cav.caveat_id_bytes)
        discharges.append(primary.prepare_for_request(dm))
        add_caveats(dm)
    return discharges
