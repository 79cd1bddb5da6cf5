# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
import base64
import json
import logging
from urllib.parse import quote, urlencode

import requests

from bakeryclient import discharge_all, utils
from bakeryclient.httpbakery.error import (
    DischargeError,
    WWW_FORM_CONTENT_TYPE,
)

log = logging.getLogger(__name__)


class Discharger:
    ''' Discharger acquires the discharge macaroons needed by a macaroon,
    by requesting them from the third parties named in its caveats.

    The discharge requests are sent through the given client, so that a
    third party that itself requires a discharge or an interaction is dealt
    with like any other service.

    @param client the httpbakery.Client used to send discharge requests.
    '''
    def __init__(self, client):
        self._client = client

    def discharge(self, macaroon):
        ''' Discharge the given macaroon, acquiring any third party
        discharges.

        @param macaroon the macaroon to be discharged, in its JSON form.
        @return the JSON forms of the macaroon followed by all its bound
        discharges.
        @raises DischargeError if the discharge fails.
        '''
        try:
            m = utils.macaroon_from_dict(macaroon)
            discharges = discharge_all(m, self.get_third_party_discharge)
        except requests.RequestException:
            # Includes failures from the bakery itself, which already
            # carry a meaningful message.
            raise
        except Exception as exc:
            raise DischargeError('discharge failed: {}'.format(exc))
        return [utils.macaroon_to_dict(d) for d in discharges]

    def get_third_party_discharge(self, location, third_party_location,
                                  condition):
        ''' Obtain a discharge macaroon from the given third party location.

        @param location the location of the macaroon holding the caveat.
        @param third_party_location where to discharge the caveat.
        @param condition the caveat to be discharged {bytes}.
        @return the discharge macaroon {pymacaroons.Macaroon}.
        '''
        url = third_party_location + '/discharge'
        headers = {'Content-Type': WWW_FORM_CONTENT_TYPE}
        fields = []
        _add_form_binary_field(condition, fields, 'id')
        fields.append(('location', location or ''))
        body = urlencode(fields, quote_via=quote)
        log.info('requesting discharge from %s', url)
        resp = self._client.post(url, headers, body)
        # The response may be empty or invalid, for instance because of
        # an internal server error.
        try:
            json_resp = json.loads(resp.text)
        except ValueError:
            raise DischargeError('unable to parse macaroon.')
        if not isinstance(json_resp, dict) or not json_resp.get('Macaroon'):
            raise DischargeError('unable to parse macaroon.')
        return utils.macaroon_from_dict(json_resp['Macaroon'])


def _add_form_binary_field(b, fields, field):
    ''' Append the given field, holding the given val (bytes), to the form
    fields.
    If the value isn't valid utf-8, we base64 encode it and use field+"64"
    as the field name.
    '''
    try:
        fields.append((field, b.decode('utf-8')))
    except UnicodeDecodeError:
        fields.append((field + '64', base64.b64encode(b).decode('utf-8')))
