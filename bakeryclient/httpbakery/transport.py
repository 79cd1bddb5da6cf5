# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
import logging

import requests

log = logging.getLogger(__name__)

TIME_OUT = 30


class RequestsTransport:
    '''RequestsTransport sends HTTP requests using the requests library.

    It is called with the URL, the method, the headers, the body and
    whether credentials (cookies) must be included, and returns the
    requests.Response. Network failures are raised as requests exceptions.

    @param cookies storage for the cookies {CookieJar} sent along with
    requests including credentials. If not provided, one will be created.
    @param timeout the requests timeout in seconds, or None to wait forever.
    '''
    def __init__(self, cookies=None, timeout=TIME_OUT):
        if cookies is None:
            cookies = requests.cookies.RequestsCookieJar()
        self.cookies = cookies
        self._timeout = timeout

    def __call__(self, url, method, headers, body, with_credentials):
        kwargs = {}
        if with_credentials:
            kwargs['cookies'] = self.cookies
        log.debug('%s %s', method.upper(), url)
        resp = requests.request(
            method=method,
            url=url,
            headers=headers,
            data=body,
            timeout=self._timeout,
            **kwargs
        )
        if with_credentials:
            self.cookies.update(resp.cookies)
        return resp


def closed_connection_response(url=None):
    ''' Return the response describing a connection closed by the server
    before any response was sent: it has a zero status and no content.
    '''
    resp = requests.Response()
    resp.status_code = 0
    resp._content = b''
    resp.url = url
    return resp


def is_closed_connection(response):
    ''' Report whether the given response is the signature of a connection
    closed by the server, as happens when a long poll times out.
    '''
    return (response.status_code == 0 and not response.content and
            not response.text)
