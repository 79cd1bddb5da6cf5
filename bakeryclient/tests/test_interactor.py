# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
from unittest import TestCase

from httmock import response
import requests

from bakeryclient import httpbakery
from bakeryclient.httpbakery import (
    Interactor,
    InteractionError,
    closed_connection_response,
)
from bakeryclient.tests import common

WAIT_URL = 'https://idp.example.com/wait'
VISIT_URL = 'https://idp.example.com/visit'


def interaction_error(wait_url=WAIT_URL):
    return httpbakery.Error.from_dict({
        'Code': 'interaction required',
        'Info': {'VisitURL': VISIT_URL, 'WaitURL': wait_url},
    })


class TestInteractor(TestCase):
    def setUp(self):
        self.visited = []

    def test_interact(self):
        transport = common.FakeTransport(
            lambda call: common.ok({'Macaroon': {'identifier': 'id'}}))
        interactor = Interactor(transport, self.visited.append)
        err = interaction_error()
        resp = interactor.interact(err)
        self.assertEqual(resp.json(), {'Macaroon': {'identifier': 'id'}})
        self.assertEqual(self.visited, [err])
        self.assertEqual(len(transport.calls), 1)
        call = transport.calls[0]
        self.assertEqual(call.url, WAIT_URL)
        self.assertEqual(call.method, 'get')
        self.assertEqual(call.headers, {'Content-Type': 'application/json'})
        self.assertIsNone(call.body)
        self.assertFalse(call.with_credentials)

    def test_timeout_retries(self):
        transport = common.FakeTransport(
            lambda call: closed_connection_response())
        interactor = Interactor(transport, self.visited.append)
        # The last timeout falls through to the normal evaluation, which
        # finds no error in it.
        resp = interactor.interact(interaction_error())
        self.assertEqual(resp.status_code, 0)
        self.assertEqual(len(transport.calls), 6)
        self.assertEqual(len(self.visited), 1)

    def test_timeout_then_success(self):
        responses = [
            closed_connection_response(),
            closed_connection_response(),
            common.ok({'Macaroon': {'identifier': 'id'}}),
        ]
        transport = common.FakeTransport(lambda call: responses.pop(0))
        interactor = Interactor(transport, self.visited.append)
        resp = interactor.interact(interaction_error())
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(transport.calls), 3)

    def test_connection_error_retries(self):
        def handler(call):
            raise requests.ConnectionError('connection closed')

        transport = common.FakeTransport(handler)
        interactor = Interactor(transport, self.visited.append)
        with self.assertRaises(requests.ConnectionError):
            interactor.interact(interaction_error())
        self.assertEqual(len(transport.calls), 6)

    def test_max_retries(self):
        transport = common.FakeTransport(
            lambda call: closed_connection_response())
        interactor = Interactor(transport, self.visited.append, max_retries=2)
        interactor.interact(interaction_error())
        self.assertEqual(len(transport.calls), 3)

    def test_status_zero_with_content_is_not_a_timeout(self):
        transport = common.FakeTransport(
            lambda call: response(status_code=0, content='partial'))
        interactor = Interactor(transport, self.visited.append)
        interactor.interact(interaction_error())
        self.assertEqual(len(transport.calls), 1)

    def test_wait_error(self):
        transport = common.FakeTransport(lambda call: response(
            status_code=401,
            content={'Code': 'unauthorized', 'Message': 'login failed'},
            headers=common.JSON_HEADERS))
        interactor = Interactor(transport, self.visited.append)
        with self.assertRaises(InteractionError) as cm:
            interactor.interact(interaction_error())
        self.assertEqual(str(cm.exception), 'cannot interact: login failed')
        self.assertIsNone(cm.exception.response)

    def test_wait_unparseable_error(self):
        transport = common.FakeTransport(lambda call: response(
            status_code=407, content='<html>', headers=common.JSON_HEADERS))
        interactor = Interactor(transport, self.visited.append)
        with self.assertRaises(InteractionError) as cm:
            interactor.interact(interaction_error())
        self.assertEqual(str(cm.exception), 'cannot interact: ')

    def test_relative_wait_url(self):
        transport = common.FakeTransport(lambda call: common.ok())
        interactor = Interactor(transport, self.visited.append)
        interactor.interact(interaction_error(wait_url='wait'),
                            'https://idp.example.com/discharge')
        self.assertEqual(transport.calls[0].url,
                         'https://idp.example.com/discharge/wait')

    def test_no_wait_url(self):
        transport = common.FakeTransport(lambda call: common.ok())
        interactor = Interactor(transport, self.visited.append)
        err = httpbakery.Error.from_dict({'Code': 'interaction required'})
        with self.assertRaises(InteractionError):
            interactor.interact(err)
        self.assertEqual(transport.calls, [])
        self.assertEqual(self.visited, [])


class TestWebBrowserVisitor(TestCase):
    def test_visit(self):
        opened = []
        visitor = httpbakery.WebBrowserVisitor(open=opened.append)
        visitor(interaction_error())
        self.assertEqual(opened, [VISIT_URL])

    def test_no_visit_url(self):
        visitor = httpbakery.WebBrowserVisitor(open=lambda url: None)
        err = httpbakery.Error.from_dict({'Code': 'interaction required'})
        with self.assertRaises(InteractionError):
            visitor(err)
