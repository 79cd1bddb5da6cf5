# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
from bakeryclient.utils import visit_page_with_browser
from bakeryclient.httpbakery.error import InteractionError


class WebBrowserVisitor:
    ''' Handles interaction-required errors by opening a web browser
    on the visit URL, to allow the user to prove their credentials
    interactively.

    @param open the function used to open the browser, called with the
    visit URL. It defaults to visit_page_with_browser.
    '''
    def __init__(self, open=None):
        if open is None:
            open = visit_page_with_browser
        self._open_web_browser = open

    def __call__(self, error):
        if error.info is None or not error.info.visit_url:
            raise InteractionError(
                'interaction required but no visit URL provided')
        self._open_web_browser(error.info.visit_url)
