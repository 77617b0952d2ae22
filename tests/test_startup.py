import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from api.dependencies import get_page, get_theme
from glossary_page.config import HostConfig
from glossary_page.host import (
    THEME_STORAGE_KEY,
    ApplicationPorts,
    HostDocument,
    InMemoryClipboard,
    InMemoryKeyValueStore,
    PortName,
    ThemePersistence,
    start_host,
)
from glossary_page.host.startup import editor_command
from glossary_page.parsing import HtmlGlossaryParser


PAGE = """
<html><body>
<div id="glossary-page-outer" tabindex="-1">
<div id="glossary-page-container" data-default-theme="dark" data-enable-last-updated-dates="true">
  <h1 id="glossary-page-title">Glossary</h1>
  <article id="glossary-page-items">
    <dl>
      <div data-id="http">
        <dt><dfn><abbr>HTTP</abbr></dfn></dt>
        <dd>Hypertext Transfer Protocol.</dd>
        <dd class="related-terms"><a href="#tcp">TCP</a></dd>
      </div>
      <div data-id="tcp"><dt><dfn>TCP</dfn></dt></div>
    </dl>
  </article>
</div>
</div>
</body></html>
"""


class FakeCore:
    def __init__(self, flags):
        self.flags = flags
        self.ports = ApplicationPorts()


def start(url="http://localhost:3000/#tcp", store=None):
    return start_host(
        PAGE,
        FakeCore,
        store=store or InMemoryKeyValueStore(),
        clipboard=InMemoryClipboard(),
        url=url,
    )


def test_start_host_initialises_core_with_flags():
    host = start(store=InMemoryKeyValueStore({THEME_STORAGE_KEY: "light"}))

    flags = host.core.flags
    assert flags["titleString"] == "Glossary"
    assert flags["glossaryItems"][0]["preferredTerm"] == {"isAbbreviation": True, "body": "HTTP"}
    assert flags["glossaryItems"][0]["relatedTerms"] == [{"idReference": "tcp", "body": "TCP"}]
    assert flags["enableLastUpdatedDates"] is True
    assert flags["theme"] == "light"
    assert flags["katexIsAvailable"] is False
    assert all(item["idIsPersisted"] for item in flags["glossaryItems"])


def test_theme_flag_falls_back_to_page_default():
    assert start().flags["theme"] == "dark"


def test_bridge_is_wired_to_core_ports():
    host = start()
    received = []
    host.core.ports[PortName.RECEIVE_UUID_FOR_ADDING_ROW].subscribe(received.append)

    host.core.ports[PortName.GENERATE_UUID].send()

    assert len(received) == 1


def test_dom_ready_applies_theme_and_focus():
    host = start()
    host.on_dom_ready()
    document = host.document

    assert document.has_class(document.root, "dark")
    assert document.body["style"] == "visibility: visible"
    assert document.active_element.get("id") == "glossary-page-outer"
    assert [e.get("data-id") for e in document.scrolled_into_view] == []


def test_dom_ready_scrolls_fragment_into_view():
    document = HostDocument(PAGE.replace('<div data-id="tcp">', '<div data-id="tcp" id="tcp">'), url="http://x/#tcp")
    host = start_host(document, FakeCore, store=InMemoryKeyValueStore(), clipboard=InMemoryClipboard())
    host.on_dom_ready()

    assert [e.get("id") for e in document.scrolled_into_view] == ["tcp"]


def test_focus_returns_to_outer_element_when_lost():
    host = start()
    host.document.active_element = None
    host.on_focus_lost(None)

    assert host.document.active_element.get("id") == "glossary-page-outer"


def test_file_url_shows_notice_instead_of_starting():
    document = HostDocument(
        PAGE.replace("<body>", '<body style="visibility: hidden">'), url="file:///home/me/my%20terms.html"
    )
    host = start_host(document, FakeCore, store=InMemoryKeyValueStore(), clipboard=InMemoryClipboard())

    assert host.core is None
    assert host.bridge is None
    container = document.get_element_by_id("glossary-page-container")
    assert document.get_element_by_id("glossary-page-items") is None
    assert "version control" in container.get_text()
    assert container.find("code").get_text() == editor_command("my terms.html")
    assert "FILE=my terms.html node" in container.find("code").get_text()


def test_file_url_notice_still_gets_dom_ready_steps():
    document = HostDocument(PAGE.replace("<body>", '<body style="visibility: hidden">'), url="file:///tmp/glossary.html")
    host = start_host(document, FakeCore, store=InMemoryKeyValueStore(), clipboard=InMemoryClipboard())
    host.on_dom_ready()

    assert document.body["style"] == "visibility: visible"
    assert document.has_class(document.root, "dark")
    assert document.active_element.get("id") == "glossary-page-outer"


def test_editor_command_defaults_to_glossary_html():
    assert editor_command() == "sed -n '/START OF editor.js$/,$p' glossary.html | FILE=glossary.html node"


def test_missing_container_does_not_start():
    assert start_host("<html><body></body></html>", FakeCore, InMemoryKeyValueStore(), InMemoryClipboard()) is None


@pytest.fixture
def client():
    page = HtmlGlossaryParser().parse(PAGE)
    store = InMemoryKeyValueStore()
    app = create_app()
    app.dependency_overrides[get_page] = lambda: page
    app.dependency_overrides[get_theme] = lambda: ThemePersistence(store, page.config.default_theme)
    return TestClient(app)


def test_api_serves_glossary(client):
    response = client.get("/glossary")
    assert response.status_code == 200
    assert response.json()["titleString"] == "Glossary"

    assert client.get("/glossary/items/tcp").json()["preferredTerm"]["body"] == "TCP"
    assert client.get("/glossary/items/nope").status_code == 404
    assert [i["id"] for i in client.get("/glossary/items").json()] == ["http", "tcp"]


def test_api_theme_roundtrip(client):
    assert client.get("/theme").json() == {"theme": "dark", "stored": None, "dark": True}

    response = client.put("/theme", json={"theme": "light"})
    assert response.json() == {"theme": "light", "stored": "light", "dark": False}

    assert client.put("/theme", json={"theme": "neon"}).status_code == 400
    assert client.delete("/theme").json()["stored"] is None


def test_api_reads_glossary_file_from_given_config(tmp_path):
    html_path = tmp_path / "glossary.html"
    html_path.write_text(PAGE, encoding="utf-8")
    config = HostConfig(
        glossary_html_path=str(html_path),
        database_url=f"sqlite+pysqlite:///{tmp_path / 'settings.db'}",
        cors_origins=["http://localhost:3000"],
    )
    client = TestClient(create_app(config))

    assert client.get("/healthz").json() == {"status": "ok", "glossaryFileFound": True}
    assert [i["id"] for i in client.get("/glossary/items").json()] == ["http", "tcp"]
    assert client.put("/theme", json={"theme": "light"}).json()["stored"] == "light"
    assert client.get("/theme").json()["theme"] == "light"


def test_api_reports_missing_glossary_file(tmp_path):
    config = HostConfig(
        glossary_html_path=str(tmp_path / "absent.html"),
        database_url=f"sqlite+pysqlite:///{tmp_path / 'settings.db'}",
    )
    client = TestClient(create_app(config))

    assert client.get("/healthz").json()["glossaryFileFound"] is False
    assert client.get("/glossary").status_code == 404
