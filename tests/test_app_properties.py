"""
Tests for the HTTP redirect service.

Every domain path answers with a 301: to the resolved locator on success,
to the fallback page on any failure.
"""

import io

import pytest
from fastapi.testclient import TestClient
from hypothesis import given, settings
from hypothesis import strategies as st
from solders.pubkey import Pubkey

from name_resolver.app import create_app
from name_resolver.audit_logger import AuditLogger
from name_resolver.config import ResolverConfig, ServerConfig
from name_resolver.enums import EncodingVersion, RecordType, TransportErrorCode
from name_resolver.exceptions import TransportError
from name_resolver.formatter import format_url
from name_resolver.orchestrator import ResolutionOrchestrator

from fake_chain import SAMPLE_VALUES, FakeRpc, legacy_record, v2_record


ERROR_URL = "https://sol-domain.org"


def make_client(fake: FakeRpc, config: ResolverConfig = None) -> tuple[TestClient, AuditLogger]:
    logger = AuditLogger(output_stream=io.StringIO())
    app = create_app(config, orchestrator=ResolutionOrchestrator(fake), logger=logger)
    return TestClient(app), logger


class TestHomeRoute:
    """GET / answers with the greeting."""

    def test_home_message(self) -> None:
        client, _ = make_client(FakeRpc())
        response = client.get("/")
        assert response.status_code == 200
        assert response.text == "Visit https://bonfida.org"

    def test_home_message_is_configurable(self) -> None:
        config = ResolverConfig(server=ServerConfig(home_message="hello"))
        client, _ = make_client(FakeRpc(), config)
        assert client.get("/").text == "hello"


class TestRedirectRoute:
    """GET /{domain} always answers 301."""

    def test_url_record_redirects(self) -> None:
        fake = FakeRpc()
        name_key = fake.register_domain("bonfida", Pubkey.new_unique())
        fake.set_record(name_key, RecordType.URL, EncodingVersion.V1, legacy_record(b"https://www.sns.id/", padding=32))

        client, _ = make_client(fake)
        response = client.get("/bonfida.sol", follow_redirects=False)
        assert response.status_code == 301
        assert response.headers["location"] == "https://www.sns.id/"

    def test_ipfs_record_redirects_to_gateway(self) -> None:
        owner = Pubkey.new_unique()
        fake = FakeRpc()
        name_key = fake.register_domain("bonfida", owner)
        cid = "bafybeic4snhbvdwop4z5q6bzcmprrzeoph5ewgv7mackpqe2wvppkc4meu"
        fake.set_record(name_key, RecordType.IPFS, EncodingVersion.V2, v2_record(cid.encode(), staleness_id=bytes(owner)))

        client, _ = make_client(fake)
        response = client.get("/bonfida", follow_redirects=False)
        assert response.status_code == 301
        assert response.headers["location"] == f"https://cloudflare-ipfs.com/ipfs/{cid}"

    @given(record_type=st.sampled_from(list(RecordType)))
    @settings(max_examples=12, deadline=None)
    def test_every_record_type_redirects_to_its_formatted_url(self, record_type: RecordType) -> None:
        fake = FakeRpc()
        name_key = fake.register_domain("bonfida", Pubkey.new_unique())
        fake.set_legacy(name_key, record_type)

        client, _ = make_client(fake)
        response = client.get("/bonfida", follow_redirects=False)
        assert response.status_code == 301
        assert response.headers["location"] == format_url(record_type, SAMPLE_VALUES[record_type])

    @pytest.mark.parametrize("path", ["/unknown-domain", "/x.y.z.w", "/a..b"])
    def test_failures_redirect_to_error_page(self, path: str) -> None:
        client, _ = make_client(FakeRpc())
        response = client.get(path, follow_redirects=False)
        assert response.status_code == 301
        assert response.headers["location"] == ERROR_URL

    def test_domain_without_records_redirects_to_error_page(self) -> None:
        fake = FakeRpc()
        fake.register_domain("bonfida", Pubkey.new_unique())
        client, _ = make_client(fake)
        response = client.get("/bonfida", follow_redirects=False)
        assert response.headers["location"] == ERROR_URL

    def test_transport_failure_redirects_to_error_page(self) -> None:
        fake = FakeRpc()
        fake.error = TransportError(
            code=TransportErrorCode.HTTP_ERROR.value,
            message="RPC request failed with HTTP 503",
        )
        client, logger = make_client(fake)
        response = client.get("/bonfida", follow_redirects=False)
        assert response.status_code == 301
        assert response.headers["location"] == ERROR_URL

        errors = [e for e in logger.entries if e.level.value == "error"]
        assert errors[0].data["error_code"] == "http_error"

    def test_error_url_is_configurable(self) -> None:
        config = ResolverConfig(server=ServerConfig(error_url="https://example.com/missing"))
        client, _ = make_client(FakeRpc(), config)
        response = client.get("/bonfida", follow_redirects=False)
        assert response.headers["location"] == "https://example.com/missing"


class TestRequestLogging:
    """Each request is logged with method, path and status."""

    def test_requests_are_logged(self) -> None:
        client, logger = make_client(FakeRpc())
        client.get("/")
        client.get("/bonfida", follow_redirects=False)

        requests = [e for e in logger.entries if e.component == "HttpServer"]
        assert [(e.data["path"], e.data["status_code"]) for e in requests] == [
            ("/", 200),
            ("/bonfida", 301),
        ]
        assert all(e.data["method"] == "GET" for e in requests)

    def test_log_history_stays_bounded(self) -> None:
        logger = AuditLogger(output_stream=io.StringIO(), history_size=50)
        app = create_app(orchestrator=ResolutionOrchestrator(FakeRpc()), logger=logger)
        client = TestClient(app)
        for _ in range(500):
            client.get("/")

        entries = logger.entries
        assert len(entries) == 50
        assert all(e.data["path"] == "/" for e in entries)


class TestUnexpectedFailures:
    """Errors outside the resolver taxonomy still redirect to the error page."""

    @pytest.mark.parametrize("error", [RuntimeError("boom"), KeyError("value"), ValueError("bad url")])
    def test_unexpected_error_redirects_to_error_page(self, error: Exception) -> None:
        fake = FakeRpc()
        fake.error = error
        client, logger = make_client(fake)
        response = client.get("/bonfida", follow_redirects=False)

        assert response.status_code == 301
        assert response.headers["location"] == ERROR_URL
        errors = [e for e in logger.entries if e.level.value == "error"]
        assert errors[0].data["error_type"] == type(error).__name__
        assert errors[0].data["domain"] == "bonfida"
